"""
Per-user workspace: the tab switcher of the main application.

Exactly one panel is mounted at a time. Switching tabs closes the current
panel, which drops its draft and any per-patient subscription. The timer
belongs to the workspace and survives tab switches.
"""
from __future__ import annotations

import threading
from typing import Dict

from clinic.services.forms import PatientForm, ReviewForm, SessionForm
from clinic.services.history import PatientHistory
from clinic.services.logger import log_debug
from clinic.services.timer import SessionTimer

REGISTRATION = "registration"
SESSION = "session"
REVIEW = "review"
TIMER = "timer"

PANELS = (REGISTRATION, SESSION, REVIEW, TIMER)


class PanelNotMounted(Exception):
    def __init__(self, wanted: str, active: str):
        super().__init__(f"Panel '{wanted}' is not open (active: '{active}')")
        self.wanted = wanted
        self.active = active


class RegistrationPanel:
    name = REGISTRATION

    def __init__(self, store):
        self.form = PatientForm(store)

    def view(self):
        return {"draft": dict(self.form.draft)}

    def close(self):
        pass


class SessionPanel:
    name = SESSION

    def __init__(self, store, clinic_state):
        self.form = SessionForm(store, clinic_state)

    def view(self):
        return {
            "draft": dict(self.form.draft),
            "patients": [{"id": pid, "name": name} for pid, name in self.form.choices()],
        }

    def close(self):
        pass


class ReviewPanel:
    name = REVIEW

    def __init__(self, store, clinic_state, date_format):
        self.history = PatientHistory(store, clinic_state, date_format)
        self.form = ReviewForm(store, self.history)

    def view(self):
        return {"draft": dict(self.form.draft), "history": self.history.view()}

    def close(self):
        self.history.close()


class TimerPanel:
    name = TIMER

    def __init__(self, timer: SessionTimer):
        self.timer = timer

    def view(self):
        return {"timer": self.timer.view()}

    def close(self):
        pass


class Workspace:
    def __init__(self, store, clinic_state, date_format: str, timer: SessionTimer):
        self.store = store
        self.clinic_state = clinic_state
        self.date_format = date_format
        self.timer = timer
        self.panel = self._mount(REGISTRATION)

    def _mount(self, name: str):
        if name == REGISTRATION:
            return RegistrationPanel(self.store)
        if name == SESSION:
            return SessionPanel(self.store, self.clinic_state)
        if name == REVIEW:
            return ReviewPanel(self.store, self.clinic_state, self.date_format)
        if name == TIMER:
            return TimerPanel(self.timer)
        raise ValueError(f"Unknown panel: {name}")

    def switch(self, name: str):
        if name not in PANELS:
            raise ValueError(f"Unknown panel: {name}")
        if name == self.panel.name:
            return self.panel
        self.panel.close()
        self.panel = self._mount(name)
        log_debug("panel_switched", {"panel": name})
        return self.panel

    def require(self, name: str):
        if self.panel.name != name:
            raise PanelNotMounted(name, self.panel.name)
        return self.panel

    @property
    def form(self):
        form = getattr(self.panel, "form", None)
        if form is None:
            raise PanelNotMounted("form", self.panel.name)
        return form

    def view(self) -> dict:
        return {"panel": self.panel.name, "panels": list(PANELS), **self.panel.view()}

    def close(self):
        self.panel.close()
        self.timer.close()


class WorkspaceRegistry:
    def __init__(self, store, clinic_state, date_format: str, tick_seconds: float = 1.0,
                 timer_factory=None):
        self.store = store
        self.clinic_state = clinic_state
        self.date_format = date_format
        self.tick_seconds = tick_seconds
        self._timer_factory = timer_factory or (lambda: SessionTimer(interval=tick_seconds))
        self._workspaces: Dict[str, Workspace] = {}
        self._lock = threading.Lock()

    def get(self, uid: str) -> Workspace:
        with self._lock:
            ws = self._workspaces.get(uid)
            if ws is None:
                ws = Workspace(self.store, self.clinic_state, self.date_format, self._timer_factory())
                self._workspaces[uid] = ws
            return ws

    def discard(self, uid: str):
        with self._lock:
            ws = self._workspaces.pop(uid, None)
        if ws is not None:
            ws.close()

    def close(self):
        with self._lock:
            workspaces, self._workspaces = list(self._workspaces.values()), {}
        for ws in workspaces:
            ws.close()
