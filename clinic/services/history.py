"""
Patient history lookup.

Search runs in memory over the patients snapshot. Selecting a patient
opens a live subscription on ``patients/{id}/sessions``; at most one such
subscription exists per PatientHistory.
"""
from __future__ import annotations

from typing import List, Optional

from clinic.models.patient import Patient
from clinic.models.record import Stored
from clinic.services.logger import log_debug
from clinic.services.subscriptions import LiveCollection
from clinic.services.time_utils import display_date, parse_date


def filter_patients(patients: List[Stored[Patient]], text: str) -> List[Stored[Patient]]:
    """Case-insensitive substring match on name OR profession."""
    if not text:
        return []
    needle = text.lower()
    return [
        p for p in patients
        if needle in (p.record.name or "").lower()
        or needle in (p.record.profession or "").lower()
    ]


def session_entry(doc, date_format: str) -> dict:
    data = doc.to_dict() or {}
    raw_date = data.get("date")
    return {
        **data,
        "id": doc.id,
        "date": display_date(raw_date, date_format),
        "_sort_key": parse_date(raw_date, date_format),
    }


def sort_sessions(entries: List[dict]) -> List[dict]:
    """Newest first by parsed date; entries without a usable date go last."""
    dated = [e for e in entries if e["_sort_key"] is not None]
    undated = [e for e in entries if e["_sort_key"] is None]
    dated.sort(key=lambda e: e["_sort_key"], reverse=True)
    return dated + undated


class _SessionHistory(LiveCollection):
    """Per-patient session list, re-sorted client side on every emission."""

    def __init__(self, store, patient_id: str, date_format: str):
        super().__init__(
            store.patient_sessions(patient_id),
            lambda doc: session_entry(doc, date_format),
            f"patients/{patient_id}/sessions",
        )

    def _prepare(self, items):
        return sort_sessions(items)

    def snapshot(self):
        return [
            {k: v for k, v in e.items() if k != "_sort_key"}
            for e in super().snapshot()
        ]


class PatientHistory:
    def __init__(self, store, clinic_state, date_format: str):
        self.store = store
        self.clinic_state = clinic_state
        self.date_format = date_format

        self.search_text = ""
        self.selected: Optional[Stored[Patient]] = None
        self.show_intake = False
        self._sessions: Optional[_SessionHistory] = None

    def search(self, text: str) -> List[Stored[Patient]]:
        self.search_text = text or ""
        return filter_patients(self.clinic_state.patients.snapshot(), self.search_text)

    def select(self, patient: Stored[Patient]):
        self.search_text = ""
        self.show_intake = False
        self._close_sessions()

        self.selected = patient
        self._sessions = _SessionHistory(self.store, patient.id, self.date_format)
        self._sessions.start()
        log_debug("history_selected", {"patient_id": patient.id})

    def deselect(self):
        self._close_sessions()
        self.selected = None
        self.show_intake = False

    def toggle_intake(self) -> bool:
        if self.selected is not None:
            self.show_intake = not self.show_intake
        return self.show_intake

    @property
    def subscription_active(self) -> bool:
        return self._sessions is not None and self._sessions.active

    def sessions(self) -> List[dict]:
        if self._sessions is None:
            return []
        return self._sessions.snapshot()

    def view(self) -> dict:
        out = {
            "search": self.search_text,
            "selected": self.selected.flat() if self.selected else None,
            "show_intake": self.show_intake,
            "intake": None,
            "sessions": self.sessions(),
        }
        if self.selected is not None and self.show_intake:
            out["intake"] = self.selected.record.intake_summary()
        if self.selected is not None:
            out["sessions_path"] = f"patients/{self.selected.id}/sessions"
        return out

    def _close_sessions(self):
        sessions, self._sessions = self._sessions, None
        if sessions is not None:
            sessions.close()

    def close(self):
        self.deselect()
