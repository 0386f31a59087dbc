"""Workspace routes: tab switching, form drafts, history lookup and timer.

Each route acts on the panel currently mounted in the caller's
workspace; acting on a panel that is not open returns 409.
"""
from typing import Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException

from clinic.api.deps import get_workspace
from clinic.models.schemas import PanelSwitch, SelectPatient
from clinic.services.workspace import REVIEW, TIMER, PanelNotMounted

router = APIRouter(prefix="/workspace", tags=["workspace"])


def _panel(ws, name: str):
    try:
        return ws.require(name)
    except PanelNotMounted as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc


@router.get("/")
def get_workspace_view(ws=Depends(get_workspace)):
    return ws.view()


@router.post("/panel")
def switch_panel(payload: PanelSwitch = Body(...), ws=Depends(get_workspace)):
    ws.switch(payload.panel)
    return ws.view()


# -------------------------
# Drafts
# -------------------------
@router.patch("/draft")
def update_draft(fields: Dict[str, Optional[str]] = Body(...), ws=Depends(get_workspace)):
    try:
        form = ws.form
        form.update(**fields)
    except PanelNotMounted as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return {"panel": ws.panel.name, "draft": dict(form.draft)}


@router.post("/submit")
def submit_draft(ws=Depends(get_workspace)):
    try:
        form = ws.form
    except PanelNotMounted as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc

    result = form.submit()
    return {
        "ok": result.ok,
        "message": result.message,
        "id": result.id,
        "draft": dict(form.draft),
    }


# -------------------------
# Patient history
# -------------------------
@router.get("/history")
def history_view(ws=Depends(get_workspace)):
    return _panel(ws, REVIEW).history.view()


@router.get("/history/search")
def history_search(q: str = "", ws=Depends(get_workspace)):
    history = _panel(ws, REVIEW).history
    return {"search": q, "items": [p.flat() for p in history.search(q)]}


@router.post("/history/select")
def history_select(payload: SelectPatient = Body(...), ws=Depends(get_workspace)):
    history = _panel(ws, REVIEW).history
    patient = ws.clinic_state.patient(payload.patient_id)
    if patient is None:
        raise HTTPException(status_code=404, detail="Patient not found")
    history.select(patient)
    return history.view()


@router.post("/history/deselect")
def history_deselect(ws=Depends(get_workspace)):
    history = _panel(ws, REVIEW).history
    history.deselect()
    return history.view()


@router.post("/history/intake")
def history_toggle_intake(ws=Depends(get_workspace)):
    history = _panel(ws, REVIEW).history
    history.toggle_intake()
    return history.view()


# -------------------------
# Timer
# -------------------------
@router.get("/timer")
def timer_view(ws=Depends(get_workspace)):
    return _panel(ws, TIMER).timer.view()


@router.post("/timer/{action}")
def timer_action(action: str, ws=Depends(get_workspace)):
    timer = _panel(ws, TIMER).timer
    actions = {
        "start": timer.start,
        "pause": timer.pause,
        "reset": timer.reset,
        "toggle": timer.toggle,
    }
    if action not in actions:
        raise HTTPException(status_code=404, detail=f"Unknown timer action: {action}")
    actions[action]()
    return timer.view()
