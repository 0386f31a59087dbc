"""Read-only views over the live snapshots.

These never query Firestore directly; they return whatever the
subscriptions last delivered.
"""
from fastapi import APIRouter, Depends

from clinic.api.deps import get_clinic_state, require_authorized
from clinic.services.history import filter_patients

router = APIRouter(tags=["records"])


@router.get("/patients")
async def list_patients(gate=Depends(require_authorized), clinic=Depends(get_clinic_state)):
    return {"items": [p.flat() for p in clinic.patients.snapshot()]}


@router.get("/patients/search")
async def search_patients(q: str = "", gate=Depends(require_authorized), clinic=Depends(get_clinic_state)):
    return {"items": [p.flat() for p in filter_patients(clinic.patients.snapshot(), q)]}


@router.get("/sessions")
async def list_sessions(gate=Depends(require_authorized), clinic=Depends(get_clinic_state)):
    """Flat legacy ``sessions`` collection; visits live under each patient."""
    return {"items": [s.flat() for s in clinic.sessions.snapshot()]}


@router.get("/reviews")
async def list_reviews(gate=Depends(require_authorized), clinic=Depends(get_clinic_state)):
    return {"items": [r.flat() for r in clinic.reviews.snapshot()]}
