"""Pydantic model for a clinical session (patient visit).

Stored under ``patients/{patient_id}/sessions``.
"""
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from clinic.models.record import as_text


class Session(BaseModel):
    model_config = ConfigDict(frozen=True)

    patient_id: str = ""
    # "YYYY-MM-DD" from the form; older documents may hold a timestamp
    date: Optional[Any] = None
    time: str = ""
    reason: str = ""
    symptoms: str = ""
    diagnosis: str = ""
    treatment: str = ""
    points: str = ""          # treated points, e.g. "IG4, H3, E36"
    tongue_body: str = ""
    tongue_coating: str = ""
    pulse_left: str = ""
    pulse_right: str = ""
    notes: str = ""
    created_at: Optional[Any] = None

    @field_validator(
        "patient_id", "time", "reason", "symptoms", "diagnosis", "treatment",
        "points", "tongue_body", "tongue_coating", "pulse_left", "pulse_right",
        "notes",
        mode="before",
    )
    @classmethod
    def coerce_text(cls, v):
        return as_text(v)
