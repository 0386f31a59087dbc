"""Pydantic model for a review stored in the flat ``reviews`` collection."""
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from clinic.models.record import as_text


class Review(BaseModel):
    model_config = ConfigDict(frozen=True)

    patient_id: str = ""
    patient_name: str = ""
    diagnosis: str = ""
    treatment: str = ""
    notes: str = ""
    date: str = ""
    time: str = ""
    created_at: Optional[Any] = None

    @field_validator(
        "patient_id", "patient_name", "diagnosis", "treatment", "notes", "date", "time",
        mode="before",
    )
    @classmethod
    def coerce_text(cls, v):
        return as_text(v)
