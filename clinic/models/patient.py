"""Pydantic models for patients stored in Firestore (``patients``)."""
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from clinic.models.record import as_text


class Patient(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = ""
    # Entered as text in the registration form, stored as-is
    age: str = ""
    profession: str = ""
    consultation_reason: str = ""
    medical_history: str = ""
    # Firestore timestamp, or its display string once transformed
    registered_at: Optional[Any] = None
    search_key: Optional[str] = None

    @field_validator(
        "name", "age", "profession", "consultation_reason", "medical_history",
        mode="before",
    )
    @classmethod
    def coerce_text(cls, v):
        return as_text(v)

    @field_validator("search_key", mode="before")
    @classmethod
    def coerce_search_key(cls, v):
        return None if v is None else as_text(v)

    def intake_summary(self) -> dict:
        return {
            "age": self.age,
            "profession": self.profession,
            "consultation_reason": self.consultation_reason,
            "medical_history": self.medical_history,
            "registered_at": self.registered_at if isinstance(self.registered_at, str) else "No date",
        }
