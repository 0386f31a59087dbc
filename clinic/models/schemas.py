from pydantic import BaseModel, Field
from typing import Literal

# Request bodies for the workspace endpoints

Panel = Literal["registration", "session", "review", "timer"]


class PanelSwitch(BaseModel):
    panel: Panel


class SelectPatient(BaseModel):
    patient_id: str = Field(..., min_length=1)
