"""Stored-record wrapper: a Firestore document id composed with its data."""
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict

RecordT = TypeVar("RecordT", bound=BaseModel)


class Stored(BaseModel, Generic[RecordT]):
    model_config = ConfigDict(frozen=True)

    id: str
    record: RecordT

    def flat(self) -> dict:
        """Document fields plus ``id``, the shape returned by the API."""
        return {"id": self.id, **self.record.model_dump()}


def as_text(v):
    """Firestore documents are schemaless: None becomes "", anything else str()."""
    if v is None:
        return ""
    if isinstance(v, str):
        return v
    return str(v)
