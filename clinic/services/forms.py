"""
Record entry forms.

A form keeps an editable draft shaped like the document it creates.
``submit`` checks the required fields locally, appends one document with
a server timestamp and resets the draft on success. On failure the draft
is left as it was so the user can retry.

Nothing is inserted locally: new records show up when the live
subscription emits again.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from firebase_admin import firestore

from clinic.services.logger import log_debug, log_error
from clinic.services.time_utils import now_hhmm, today_iso


@dataclass(frozen=True)
class FormResult:
    ok: bool
    message: str
    id: Optional[str] = None


class DraftForm:
    fields: Tuple[str, ...] = ()
    success_message = "Saved."
    failure_message = "Could not save."

    def __init__(self, store):
        self.store = store
        self.draft: Dict[str, str] = self.initial()

    def initial(self) -> Dict[str, str]:
        return {f: "" for f in self.fields}

    def update(self, **values):
        unknown = set(values) - set(self.fields)
        if unknown:
            raise ValueError(f"Unknown fields: {', '.join(sorted(unknown))}")
        for k, v in values.items():
            self.draft[k] = "" if v is None else str(v)

    def reset(self):
        self.draft = self.initial()

    # Subclasses
    def missing(self) -> Optional[str]:
        """Message when a required field is empty, else None."""
        return None

    def target(self):
        raise NotImplementedError

    def document(self) -> dict:
        raise NotImplementedError

    def submit(self) -> FormResult:
        problem = self.missing()
        if problem:
            return FormResult(ok=False, message=problem)

        try:
            _, doc_ref = self.target().add(self.document())
        except Exception as e:
            log_error(f"{type(self).__name__}_submit_failed", e, {"draft": self.draft})
            return FormResult(ok=False, message=self.failure_message)

        log_debug(f"{type(self).__name__}_submitted", {"id": doc_ref.id})
        self.reset()
        return FormResult(ok=True, message=self.success_message, id=doc_ref.id)


class PatientForm(DraftForm):
    fields = ("name", "age", "profession", "consultation_reason", "medical_history")
    success_message = "Patient registered successfully."
    failure_message = "Error registering patient."

    def missing(self):
        if not self.draft["name"] or not self.draft["age"]:
            return "Name and age are required."
        return None

    def target(self):
        return self.store.collection("patients")

    def document(self):
        return {
            **self.draft,
            "registered_at": firestore.SERVER_TIMESTAMP,
            "search_key": self.draft["name"].lower(),
        }


class SessionForm(DraftForm):
    fields = (
        "patient_id", "date", "time", "reason", "symptoms", "diagnosis",
        "treatment", "points", "tongue_body", "tongue_coating",
        "pulse_left", "pulse_right", "notes",
    )
    success_message = "Session saved to the patient's history."
    failure_message = "Error saving session."

    def __init__(self, store, clinic_state):
        self.clinic_state = clinic_state
        super().__init__(store)

    def initial(self):
        draft = super().initial()
        draft["date"] = today_iso()
        draft["time"] = now_hhmm()
        return draft

    def choices(self) -> List[Tuple[str, str]]:
        """Patient selector options, in snapshot order."""
        return [(p.id, p.record.name) for p in self.clinic_state.patients.snapshot()]

    def missing(self):
        if not self.draft["patient_id"] or not self.draft["date"]:
            return "Please select a patient and a date."
        return None

    def target(self):
        return self.store.patient_sessions(self.draft["patient_id"])

    def document(self):
        return {**self.draft, "created_at": firestore.SERVER_TIMESTAMP}


class ReviewForm(DraftForm):
    fields = ("diagnosis", "treatment", "notes")
    success_message = "Review saved."
    failure_message = "Error saving review."

    def __init__(self, store, history):
        self.history = history
        super().__init__(store)

    def missing(self):
        if self.history.selected is None:
            return "Select a patient first."
        if not self.draft["diagnosis"]:
            return "Diagnosis is required."
        return None

    def target(self):
        return self.store.collection("reviews")

    def document(self):
        patient = self.history.selected
        now = datetime.now()
        return {
            **self.draft,
            "patient_id": patient.id,
            "patient_name": patient.record.name,
            "date": now.strftime(self.history.date_format),
            "time": now.strftime("%H:%M:%S"),
            "created_at": firestore.SERVER_TIMESTAMP,
        }
