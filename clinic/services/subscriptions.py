"""
Live collection subscriptions.

Each LiveCollection attaches a Firestore ``on_snapshot`` watch to a query
and keeps the latest full result set. Every emission replaces the whole
snapshot; nothing is merged incrementally.
"""
from __future__ import annotations

import threading
from typing import Any, Callable, List, Optional

from firebase_admin import firestore

from clinic.models.patient import Patient
from clinic.models.record import Stored
from clinic.models.review import Review
from clinic.models.session import Session
from clinic.services.logger import log_debug, log_error
from clinic.services.time_utils import display_date


class LiveCollection:
    def __init__(self, query, transform: Callable[[Any], Any], name: str):
        self.name = name
        self._query = query
        self._transform = transform
        self._items: List[Any] = []
        self._lock = threading.Lock()
        self._watch = None
        self.emissions = 0

    @property
    def active(self) -> bool:
        return self._watch is not None

    def start(self):
        if self._watch is not None:
            return
        self._watch = self._query.on_snapshot(self._on_snapshot)
        log_debug("subscription_started", {"name": self.name})

    def _on_snapshot(self, docs, changes, read_time):
        items = []
        for doc in docs:
            try:
                items.append(self._transform(doc))
            except Exception as e:
                # One malformed document must not hide the rest
                log_error(
                    "subscription_document_skipped",
                    e,
                    {"name": self.name, "id": getattr(doc, "id", None)},
                )

        try:
            items = self._prepare(items)
        except Exception as e:
            # Keep the previous snapshot; the panel shows stale data
            log_error("subscription_emission_failed", e, {"name": self.name})
            return

        with self._lock:
            self._items = items
            self.emissions += 1

        log_debug("subscription_emission", {"name": self.name, "count": len(items)})

    def _prepare(self, items: List[Any]) -> List[Any]:
        return items

    def snapshot(self) -> List[Any]:
        with self._lock:
            return list(self._items)

    def close(self):
        watch, self._watch = self._watch, None
        if watch is None:
            return
        try:
            watch.unsubscribe()
        except Exception as e:
            log_error("subscription_close_failed", e, {"name": self.name})
        log_debug("subscription_closed", {"name": self.name})


# -------------------------
# Document transforms
# -------------------------
def patient_from_doc(doc, date_format: str) -> Stored[Patient]:
    data = doc.to_dict() or {}
    data["registered_at"] = display_date(data.get("registered_at"), date_format)
    return Stored[Patient](id=doc.id, record=Patient(**data))


def session_from_doc(doc) -> Stored[Session]:
    return Stored[Session](id=doc.id, record=Session(**(doc.to_dict() or {})))


def review_from_doc(doc) -> Stored[Review]:
    return Stored[Review](id=doc.id, record=Review(**(doc.to_dict() or {})))


class ClinicState:
    """
    The three always-alive subscriptions of the main application:
    patients, sessions (flat, legacy) and reviews.
    """

    def __init__(self, store, date_format: str):
        self.store = store
        self.date_format = date_format

        self.patients = LiveCollection(
            store.collection("patients"),
            lambda doc: patient_from_doc(doc, date_format),
            "patients",
        )
        self.sessions = LiveCollection(
            store.collection("sessions").order_by(
                "created_at", direction=firestore.Query.DESCENDING
            ),
            session_from_doc,
            "sessions",
        )
        self.reviews = LiveCollection(
            store.collection("reviews").order_by(
                "created_at", direction=firestore.Query.DESCENDING
            ),
            review_from_doc,
            "reviews",
        )

    def _all(self):
        return (self.patients, self.sessions, self.reviews)

    def start(self):
        # Independent: one failing watch must not keep the others down
        for live in self._all():
            try:
                live.start()
            except Exception as e:
                log_error("subscription_start_failed", e, {"name": live.name})

    def close(self):
        for live in self._all():
            live.close()

    def patient(self, patient_id: str) -> Optional[Stored[Patient]]:
        for p in self.patients.snapshot():
            if p.id == patient_id:
                return p
        return None
