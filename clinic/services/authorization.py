"""
Authorization gate.

Sign-in proves who the user is; ``users/{email}`` decides whether they
may use the clinic. Records are created on first sign-in with
``authorized=False`` and only an administrator flips them.
"""
from __future__ import annotations

import threading
from typing import Dict, Optional

from firebase_admin import firestore
from google.api_core.exceptions import AlreadyExists

from clinic.models.user import AuthorizationRecord, Identity
from clinic.services.logger import log_debug, log_error

LOADING = "loading"
SIGNED_OUT = "signed_out"
AUTHORIZED = "authorized"
PENDING = "pending"
DENIED = "denied"

LOGIN_PATH = "/login"
HOME_PATH = "/"

MSG_NOT_AUTHORIZED = "Your account has not been authorized by the administrator yet."
MSG_PENDING = "Your account has been registered and is pending authorization."
MSG_LOOKUP_FAILED = "Error while checking user permissions."
MSG_NO_EMAIL = "Could not read the account email."


class AuthGate:
    def __init__(self, store):
        self.store = store
        self.state = LOADING
        self.identity: Optional[Identity] = None
        self.record: Optional[AuthorizationRecord] = None
        self.message: Optional[str] = None
        self._lock = threading.Lock()

    @property
    def authorized(self) -> bool:
        return self.state == AUTHORIZED

    @property
    def signed_in(self) -> bool:
        return self.identity is not None

    def handle(self, identity: Optional[Identity]) -> str:
        """Session-change notification: resolve what this identity may see."""
        self.record = None
        self.message = None

        if identity is None:
            self.identity = None
            self.state = SIGNED_OUT
            return self.state

        self.identity = identity

        if not identity.email:
            return self._deny(DENIED, MSG_NO_EMAIL)

        try:
            ref = self.store.user_ref(identity.email)
            snap = ref.get()
            if not snap.exists:
                snap = self._create_record(ref, identity)
                if snap is None:
                    return self._deny(PENDING, MSG_PENDING)
            data = snap.to_dict() or {}
            record = AuthorizationRecord(**data)
        except Exception as e:
            log_error("authorization_lookup_failed", e, {"email": identity.email})
            return self._deny(DENIED, MSG_LOOKUP_FAILED)

        # Only a stored boolean true authorizes
        if data.get("authorized") is True and record.authorized:
            self.record = record
            self.state = AUTHORIZED
            log_debug("authorization_granted", {"email": identity.email})
            return self.state

        return self._deny(DENIED, MSG_NOT_AUTHORIZED)

    def _create_record(self, ref, identity: Identity):
        """
        Create the pending record. Returns None when we created it, or the
        existing snapshot when another sign-in created it first.
        """
        data = AuthorizationRecord(name=identity.name or "User").model_dump()
        data["registered_at"] = firestore.SERVER_TIMESTAMP
        try:
            ref.create(data)
        except AlreadyExists:
            log_debug("authorization_record_exists", {"email": identity.email})
            return ref.get()
        log_debug("authorization_record_created", {"email": identity.email})
        return None

    def _deny(self, state: str, message: str) -> str:
        self.state = state
        self.message = message
        log_debug("authorization_denied", {"state": state, "message": message})
        return self.state

    def sign_out(self):
        self.identity = None
        self.record = None
        self.message = None
        self.state = SIGNED_OUT

    def view(self) -> dict:
        return {
            "state": self.state,
            "message": self.message,
            "email": self.identity.email if self.identity else None,
            "name": self.identity.name if self.identity else None,
            "record": self.record.model_dump() if self.record else None,
        }


def redirect_for(signed_in: bool, path: str) -> Optional[str]:
    """Where to send the browser, or None to stay."""
    if not signed_in and path != LOGIN_PATH:
        return LOGIN_PATH
    if signed_in and path == LOGIN_PATH:
        return HOME_PATH
    return None


class GateRegistry:
    """One gate per signed-in uid; the first lookup is that identity's sign-in."""

    def __init__(self, store):
        self.store = store
        self._gates: Dict[str, AuthGate] = {}
        self._lock = threading.Lock()

    def resolve(self, identity: Identity) -> AuthGate:
        with self._lock:
            gate = self._gates.get(identity.uid)
            if gate is None:
                gate = AuthGate(self.store)
                self._gates[identity.uid] = gate

        # The store lookup runs under the gate's own lock so other uids
        # are not held up behind it
        with gate._lock:
            if gate.state == LOADING:
                gate.handle(identity)
        return gate

    def sign_out(self, uid: str):
        with self._lock:
            gate = self._gates.pop(uid, None)
        if gate is not None:
            gate.sign_out()

    def close(self):
        with self._lock:
            self._gates.clear()
