"""
Firebase admin initialization and helpers.

The browser signs users in with Firebase Authentication (Google popup)
and sends the resulting ID token with every request. This module builds
the Admin SDK handle the service uses to verify those tokens and to read
and write Firestore.

The handle is constructed once by the application factory and stored on
``app.state.store``; nothing here keeps a module-level client.
"""

import os

import firebase_admin
from firebase_admin import credentials, auth, firestore

from clinic.services.logger import logger


class StoreUnavailable(RuntimeError):
    """Raised when the store is used through a null handle."""


class StoreClient:
    """Firestore + identity handle.

    ``db`` is a Firestore client (or anything exposing the same surface,
    e.g. an in-memory fake in tests). ``token_verifier`` turns an ID token
    into its decoded claims.
    """

    def __init__(self, db=None, token_verifier=None, firebase_app=None):
        self._db = db
        self._token_verifier = token_verifier
        self._firebase_app = firebase_app

    @property
    def available(self) -> bool:
        return self._db is not None

    @property
    def db(self):
        if self._db is None:
            raise StoreUnavailable("Firestore client not initialized")
        return self._db

    # -------------------------
    # Collections
    # -------------------------
    def collection(self, path: str):
        return self.db.collection(path)

    def patient_sessions(self, patient_id: str):
        """patients/{patient_id}/sessions"""
        return self.db.collection("patients").document(patient_id).collection("sessions")

    def user_ref(self, email: str):
        """users/{email}"""
        return self.db.collection("users").document(email)

    # -------------------------
    # Identity
    # -------------------------
    def verify_id_token(self, id_token: str) -> dict:
        if self._token_verifier is None:
            raise StoreUnavailable("Identity provider not initialized")
        return self._token_verifier(id_token)

    def close(self):
        if self._db is not None and hasattr(self._db, "close"):
            self._db.close()
        if self._firebase_app is not None:
            firebase_admin.delete_app(self._firebase_app)
            self._firebase_app = None


def init_firebase(settings) -> StoreClient:
    """
    Build the Admin SDK handle.

    Priority:
    1. FIREBASE_CREDENTIALS from settings / environment
    2. Nothing found: return a null handle (``available`` is False)
    """
    cred_path = settings.FIREBASE_CREDENTIALS

    if not cred_path or not os.path.exists(cred_path):
        logger.warning(
            "Firebase credentials not found at: %s. Running with a null store handle.",
            cred_path,
        )
        return StoreClient()

    cred = credentials.Certificate(cred_path)
    options = {"projectId": settings.FIREBASE_PROJECT_ID} if settings.FIREBASE_PROJECT_ID else None
    firebase_app = firebase_admin.initialize_app(cred, options, name="clinic")

    db = firestore.client(app=firebase_app)

    def _verify(id_token: str) -> dict:
        return auth.verify_id_token(id_token, app=firebase_app)

    logger.info("Firebase Admin initialized successfully.")
    return StoreClient(db=db, token_verifier=_verify, firebase_app=firebase_app)
