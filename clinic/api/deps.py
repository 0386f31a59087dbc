"""
API dependencies (Firebase ID token verification, authorization gate).

The token comes from the ``Authorization: Bearer`` header, or from the
``session_token`` cookie set by the login page.
"""

from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from clinic.core.firebase import StoreUnavailable
from clinic.models.user import Identity
from clinic.services.logger import log_debug

SESSION_COOKIE = "session_token"

security = HTTPBearer(auto_error=False)


def get_store(request: Request):
    store = request.app.state.store
    if store is None or not store.available:
        raise HTTPException(status_code=503, detail="Firestore client not initialized")
    return store


def get_clinic_state(request: Request, store=Depends(get_store)):
    return request.app.state.clinic


def get_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[str]:
    if credentials is not None:
        return credentials.credentials
    return request.cookies.get(SESSION_COOKIE)


def get_optional_user(
    request: Request,
    token: Optional[str] = Depends(get_token),
) -> Optional[Identity]:
    """Signed-in identity, or None when no valid token was sent."""
    if not token:
        return None
    store = request.app.state.store
    try:
        decoded = store.verify_id_token(token)
    except StoreUnavailable:
        raise HTTPException(status_code=503, detail="Identity provider not initialized")
    except Exception as exc:
        log_debug("token_rejected", {"error": str(exc)})
        return None
    return Identity.from_claims(decoded)


def get_current_user(identity: Optional[Identity] = Depends(get_optional_user)) -> Identity:
    if identity is None:
        raise HTTPException(status_code=401, detail="Invalid ID token")
    return identity


def get_gate(
    request: Request,
    identity: Identity = Depends(get_current_user),
    store=Depends(get_store),
):
    return request.app.state.gates.resolve(identity)


def require_authorized(gate=Depends(get_gate)):
    """
    Only identities whose ``users/{email}`` record is authorized get
    through; everyone else sees the denial message.
    """
    if not gate.authorized:
        raise HTTPException(
            status_code=403,
            detail={"message": gate.message, "state": gate.state, "sign_out": "/auth/logout"},
        )
    return gate


def get_workspace(request: Request, gate=Depends(require_authorized)):
    return request.app.state.workspaces.get(gate.identity.uid)
