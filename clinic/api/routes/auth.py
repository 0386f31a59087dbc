"""Authentication-related routes.

The browser signs in with Firebase (Google popup); the backend reports the
gate outcome and handles sign-out.
"""
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from clinic.api.deps import SESSION_COOKIE, get_current_user, get_gate
from clinic.services.authorization import LOGIN_PATH

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/me")
async def get_me(gate=Depends(get_gate)):
    return {"uid": gate.identity.uid, **gate.view()}


@router.post("/logout")
def logout(request: Request, user=Depends(get_current_user)):
    request.app.state.workspaces.discard(user.uid)
    request.app.state.gates.sign_out(user.uid)

    response = JSONResponse({"message": "Signed out", "redirect": LOGIN_PATH})
    response.delete_cookie(SESSION_COOKIE, path="/")
    return response
