"""Entry routes: the login page and the application shell.

Redirect rules:
    signed out, anywhere but /login  -> /login
    signed in, on /login             -> /
"""
import json
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse

from clinic.api.deps import SESSION_COOKIE, get_optional_user
from clinic.models.user import Identity
from clinic.services.authorization import HOME_PATH, LOGIN_PATH, redirect_for

router = APIRouter(tags=["pages"])

LOGIN_TEMPLATE = Path(__file__).resolve().parents[2] / "web" / "login.html"


def render_login(settings) -> str:
    html = LOGIN_TEMPLATE.read_text(encoding="utf-8")
    return (
        html.replace("__FIREBASE_CONFIG__", json.dumps(settings.web_config()))
        .replace("__SESSION_COOKIE__", SESSION_COOKIE)
    )


@router.get(LOGIN_PATH, response_class=HTMLResponse)
async def login_page(request: Request, identity: Optional[Identity] = Depends(get_optional_user)):
    target = redirect_for(identity is not None, LOGIN_PATH)
    if target:
        return RedirectResponse(target, status_code=303)
    return HTMLResponse(render_login(request.app.state.settings))


@router.get(HOME_PATH)
def home(request: Request, identity: Optional[Identity] = Depends(get_optional_user)):
    target = redirect_for(identity is not None, HOME_PATH)
    if target:
        return RedirectResponse(target, status_code=303)

    gate = request.app.state.gates.resolve(identity)
    if not gate.authorized:
        return JSONResponse(
            status_code=403,
            content={
                "title": "Access denied",
                "message": gate.message,
                "state": gate.state,
                "account": gate.identity.email if gate.identity else None,
                "sign_out": "/auth/logout",
            },
        )

    workspace = request.app.state.workspaces.get(identity.uid)
    return {"user": gate.view(), "workspace": workspace.view()}


@router.get("/health")
async def health_check():
    return {"status": "ok"}
