from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm

from apps.api.deps import get_gate, get_identity_provider
from services.auth.gate import AdminSessionGate
from services.auth.identity import PasswordIdentityProvider

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/token")
def login(
    form: OAuth2PasswordRequestForm = Depends(),  # noqa: B008 (FastAPI)
    provider: PasswordIdentityProvider = Depends(get_identity_provider),
):
    session = provider.sign_in(form.username, form.password)
    return {
        "access_token": session.access_token,
        "token_type": "bearer",
        "expires_at": session.expires_at.isoformat(),
    }


@router.get("/session")
def current_session(gate: AdminSessionGate = Depends(get_gate)):
    identity = gate.current_identity()
    return {
        "state": gate.evaluate().value,
        "identity": identity.model_dump() if identity else None,
        "role": gate.role_of(identity) if identity else None,
    }
