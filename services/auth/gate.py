"""
Admin session gate.

The current session is explicit state owned by the gate. Anything that must
react to sign-in, sign-out or expiry subscribes for its lifetime and calls
the returned function to unsubscribe.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from core.errors import AuthError, AuthorizationError
from domain.models import Identity, Role, Session
from services.auth.identity import IdentityProvider

logger = logging.getLogger(__name__)


class GateState(str, Enum):
    SIGNED_OUT = "signed_out"
    UNAUTHORIZED = "unauthorized"
    ADMIN = "admin"


class SessionEvent(str, Enum):
    SIGNED_IN = "signed_in"
    SIGNED_OUT = "signed_out"
    EXPIRED = "expired"


Listener = Callable[[SessionEvent, Optional[Session]], None]


class AdminSessionGate:
    def __init__(self, provider: IdentityProvider, session: Session | None = None) -> None:
        self.provider = provider
        self._session = session
        self._listeners: list[Listener] = []

    @property
    def session(self) -> Optional[Session]:
        return self._session

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: SessionEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, self._session)
            except Exception:  # noqa: BLE001
                logger.exception("session listener failed on %s", event.value)

    def sign_in(self, email: str, password: str) -> Session:
        self._session = self.provider.sign_in(email, password)
        self._emit(SessionEvent.SIGNED_IN)
        return self._session

    def sign_out(self) -> None:
        had_session = self._session is not None
        self._session = None
        if had_session:
            self._emit(SessionEvent.SIGNED_OUT)

    def refresh(self) -> Optional[Session]:
        """Re-check the held session; emits ``expired`` if it lapsed externally."""
        if self._session is None:
            return None
        current = self.provider.get_session(self._session.access_token)
        if current is None or current.expires_at <= datetime.now(timezone.utc):
            self._session = None
            self._emit(SessionEvent.EXPIRED)
            return None
        self._session = current
        return current

    def current_identity(self) -> Optional[Identity]:
        session = self.refresh()
        return session.identity if session else None

    def role_of(self, identity: Identity) -> Optional[str]:
        return self.provider.role_of(identity)

    def evaluate(self) -> GateState:
        identity = self.current_identity()
        if identity is None:
            return GateState.SIGNED_OUT
        if self.role_of(identity) != Role.ADMIN.value:
            return GateState.UNAUTHORIZED
        return GateState.ADMIN

    def require_admin(self) -> Identity:
        identity = self.current_identity()
        if identity is None:
            raise AuthError("sign in required")
        if self.role_of(identity) != Role.ADMIN.value:
            raise AuthorizationError("your account does not have admin access")
        return identity
