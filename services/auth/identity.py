from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Optional, Protocol

from jose import JWTError, jwt
from passlib.context import CryptContext

from core.errors import AuthError, PersistenceError
from domain.models import Identity, Session
from services.persistence.base import RecordStore

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
ALGO = "HS256"

logger = logging.getLogger(__name__)


class IdentityProvider(Protocol):
    def sign_in(self, email: str, password: str) -> Session: ...

    def get_session(self, token: str | None) -> Optional[Session]: ...

    def role_of(self, identity: Identity) -> Optional[str]: ...


def hash_password(plain: str) -> str:
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return pwd_context.verify(plain, hashed)
    except ValueError:
        # malformed stored hash
        return False


def create_access_token(identity: Identity, secret: str, minutes: int) -> tuple[str, int]:
    now = int(time.time())
    exp = now + minutes * 60
    payload = {"sub": identity.user_id, "email": identity.email, "iat": now, "exp": exp}
    return jwt.encode(payload, secret, algorithm=ALGO), exp


def decode_token(tok: str, secret: str) -> dict[str, Any]:
    return jwt.decode(tok, secret, algorithms=[ALGO])


class PasswordIdentityProvider:
    """
    Email/password identities kept in the record store (``users``), roles in
    ``user_roles``. Sessions are stateless HS256 bearer tokens.
    """

    def __init__(self, records: RecordStore, secret_key: str, expire_minutes: int = 60) -> None:
        self.records = records
        self._secret = secret_key
        self._expire_minutes = expire_minutes

    def sign_in(self, email: str, password: str) -> Session:
        email = (email or "").strip().lower()
        rows = self.records.select("users", {"email": email}) if email else []
        if not rows or not verify_password(password or "", rows[0]["password_hash"]):
            logger.info("sign-in rejected for %s", email or "<blank>")
            raise AuthError("invalid email or password")
        identity = Identity(user_id=str(rows[0]["id"]), email=email)
        token, exp = create_access_token(identity, self._secret, self._expire_minutes)
        return Session(
            identity=identity,
            access_token=token,
            expires_at=datetime.fromtimestamp(exp, tz=timezone.utc),
        )

    def get_session(self, token: str | None) -> Optional[Session]:
        if not token:
            return None
        try:
            claims = decode_token(token, self._secret)
        except JWTError:
            return None
        return Session(
            identity=Identity(user_id=claims["sub"], email=claims.get("email", "")),
            access_token=token,
            expires_at=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
        )

    def role_of(self, identity: Identity) -> Optional[str]:
        rows = self.records.select("user_roles", {"user_id": identity.user_id})
        return rows[0]["role"] if rows else None

    def create_user(
        self,
        email: str,
        password: str | None = None,
        role: str | None = None,
        *,
        password_hash: str | None = None,
    ) -> Identity:
        """Create a user (plain password or pre-computed hash) and optionally grant a role."""
        email = email.strip().lower()
        if self.records.select("users", {"email": email}):
            raise PersistenceError(f"user {email} already exists")
        if password_hash is None:
            if not password:
                raise AuthError("password required")
            password_hash = hash_password(password)
        user = self.records.insert("users", [{"email": email, "password_hash": password_hash}])[0]
        identity = Identity(user_id=str(user["id"]), email=email)
        if role:
            self.records.insert("user_roles", [{"user_id": identity.user_id, "role": role}])
        return identity


def seed_admin(provider: PasswordIdentityProvider, email: str | None, pwd_hash: str | None) -> bool:
    """Create the env-configured admin on first start; no-op when unset or present."""
    if not email or not pwd_hash:
        return False
    try:
        provider.create_user(email, role="admin", password_hash=pwd_hash)
    except PersistenceError:
        return False
    logger.info("seeded admin user %s", email)
    return True
