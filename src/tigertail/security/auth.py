"""Write authentication for Tiger-Tail.

Writes are gated by HTTP Basic credentials. The request handlers only ever
see a pass/fail answer from an AuthGate, so the credential store can be
replaced without touching the write path.

Usage:
    @router.post("/posts")
    async def create(credentials: Credentials | None = Depends(get_credentials)):
        ...
"""

from __future__ import annotations

import hmac
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from tigertail.config import settings

# auto_error=False: missing credentials reach the write path as None so the
# 401 is rendered in the API's error format
_basic = HTTPBasic(auto_error=False)


@dataclass(frozen=True)
class Credentials:
    """Username and password presented with a request."""

    username: str
    password: str

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password='***')"


class AuthGate(ABC):
    """Pass/fail check for write credentials."""

    @abstractmethod
    def check(self, credentials: Credentials | None) -> bool:
        """Return True if the credentials may perform writes."""
        ...


class StaticCredentialGate(AuthGate):
    """Accepts a single configured username/password pair."""

    def __init__(self, username: str, password: str):
        self._username = username.encode()
        self._password = password.encode()

    def check(self, credentials: Credentials | None) -> bool:
        if credentials is None:
            return False
        # Evaluate both comparisons so timing does not reveal which one failed
        user_ok = hmac.compare_digest(credentials.username.encode(), self._username)
        password_ok = hmac.compare_digest(credentials.password.encode(), self._password)
        return user_ok and password_ok


_gate: AuthGate | None = None


def get_auth_gate() -> AuthGate:
    """Get the gate configured from AUTH_USERNAME / AUTH_PASSWORD."""
    global _gate
    if _gate is None:
        _gate = StaticCredentialGate(
            settings.auth_username.get_secret_value(),
            settings.auth_password.get_secret_value(),
        )
    return _gate


async def get_credentials(
    basic: Annotated[HTTPBasicCredentials | None, Depends(_basic)],
) -> Credentials | None:
    """Extract Basic credentials from the request, if any."""
    if basic is None:
        return None
    return Credentials(username=basic.username, password=basic.password)
