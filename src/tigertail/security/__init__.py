"""Security module for Tiger-Tail.

Provides the write authentication gate and its FastAPI dependency.
"""

from tigertail.security.auth import (
    AuthGate,
    Credentials,
    StaticCredentialGate,
    get_auth_gate,
    get_credentials,
)

__all__ = [
    "AuthGate",
    "Credentials",
    "StaticCredentialGate",
    "get_auth_gate",
    "get_credentials",
]
