"""Tests for write authentication."""

from __future__ import annotations

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from tigertail.security.auth import (
    AuthGate,
    Credentials,
    StaticCredentialGate,
    get_auth_gate,
    get_credentials,
)


class TestStaticCredentialGate:
    """Test the single-credential gate."""

    def test_accepts_configured_pair(self) -> None:
        """Exact username and password pass."""
        gate = StaticCredentialGate("admin", "s3cret")
        assert gate.check(Credentials("admin", "s3cret")) is True

    @pytest.mark.parametrize(
        "credentials",
        [
            None,
            Credentials("admin", "wrong"),
            Credentials("Admin", "s3cret"),
            Credentials("", ""),
            Credentials("admin", "s3cret "),
        ],
    )
    def test_rejects(self, credentials: Credentials | None) -> None:
        """Anything else fails."""
        assert StaticCredentialGate("admin", "s3cret").check(credentials) is False

    def test_non_ascii(self) -> None:
        """Non-ASCII credentials compare as UTF-8."""
        gate = StaticCredentialGate("ädmin", "pässword")
        assert gate.check(Credentials("ädmin", "pässword"))

    def test_is_auth_gate(self) -> None:
        """The configured gate satisfies the contract."""
        assert isinstance(get_auth_gate(), AuthGate)

    def test_repr_hides_password(self) -> None:
        """Passwords do not leak through repr."""
        assert "s3cret" not in repr(Credentials("admin", "s3cret"))


class TestGetCredentials:
    """Test Basic credential extraction."""

    @pytest.fixture
    def client(self) -> TestClient:
        app = FastAPI()

        @app.get("/whoami")
        async def whoami(credentials: Credentials | None = Depends(get_credentials)) -> dict:
            return {"username": credentials.username if credentials else None}

        return TestClient(app)

    def test_basic_header(self, client: TestClient) -> None:
        """Basic credentials are decoded."""
        response = client.get("/whoami", auth=("admin", "password"))
        assert response.json() == {"username": "admin"}

    def test_missing_header(self, client: TestClient) -> None:
        """No header yields None instead of an error."""
        assert client.get("/whoami").json() == {"username": None}

    def test_other_scheme(self, client: TestClient) -> None:
        """Non-Basic schemes are treated as missing."""
        response = client.get("/whoami", headers={"Authorization": "Bearer token"})
        assert response.json() == {"username": None}
