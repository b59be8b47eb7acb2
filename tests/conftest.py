from __future__ import annotations

from typing import Any

import pytest

from app import create_app
from app.config import TestingConfig
from app.klaviyo import SyncResult
from app.models import db


class FakeVerifier:
    def __init__(self, result: bool = True):
        self.result = result
        self.calls: list[tuple[str, str | None]] = []

    def verify(self, token: str, remote_ip: str | None = None) -> bool:
        self.calls.append((token, remote_ip))
        return self.result


class FakeCRM:
    def __init__(self, result: SyncResult | None = None, exc: Exception | None = None):
        self.result = result or SyncResult.ok("01PROFILE")
        self.exc = exc
        self.calls: list[dict[str, Any]] = []

    def sync_profile(self, email, first_name=None, last_name=None, phone=None) -> SyncResult:
        self.calls.append(
            {"email": email, "first_name": first_name, "last_name": last_name, "phone": phone}
        )
        if self.exc is not None:
            raise self.exc
        return self.result


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, text: str = ""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


def valid_form(**overrides: str) -> dict[str, str]:
    form = {
        "firstname": "Ada",
        "lastname": "Lovelace",
        "email": "ada@example.com",
        "phone": "(123) 456-7890",
        "confirm-policies": "on",
        "cf-turnstile-response": "token-123",
    }
    form.update(overrides)
    return {k: v for k, v in form.items() if v is not None}


@pytest.fixture()
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()
