from __future__ import annotations

from typing import Any

import requests
from flask import current_app

from app.errors import InternalError
from app.models import Submission, db
from app.submissions import SubmissionHandler, SubmissionSettings
from conftest import FakeCRM, FakeResponse, FakeVerifier, valid_form


def _use_handler(monkeypatch, verifier: FakeVerifier, crm: FakeCRM) -> None:
    def _handler():
        settings = SubmissionSettings.from_config(current_app.config)
        return SubmissionHandler(settings, verifier=verifier, crm=crm)

    monkeypatch.setattr("app.routes.main.get_submission_handler", _handler)


def _fake_remote(monkeypatch, klaviyo_down: bool = False) -> list[str]:
    """Route requests.post to fake Turnstile/Klaviyo endpoints by URL."""
    urls: list[str] = []

    def _fake_post(url, data=None, json=None, headers=None, timeout=None, **kwargs):
        urls.append(url)
        assert timeout is not None
        if "turnstile" in url:
            return FakeResponse(200, {"success": data["response"] == "token-123"})
        if klaviyo_down:
            raise requests.ConnectionError("klaviyo unreachable")
        if url.endswith("/profile-import"):
            return FakeResponse(201, {"data": {"type": "profile", "id": "01PROFILE"}})
        return FakeResponse(202, None)

    monkeypatch.setattr("requests.post", _fake_post)
    return urls


def test_marketing_form_end_to_end(client, monkeypatch) -> None:
    urls = _fake_remote(monkeypatch)

    r = client.post("/marketing-form", data=valid_form())

    assert r.status_code == 200
    assert r.get_json() == {"success": True, "externalProfileId": "01PROFILE"}
    assert len(urls) == 3
    rows = db.session.query(Submission).all()
    assert len(rows) == 1
    assert rows[0].email == "ada@example.com"
    assert rows[0].phone == "+11234567890"
    assert rows[0].klaviyo_profile_id == "01PROFILE"


def test_marketing_form_with_klaviyo_unreachable(client, monkeypatch) -> None:
    _fake_remote(monkeypatch, klaviyo_down=True)

    r = client.post("/marketing-form", data=valid_form())

    assert r.status_code == 200
    assert r.get_json() == {"success": True, "externalProfileId": None}
    rows = db.session.query(Submission).all()
    assert len(rows) == 1
    assert rows[0].klaviyo_profile_id is None


def test_validation_error_body(client, monkeypatch) -> None:
    verifier, crm = FakeVerifier(True), FakeCRM()
    _use_handler(monkeypatch, verifier, crm)

    r = client.post("/marketing-form", data=valid_form(**{"confirm-policies": ""}))

    assert r.status_code == 400
    assert r.get_json() == {
        "success": False,
        "code": "BAD_REQUEST",
        "error": "You must consent to providing your information",
        "field": "confirm-policies",
    }
    assert verifier.calls == []
    assert crm.calls == []


def test_captcha_failure_body(client, monkeypatch) -> None:
    crm = FakeCRM()
    _use_handler(monkeypatch, FakeVerifier(False), crm)

    r = client.post("/marketing-form", data=valid_form())

    assert r.status_code == 401
    body: dict[str, Any] = r.get_json()
    assert body["code"] == "UNAUTHORIZED"
    assert body["error"] == "CAPTCHA verification failed. Please try again."
    assert crm.calls == []
    assert db.session.query(Submission).count() == 0


def test_remote_address_is_forwarded_to_verifier(client, monkeypatch) -> None:
    verifier = FakeVerifier(True)
    _use_handler(monkeypatch, verifier, FakeCRM())

    client.post("/marketing-form", data=valid_form(), environ_base={"REMOTE_ADDR": "203.0.113.7"})

    assert verifier.calls == [("token-123", "203.0.113.7")]


def test_storage_failure_body(client, monkeypatch) -> None:
    _use_handler(monkeypatch, FakeVerifier(True), FakeCRM())

    def _fail(self, submission):
        raise InternalError("Failed to store your submission. Please try again.")

    monkeypatch.setattr("app.store.SubmissionStore.insert", _fail)
    r = client.post("/marketing-form", data=valid_form())

    assert r.status_code == 500
    assert r.get_json()["code"] == "INTERNAL_SERVER_ERROR"
    assert db.session.query(Submission).count() == 0


def test_manifest(client) -> None:
    body = client.get("/manifest.json").get_json()
    assert body["name"] == "Marzellus"
    assert body["display"] == "minimal-ui"
    assert body["theme_color"] == "#262626"
    assert {i["src"] for i in body["icons"]} == {
        "/icons/any-192.png",
        "/icons/any-512.png",
        "/icons/maskable-192.png",
        "/icons/maskable-512.png",
    }


def test_robots(client) -> None:
    r = client.get("/robots.txt")
    assert r.mimetype == "text/plain"
    assert "Allow: /" in r.get_data(as_text=True)


def test_form_endpoint_is_post_only(client) -> None:
    assert client.get("/marketing-form").status_code == 405


def test_long_name_and_raw_phone_are_stored_in_full(app, client, monkeypatch) -> None:
    _use_handler(monkeypatch, FakeVerifier(True), FakeCRM())
    app.config["SUBMISSION_PHONE_MODE"] = "raw"
    firstname = "A" * 300
    phone = "+44 (0) 20 7946 0958 ext. 1234 ask for the front desk"

    r = client.post("/marketing-form", data=valid_form(firstname=firstname, phone=phone))

    assert r.status_code == 200
    row = db.session.query(Submission).one()
    assert row.firstname == firstname
    assert row.phone == phone
