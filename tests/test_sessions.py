# tests/test_sessions.py

from __future__ import annotations

import time

from fastapi import Request, Response
from jose import jwt

from sessions import SessionManager


def _request(cookie: str | None = None) -> Request:
    headers = []
    if cookie is not None:
        headers.append((b"cookie", cookie.encode()))
    return Request({"type": "http", "method": "GET", "path": "/", "headers": headers})


def test_establish_sets_cookie_and_resolves_to_user() -> None:
    manager = SessionManager("k1")
    response = Response()

    token = manager.establish(response, 42)

    set_cookie = response.headers["set-cookie"]
    assert set_cookie.startswith(f"session={token}")
    assert "httponly" in set_cookie.lower()
    assert manager.resolve(_request(f"session={token}")) == 42


def test_missing_or_malformed_cookie_is_anonymous() -> None:
    manager = SessionManager("k1")

    assert manager.resolve(_request()) is None
    assert manager.resolve(_request("session=")) is None
    assert manager.resolve(_request("session=not-a-token")) is None
    assert manager.resolve(_request("other=abc")) is None


def test_token_signed_with_other_secret_is_rejected() -> None:
    forged = SessionManager("attacker").issue(1)

    assert SessionManager("k1").decode(forged) is None


def test_tampered_token_is_rejected() -> None:
    manager = SessionManager("k1")
    token = manager.issue(1)
    header, payload, signature = token.split(".")
    other_payload = manager.issue(2).split(".")[1]

    assert manager.decode(f"{header}.{other_payload}.{signature}") is None


def test_non_integer_subject_is_anonymous() -> None:
    token = jwt.encode({"sub": "alice"}, "k1", algorithm="HS256")

    assert SessionManager("k1").decode(token) is None


def test_custom_cookie_name() -> None:
    manager = SessionManager("k1", cookie_name="taskflow")
    token = manager.issue(7)

    assert manager.resolve(_request(f"taskflow={token}")) == 7
    assert manager.resolve(_request(f"session={token}")) is None


def test_expired_session_is_anonymous() -> None:
    manager = SessionManager("k1", max_age=1)
    response = Response()
    token = manager.establish(response, 3)

    assert "max-age=1" in response.headers["set-cookie"].lower()
    assert manager.decode(token) == 3

    time.sleep(2.1)
    assert manager.decode(token) is None
