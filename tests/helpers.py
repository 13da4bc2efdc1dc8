# tests/helpers.py

from __future__ import annotations

from fastapi.testclient import TestClient


def signup_and_login(client: TestClient, username: str, password: str = "s3cret!") -> None:
    r = client.post("/signup", data={"username": username, "password": password})
    assert r.status_code == 303
    r = client.post("/login", data={"username": username, "password": password})
    assert r.status_code == 303
    assert r.headers["location"] == "/"
