# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app import create_app
from config import Settings


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """
    Settings pointing at a throwaway SQLite file.

    bcrypt runs with its minimum work factor to keep the suite fast.
    """
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'tasks.db'}",
        secret_key="test-secret",
        bcrypt_rounds=4,
        allowed_hosts=["testserver"],
        enforce_task_ownership=True,
    )


@pytest.fixture()
def app(settings: Settings) -> FastAPI:
    return create_app(settings)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, follow_redirects=False) as c:
        yield c


@pytest.fixture()
def db(app: FastAPI) -> Iterator[Session]:
    session = app.state.context.session_factory()
    try:
        yield session
    finally:
        session.close()

