# tests/test_auth.py

from __future__ import annotations

import pytest
from fastapi import FastAPI, Response
from sqlalchemy.orm import Session

from auth import AuthService
from errors import AuthenticationFailed, DuplicateUsername, SignupRejected
from stores import CredentialStore


@pytest.fixture()
def auth(app: FastAPI, db: Session) -> AuthService:
    context = app.state.context
    return AuthService(CredentialStore(db), context.sessions, context.pwd_context)


def test_signup_stores_a_verifiable_hash(auth: AuthService) -> None:
    user_id = auth.signup("alice", "hunter2")

    stored_id, password_hash = auth.credentials.find_by_username("alice")
    assert stored_id == user_id
    assert password_hash != "hunter2"
    assert auth.pwd_context.verify("hunter2", password_hash)
    assert auth.credentials.count() == 1


def test_signup_with_taken_username_fails(auth: AuthService) -> None:
    auth.signup("alice", "hunter2")

    with pytest.raises(DuplicateUsername):
        auth.signup("alice", "other")
    assert auth.credentials.count() == 1


def test_login_establishes_session_for_account(auth: AuthService) -> None:
    user_id = auth.signup("alice", "hunter2")
    response = Response()

    assert auth.login("alice", "hunter2", response) == user_id

    cookie = response.headers["set-cookie"]
    token = cookie.split(";", 1)[0].split("=", 1)[1]
    assert auth.sessions.decode(token) == user_id


def test_wrong_password_and_unknown_user_fail_the_same_way(auth: AuthService) -> None:
    auth.signup("alice", "hunter2")

    with pytest.raises(AuthenticationFailed) as wrong_password:
        auth.login("alice", "nope", Response())
    with pytest.raises(AuthenticationFailed) as unknown_user:
        auth.login("mallory", "hunter2", Response())

    assert str(wrong_password.value) == str(unknown_user.value)


def test_failed_login_sets_no_cookie(auth: AuthService) -> None:
    auth.signup("alice", "hunter2")
    response = Response()

    with pytest.raises(AuthenticationFailed):
        auth.login("alice", "nope", response)
    assert "set-cookie" not in response.headers


def test_empty_username_is_rejected_at_signup(auth: AuthService) -> None:
    with pytest.raises(SignupRejected):
        auth.signup("", "hunter2")
    assert auth.credentials.count() == 0


def test_password_with_nul_byte_is_rejected_at_signup(auth: AuthService) -> None:
    with pytest.raises(SignupRejected):
        auth.signup("alice", "hun\x00ter2")
    assert auth.credentials.count() == 0


def test_unusable_passwords_are_plain_login_failures(auth: AuthService) -> None:
    auth.signup("alice", "hunter2")

    with pytest.raises(AuthenticationFailed):
        auth.authenticate("alice", "")
    with pytest.raises(AuthenticationFailed):
        auth.authenticate("alice", "hunter2\x00")
    with pytest.raises(AuthenticationFailed):
        auth.authenticate("", "")
