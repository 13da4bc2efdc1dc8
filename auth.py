import logging

from fastapi import Response
from passlib.context import CryptContext

from errors import AuthenticationFailed, DuplicateUsername, NotFound, SignupRejected
from sessions import SessionManager
from stores import CredentialStore

logger = logging.getLogger(__name__)


def build_password_context(rounds: int = 12) -> CryptContext:
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


class AuthService:
    """Signup and login on top of the credential store and the session manager."""

    def __init__(self, credentials: CredentialStore, sessions: SessionManager, pwd_context: CryptContext):
        self.credentials = credentials
        self.sessions = sessions
        self.pwd_context = pwd_context

    def signup(self, username: str, password: str) -> int:
        """
        Register a new account. Does not log the user in.

        Raises DuplicateUsername when the name is taken and SignupRejected
        for an empty username or a password bcrypt refuses (NUL bytes).
        Other storage errors propagate unchanged.
        """
        if not username:
            raise SignupRejected("Username cannot be empty")
        try:
            password_hash = self.pwd_context.hash(password)
        except ValueError as e:
            raise SignupRejected("Password contains unsupported characters") from e
        try:
            user_id = self.credentials.create(username, password_hash)
        except DuplicateUsername:
            logger.info("Signup rejected, username taken: %s", username)
            raise
        logger.info("Registered user id=%s username=%s", user_id, username)
        return user_id

    def authenticate(self, username: str, password: str) -> int:
        try:
            user_id, password_hash = self.credentials.find_by_username(username)
        except NotFound:
            logger.info("Login failed for %s", username)
            raise AuthenticationFailed() from None
        try:
            verified = self.pwd_context.verify(password, password_hash)
        except ValueError:
            verified = False
        if not verified:
            logger.info("Login failed for %s", username)
            raise AuthenticationFailed()
        return user_id

    def login(self, username: str, password: str, response: Response) -> int:
        user_id = self.authenticate(username, password)
        self.sessions.establish(response, user_id)
        logger.info("User id=%s logged in", user_id)
        return user_id
