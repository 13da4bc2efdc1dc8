import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Request, Response
from jose import JWTError, jwt

logger = logging.getLogger(__name__)


class SessionManager:
    """
    Binds a user id to the client through a signed cookie.

    The cookie holds a JWT whose ``sub`` claim is the user id. There is no
    server-side session table: a session lives as long as its cookie (and
    its ``exp`` claim when ``max_age`` is set).
    """

    def __init__(
        self,
        secret_key: str,
        *,
        cookie_name: str = "session",
        algorithm: str = "HS256",
        max_age: Optional[int] = None,
        secure: bool = False,
    ):
        self.secret_key = secret_key
        self.cookie_name = cookie_name
        self.algorithm = algorithm
        self.max_age = max_age
        self.secure = secure

    def issue(self, user_id: int) -> str:
        claims = {"sub": str(user_id)}
        if self.max_age is not None:
            claims["exp"] = datetime.now(timezone.utc) + timedelta(seconds=self.max_age)
        return jwt.encode(claims, self.secret_key, algorithm=self.algorithm)

    def establish(self, response: Response, user_id: int) -> str:
        token = self.issue(user_id)
        response.set_cookie(
            key=self.cookie_name,
            value=token,
            max_age=self.max_age,
            httponly=True,
            secure=self.secure,
            samesite="lax",
        )
        return token

    def decode(self, token: Optional[str]) -> Optional[int]:
        if not token:
            return None
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            logger.debug("Rejected session cookie: %s", e)
            return None
        try:
            return int(payload.get("sub"))
        except (TypeError, ValueError):
            return None

    def resolve(self, request: Request) -> Optional[int]:
        return self.decode(request.cookies.get(self.cookie_name))
