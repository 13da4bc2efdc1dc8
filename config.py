import secrets
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables prefixed with
    ``TASKFLOW_`` or from a `.env` file.
    """

    model_config = SettingsConfigDict(env_prefix="TASKFLOW_", env_file=".env", extra="ignore")

    database_url: str = "sqlite:///./tasks.db"
    """SQLAlchemy URL of the database holding users and tasks."""

    secret_key: str = Field(default_factory=lambda: secrets.token_urlsafe(32))
    """Key used to sign session cookies. Random per process unless configured."""

    session_cookie_name: str = "session"
    session_algorithm: str = "HS256"

    session_max_age: Optional[int] = None
    """Session lifetime in seconds. None keeps the cookie for the browser session."""

    session_cookie_secure: bool = False

    bcrypt_rounds: int = 12
    """Work factor of the password hash."""

    enforce_task_ownership: bool = True
    """Only let the owner complete or delete a task. False restores the open legacy routes."""

    allowed_hosts: List[str] = ["localhost", "127.0.0.1"]
    create_schema: bool = True

    templates_dir: Path = BASE_DIR / "templates"
    static_dir: Path = BASE_DIR / "static"

    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"
    log_file: Optional[Path] = None


@lru_cache
def get_settings() -> Settings:
    return Settings()
