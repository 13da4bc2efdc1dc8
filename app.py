import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from passlib.context import CryptContext
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from auth import build_password_context
from config import Settings, get_settings
from database import Base, create_db_engine, create_session_factory
from errors import AuthenticationFailed, StorageError, StorageUnavailable, Unauthenticated
from logging_setup import setup_logging
import models  # noqa: F401  registers the tables on Base.metadata
from routes import router
from sessions import SessionManager

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Everything a request needs that outlives it. Built once per app."""

    settings: Settings
    engine: Engine
    session_factory: sessionmaker
    templates: Jinja2Templates
    sessions: SessionManager
    pwd_context: CryptContext


def build_context(settings: Settings) -> AppContext:
    engine = create_db_engine(settings.database_url)
    if settings.create_schema:
        Base.metadata.create_all(bind=engine)
    return AppContext(
        settings=settings,
        engine=engine,
        session_factory=create_session_factory(engine),
        templates=Jinja2Templates(directory=str(settings.templates_dir)),
        sessions=SessionManager(
            settings.secret_key,
            cookie_name=settings.session_cookie_name,
            algorithm=settings.session_algorithm,
            max_age=settings.session_max_age,
            secure=settings.session_cookie_secure,
        ),
        pwd_context=build_password_context(settings.bcrypt_rounds),
    )


# Error handlers
async def authentication_failed_handler(request: Request, exc: AuthenticationFailed):
    return RedirectResponse(url="/login?failed=1", status_code=status.HTTP_303_SEE_OTHER)


async def unauthenticated_handler(request: Request, exc: Unauthenticated):
    return RedirectResponse(url="/login", status_code=status.HTTP_303_SEE_OTHER)


async def storage_error_handler(request: Request, exc: StorageError):
    logger.exception("Storage failure on %s %s", request.method, request.url.path, exc_info=exc)
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Something went wrong while saving your data."
    if isinstance(exc, StorageUnavailable):
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        message = "The task database is unavailable. Please try again later."
    templates = request.app.state.context.templates
    return templates.TemplateResponse(
        request, "error.html", {"message": message}, status_code=status_code
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    context = build_context(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("TaskFlow ready db=%s", context.engine.url.render_as_string(hide_password=True))
        yield
        context.engine.dispose()

    app = FastAPI(title="TaskFlow", lifespan=lifespan)
    app.state.context = context

    app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.allowed_hosts)

    app.mount("/static", StaticFiles(directory=str(settings.static_dir)), name="static")

    app.add_exception_handler(AuthenticationFailed, authentication_failed_handler)
    app.add_exception_handler(Unauthenticated, unauthenticated_handler)
    app.add_exception_handler(StorageError, storage_error_handler)

    app.include_router(router)
    return app


def main():
    import uvicorn

    settings = get_settings()
    setup_logging(settings.log_level, settings.log_file)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
