from dataclasses import dataclass
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from auth import AuthService
from errors import DuplicateUsername, SignupRejected, Unauthenticated
from stores import CredentialStore, TaskStore
from tasks import TaskService

ANY_METHOD = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

router = APIRouter()


@dataclass(frozen=True)
class RequestContext:
    user_id: Optional[int]

    @property
    def authenticated(self) -> bool:
        return self.user_id is not None


# Dependencies
def get_context(request: Request):
    return request.app.state.context


def get_db(context=Depends(get_context)):
    db = context.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_request_context(request: Request, context=Depends(get_context)) -> RequestContext:
    return RequestContext(user_id=context.sessions.resolve(request))


def get_auth_service(db: Session = Depends(get_db), context=Depends(get_context)) -> AuthService:
    return AuthService(CredentialStore(db), context.sessions, context.pwd_context)


def get_task_service(db: Session = Depends(get_db), context=Depends(get_context)) -> TaskService:
    return TaskService(TaskStore(db), enforce_ownership=context.settings.enforce_task_ownership)


def render(request: Request, name: str, data: Optional[dict] = None, status_code: int = 200):
    templates = request.app.state.context.templates
    return templates.TemplateResponse(request, name, data or {}, status_code=status_code)


def redirect(url: str, status_code: int = status.HTTP_303_SEE_OTHER) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=status_code)


@router.get("/", response_class=HTMLResponse)
def home(
    request: Request,
    ctx: RequestContext = Depends(get_request_context),
    tasks: TaskService = Depends(get_task_service),
):
    try:
        items = tasks.list_tasks(ctx.user_id)
    except Unauthenticated:
        return redirect("/index", status.HTTP_302_FOUND)
    return render(request, "tasks.html", {"tasks": items})


@router.get("/index", response_class=HTMLResponse)
def landing(request: Request, ctx: RequestContext = Depends(get_request_context)):
    return render(request, "index.html", {"authenticated": ctx.authenticated})


@router.get("/signup", response_class=HTMLResponse)
def signup_form(request: Request):
    return render(request, "signup.html")


@router.post("/signup")
def signup(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    auth: AuthService = Depends(get_auth_service),
):
    try:
        auth.signup(username, password)
    except DuplicateUsername:
        return render(
            request,
            "signup.html",
            {"error": "That username is already taken.", "username": username},
            status_code=status.HTTP_409_CONFLICT,
        )
    except SignupRejected as e:
        return render(
            request,
            "signup.html",
            {"error": f"{e}.", "username": username},
            status_code=status.HTTP_400_BAD_REQUEST,
        )
    return redirect("/login")


@router.get("/login", response_class=HTMLResponse)
def login_form(request: Request, failed: bool = False):
    error = "Incorrect username or password." if failed else None
    return render(request, "login.html", {"error": error})


@router.post("/login")
def login(
    username: str = Form(""),
    password: str = Form(""),
    auth: AuthService = Depends(get_auth_service),
):
    # AuthenticationFailed is turned into a redirect by the app's exception handler
    response = redirect("/")
    auth.login(username, password, response)
    return response


@router.get("/add")
def add_form(ctx: RequestContext = Depends(get_request_context)):
    if not ctx.authenticated:
        return redirect("/login", status.HTTP_302_FOUND)
    return redirect("/", status.HTTP_302_FOUND)


@router.post("/add")
def add(
    task: str = Form(""),
    ctx: RequestContext = Depends(get_request_context),
    tasks: TaskService = Depends(get_task_service),
):
    tasks.add_task(ctx.user_id, task)
    return redirect("/")


@router.api_route("/delete/{task_id}", methods=ANY_METHOD)
def delete(
    task_id: int,
    ctx: RequestContext = Depends(get_request_context),
    tasks: TaskService = Depends(get_task_service),
):
    tasks.remove_task(ctx.user_id, task_id)
    return redirect("/")


@router.api_route("/done/{task_id}", methods=ANY_METHOD)
def done(
    task_id: int,
    ctx: RequestContext = Depends(get_request_context),
    tasks: TaskService = Depends(get_task_service),
):
    tasks.complete_task(ctx.user_id, task_id)
    return redirect("/")
