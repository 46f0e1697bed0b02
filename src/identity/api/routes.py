"""FastAPI endpoints for the Identity domain — registration and sessions."""

from datetime import timedelta

from fastapi import APIRouter, Request, Response

from identity.api.dependencies import CurrentUser, DbSession, session_token
from identity.api.schemas import LoginRequest, LoginResponse, RegisterRequest, StatusResponse, UserResponse
from identity.user.session import close_session, open_session
from identity.user.user import authenticate, register_user
from notifications.notification.notification import NotificationType, enqueue_notification

router = APIRouter(prefix="/auth", tags=["auth"])


def _start_session(request: Request, response: Response, db, user) -> LoginResponse:
    settings = request.app.state.settings
    ttl = timedelta(hours=settings.session_ttl_hours)
    token = open_session(db, user, ttl)
    db.commit()
    response.set_cookie(
        settings.session_cookie_name,
        token,
        max_age=int(ttl.total_seconds()),
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )
    return LoginResponse(token=token, user=UserResponse.model_validate(user))


@router.post("/register", status_code=201, response_model=LoginResponse)
def register(body: RegisterRequest, request: Request, response: Response, db: DbSession) -> LoginResponse:
    user = register_user(db, email=body.email, name=body.name, password=body.password)
    enqueue_notification(db, NotificationType.WELCOME, user.email, {"name": user.name})
    return _start_session(request, response, db, user)


@router.post("/login", response_model=LoginResponse)
def login(body: LoginRequest, request: Request, response: Response, db: DbSession) -> LoginResponse:
    user = authenticate(db, body.email, body.password)
    return _start_session(request, response, db, user)


@router.post("/logout", response_model=StatusResponse)
def logout(user: CurrentUser, request: Request, response: Response, db: DbSession) -> StatusResponse:
    close_session(db, session_token(request))
    db.commit()
    response.delete_cookie(request.app.state.settings.session_cookie_name)
    return StatusResponse()


@router.get("/me", response_model=UserResponse)
def me(user: CurrentUser) -> UserResponse:
    return UserResponse.model_validate(user)
