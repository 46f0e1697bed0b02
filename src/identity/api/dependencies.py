"""FastAPI dependencies resolving the caller from their session token."""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from identity.user.session import resolve_session
from identity.user.user import User
from shared.db import get_db
from shared.errors import AuthenticationRequired, PermissionDenied

DbSession = Annotated[Session, Depends(get_db)]


def session_token(request: Request) -> str | None:
    """Bearer token from ``Authorization`` wins over the session cookie."""
    authorization = request.headers.get("authorization", "")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    return request.cookies.get(request.app.state.settings.session_cookie_name)


def current_user(request: Request, db: DbSession) -> User:
    user = resolve_session(db, session_token(request))
    if user is None:
        raise AuthenticationRequired()
    return user


def require_admin(user: Annotated[User, Depends(current_user)]) -> User:
    if not user.is_admin:
        raise PermissionDenied()
    return user


CurrentUser = Annotated[User, Depends(current_user)]
AdminUser = Annotated[User, Depends(require_admin)]
