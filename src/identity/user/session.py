"""Database-backed login sessions.

The client holds an opaque random token; only its SHA-256 digest is stored,
so a leaked table cannot be replayed as cookies.
"""

import hashlib
import secrets
from datetime import datetime, timedelta

import structlog
from sqlalchemy import ForeignKey, String, delete, select
from sqlalchemy.orm import Mapped, Session, mapped_column

from identity.user.user import User
from shared.db import Base, utcnow

logger = structlog.get_logger(__name__)


def _digest(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class UserSession(Base):
    __tablename__ = "user_sessions"

    token_hash: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    created_at: Mapped[datetime] = mapped_column(default=utcnow)
    expires_at: Mapped[datetime] = mapped_column(index=True)


def open_session(session: Session, user: User, ttl: timedelta) -> str:
    """Create a session for ``user`` and return the raw token for the client."""
    token = secrets.token_urlsafe(32)
    now = utcnow()
    session.add(UserSession(token_hash=_digest(token), user_id=user.id, created_at=now, expires_at=now + ttl))
    session.flush()
    logger.info("session_opened", user_id=user.id)
    return token


def resolve_session(session: Session, token: str | None) -> User | None:
    if not token:
        return None
    return session.scalar(
        select(User)
        .join(UserSession, UserSession.user_id == User.id)
        .where(UserSession.token_hash == _digest(token), UserSession.expires_at > utcnow())
    )


def close_session(session: Session, token: str) -> None:
    session.execute(delete(UserSession).where(UserSession.token_hash == _digest(token)))


def purge_expired_sessions(session: Session) -> int:
    result = session.execute(delete(UserSession).where(UserSession.expires_at <= utcnow()))
    return result.rowcount
