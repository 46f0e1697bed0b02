"""User model, password hashing, registration and authentication."""

import hashlib
import hmac
import secrets
from datetime import datetime
from enum import Enum
from uuid import uuid4

import structlog
from sqlalchemy import String, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Mapped, Session, mapped_column

from shared.db import Base, utcnow
from shared.errors import AuthenticationRequired, Conflict, ValidationFailed

logger = structlog.get_logger(__name__)

MIN_PASSWORD_LENGTH = 8
PBKDF2_ITERATIONS = 390_000


class Role(Enum):
    ADMIN = "admin"
    USER = "user"


def hash_password(password: str, *, salt: bytes | None = None, iterations: int | None = None) -> str:
    salt = salt or secrets.token_bytes(16)
    iterations = iterations or PBKDF2_ITERATIONS
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return f"pbkdf2_sha256${iterations}${salt.hex()}${digest.hex()}"


def verify_password(password: str, encoded: str) -> bool:
    try:
        algorithm, iterations, salt_hex, digest_hex = encoded.split("$")
    except ValueError:
        return False
    if algorithm != "pbkdf2_sha256":
        return False
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), bytes.fromhex(salt_hex), int(iterations))
    return hmac.compare_digest(digest.hex(), digest_hex)


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=lambda: uuid4().hex)
    email: Mapped[str] = mapped_column(String(254), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(120))
    password_hash: Mapped[str] = mapped_column(String(200))
    role: Mapped[str] = mapped_column(String(16), default=Role.USER.value)
    created_at: Mapped[datetime] = mapped_column(default=utcnow)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value


def normalise_email(email: str) -> str:
    return email.strip().lower()


def find_user_by_email(session: Session, email: str) -> User | None:
    return session.scalar(select(User).where(User.email == normalise_email(email)))


def register_user(session: Session, *, email: str, name: str, password: str, role: Role = Role.USER) -> User:
    email = normalise_email(email)
    if "@" not in email:
        raise ValidationFailed("A valid email address is required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationFailed(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if find_user_by_email(session, email) is not None:
        raise Conflict("Email already registered")

    user = User(email=email, name=name.strip(), password_hash=hash_password(password), role=role.value)
    session.add(user)
    try:
        session.flush()
    except IntegrityError as exc:
        # Another registration for this email committed after the lookup above
        logger.info("registration_conflict")
        raise Conflict("Email already registered") from exc
    logger.info("user_registered", user_id=user.id, role=user.role)
    return user


def authenticate(session: Session, email: str, password: str) -> User:
    user = find_user_by_email(session, email)
    if user is None or not verify_password(password, user.password_hash):
        logger.info("login_failed")
        raise AuthenticationRequired("Invalid credentials")
    return user
