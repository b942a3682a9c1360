"""Authentication domain service.

Passwords are stored as bcrypt hashes. Sessions are HS256 JWTs carrying the
user ID in ``sub``.
"""

import re
import secrets
import time
from datetime import datetime, timedelta, UTC
from decimal import Decimal
from typing import Optional

import bcrypt
import structlog
from jose import JWTError, jwt

from finlove.database.base import Database
from finlove.domain.entities import User
from finlove.domain.errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
    user_not_found,
)
from finlove.notifications import Mailer
from finlove.utils.date_parser import as_utc

logger = structlog.get_logger(__name__)

ALGORITHM = "HS256"
DEFAULT_SPENDING_LIMIT = Decimal("2000.00")
RESET_TOKEN_TTL = timedelta(hours=1)
MIN_PASSWORD_LENGTH = 6
MIN_NAME_LENGTH = 2

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def hash_password(password: str, rounds: int = 12) -> str:
    """Hash a password with bcrypt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """Check a password against its bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


def _validate_password(password: str) -> None:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")


class AuthService:
    """Registration, login, session tokens and password resets."""

    def __init__(
        self,
        db: Database,
        jwt_secret: str,
        mailer: Mailer,
        app_url: str = "http://localhost:8000",
        token_ttl: timedelta = timedelta(days=7),
        bcrypt_rounds: int = 12,
        failure_delay: float = 1.0,
    ):
        """Initialize auth service.

        Args:
            db: Database instance
            jwt_secret: Secret used to sign session tokens
            mailer: Mailer for password reset links
            app_url: Base URL used in reset links
            token_ttl: Lifetime of session tokens
            bcrypt_rounds: bcrypt cost factor
            failure_delay: Seconds to wait before rejecting bad credentials
        """
        self.db = db
        self.jwt_secret = jwt_secret
        self.mailer = mailer
        self.app_url = app_url.rstrip("/")
        self.token_ttl = token_ttl
        self.bcrypt_rounds = bcrypt_rounds
        self.failure_delay = failure_delay

    def register(self, name: str, email: str, password: str) -> tuple[str, User]:
        """Create an account and return (token, user).

        Raises:
            ValidationError: If name, email or password is invalid
            ConflictError: If the email is already registered
        """
        name = (name or "").strip()
        email = (email or "").strip().lower()
        if len(name) < MIN_NAME_LENGTH:
            raise ValidationError(f"Name must be at least {MIN_NAME_LENGTH} characters")
        if not EMAIL_RE.match(email):
            raise ValidationError(f"Invalid email '{email}'")
        _validate_password(password)

        if self.db.get_user_by_email(email) is not None:
            raise ConflictError(f"Email {email} is already registered")

        user_id = self.db.create_user(
            name=name,
            email=email,
            password_hash=hash_password(password, self.bcrypt_rounds),
            spending_limit=DEFAULT_SPENDING_LIMIT,
        )
        logger.info("user_registered", user_id=user_id)
        user = self.db.get_user(user_id)
        return self.issue_token(user_id), user

    def login(self, email: str, password: str) -> tuple[str, User]:
        """Check credentials and return (token, user).

        Raises:
            AuthenticationError: If the email or password is wrong
        """
        user = self.db.get_user_by_email((email or "").strip())
        if user is None or not verify_password(password or "", user.password_hash):
            logger.info("login_failed", email=email)
            if self.failure_delay:
                time.sleep(self.failure_delay)
            raise AuthenticationError("Invalid email or password")
        logger.info("login_succeeded", user_id=user.id)
        return self.issue_token(user.id), user

    def issue_token(self, user_id: int, now: Optional[datetime] = None) -> str:
        """Sign a session token for a user."""
        now = now or datetime.now(UTC)
        payload = {"sub": str(user_id), "iat": now, "exp": now + self.token_ttl}
        return jwt.encode(payload, self.jwt_secret, algorithm=ALGORITHM)

    def verify_token(self, token: str) -> int:
        """Return the user ID of a valid session token.

        Raises:
            AuthenticationError: If the token is malformed, expired or forged
        """
        try:
            payload = jwt.decode(token, self.jwt_secret, algorithms=[ALGORITHM])
            return int(payload["sub"])
        except (JWTError, KeyError, ValueError, TypeError):
            raise AuthenticationError("Invalid or expired token")

    def change_password(self, user_id: int, current_password: str, new_password: str) -> None:
        """Change a password after checking the current one.

        Raises:
            NotFoundError: If the user does not exist
            AuthenticationError: If the current password is wrong
            ValidationError: If the new password is too short
        """
        user = self.db.get_user(user_id)
        if user is None:
            raise NotFoundError(user_not_found(user_id))
        if not verify_password(current_password or "", user.password_hash):
            raise AuthenticationError("Current password is incorrect")
        _validate_password(new_password)
        self.db.update_user(user_id, password_hash=hash_password(new_password, self.bcrypt_rounds))

    def forgot_password(self, email: str, now: Optional[datetime] = None) -> None:
        """Email a reset link. Unknown emails are ignored silently."""
        user = self.db.get_user_by_email((email or "").strip())
        if user is None:
            logger.info("password_reset_unknown_email")
            return

        now = now or datetime.now(UTC)
        token = secrets.token_hex(32)
        self.db.update_user(user.id, reset_token=token, reset_token_expiry=now + RESET_TOKEN_TTL)
        self.mailer.send_password_reset(user.email, f"{self.app_url}/reset-password?token={token}")
        logger.info("password_reset_requested", user_id=user.id)

    def reset_password(self, token: str, password: str, now: Optional[datetime] = None) -> None:
        """Set a new password using a reset token.

        Raises:
            AuthenticationError: If the token is unknown or expired
            ValidationError: If the password is too short
        """
        _validate_password(password)
        user = self.db.get_user_by_reset_token(token) if token else None
        now = now or datetime.now(UTC)
        if user is None or user.reset_token_expiry is None or as_utc(user.reset_token_expiry) < now:
            raise AuthenticationError("Invalid or expired reset token")

        self.db.update_user(
            user.id,
            password_hash=hash_password(password, self.bcrypt_rounds),
            reset_token=None,
            reset_token_expiry=None,
        )
        logger.info("password_reset_completed", user_id=user.id)
