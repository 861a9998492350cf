import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from leavedesk.models.employee import RoleType


def get_password_hash(password: str) -> str:
    return generate_password_hash(password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    return check_password_hash(password_hash, plain_password)


def generate_session_token() -> str:
    return secrets.token_urlsafe(32)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def session_expiry(minutes: int, now: Optional[datetime] = None) -> datetime:
    return (now or utc_now()) + timedelta(minutes=minutes)


def is_expired(expires_at: datetime, now: Optional[datetime] = None) -> bool:
    # SQLite hands back naive values; they are stored as UTC
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return expires_at <= (now or utc_now())


@dataclass(frozen=True)
class AuthContext:
    """The signed-in caller, resolved from a live session for one request."""
    employee_id: int
    emp_id: str
    email: str
    role: RoleType
    token: str

    def has_role(self, *roles: RoleType) -> bool:
        return self.role in roles
