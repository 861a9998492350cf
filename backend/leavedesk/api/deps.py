import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from leavedesk.core.database import get_db
from leavedesk.core.security import AuthContext, is_expired
from leavedesk.models.auth_session import AuthSession
from leavedesk.models.employee import RoleType

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> AuthContext:
    """Resolve the bearer token to the caller's auth context."""
    if credentials is None:
        raise _unauthorized("Not authenticated")

    session = db.query(AuthSession).filter(AuthSession.token == credentials.credentials).first()
    if not session:
        raise _unauthorized("Invalid or expired session")

    if is_expired(session.expires_at):
        logger.info("Session for employee %s expired", session.employee_id)
        db.delete(session)
        db.commit()
        raise _unauthorized("Invalid or expired session")

    employee = session.employee
    return AuthContext(
        employee_id=employee.id,
        emp_id=employee.emp_id,
        email=employee.email,
        role=employee.role,
        token=session.token,
    )


def require_roles(*roles: RoleType):
    """Dependency factory that admits only the given roles."""
    def checker(current_user: AuthContext = Depends(get_current_user)) -> AuthContext:
        if not current_user.has_role(*roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not enough permissions",
            )
        return current_user
    return checker


require_hr = require_roles(RoleType.HR)
require_manager_or_hr = require_roles(RoleType.MANAGER, RoleType.HR)
