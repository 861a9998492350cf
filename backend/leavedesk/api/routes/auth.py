import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from leavedesk.config import get_settings
from leavedesk.core.database import get_db
from leavedesk.core.security import AuthContext, generate_session_token, session_expiry, verify_password
from leavedesk.models.auth_session import AuthSession
from leavedesk.models.employee import Employee
from leavedesk.schemas.auth import AuthContextResponse, LoginRequest, Token
from leavedesk.api.deps import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()

INVALID_USER = "User not existed with given mail!"
INVALID_PASSWORD = "Your password was incorrect"


@router.post("/login", response_model=Token)
async def login(credentials: LoginRequest, db: Session = Depends(get_db)):
    """Sign in with email and password and open a session."""
    employee = db.query(Employee).filter(Employee.email == credentials.email).first()
    if not employee:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_USER)
    if not verify_password(credentials.password, employee.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_PASSWORD)

    settings = get_settings()
    session = AuthSession(
        token=generate_session_token(),
        employee_id=employee.id,
        expires_at=session_expiry(settings.session_expire_minutes),
    )
    db.add(session)
    db.commit()
    db.refresh(session)

    logger.info("Login for %s (%s)", employee.email, employee.role.value)
    return Token(
        access_token=session.token,
        email=employee.email,
        role=employee.role,
        expires_at=session.expires_at,
    )


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    db: Session = Depends(get_db),
    current_user: AuthContext = Depends(get_current_user)
):
    """End the caller's session."""
    db.query(AuthSession).filter(AuthSession.token == current_user.token).delete()
    db.commit()
    logger.info("Logout for %s", current_user.email)


@router.get("/me", response_model=AuthContextResponse)
async def read_current_user(current_user: AuthContext = Depends(get_current_user)):
    return AuthContextResponse(
        employee_id=current_user.employee_id,
        emp_id=current_user.emp_id,
        email=current_user.email,
        role=current_user.role,
    )
