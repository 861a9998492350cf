from pydantic import BaseModel, EmailStr
from datetime import datetime

from leavedesk.models.employee import RoleType


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    email: str
    role: RoleType
    expires_at: datetime


class AuthContextResponse(BaseModel):
    employee_id: int
    emp_id: str
    email: str
    role: RoleType
