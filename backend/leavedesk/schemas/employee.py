from pydantic import BaseModel, EmailStr
from typing import Optional
from datetime import datetime

from leavedesk.models.employee import RoleType


class EmployeeBase(BaseModel):
    emp_id: str
    name: str
    email: EmailStr
    role: RoleType = RoleType.EMPLOYEE
    manager_email: Optional[EmailStr] = None


class EmployeeCreate(EmployeeBase):
    password: str


class EmployeeUpdate(BaseModel):
    emp_id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    role: Optional[RoleType] = None
    manager_email: Optional[EmailStr] = None
    password: Optional[str] = None


class EmployeeResponse(EmployeeBase):
    id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
