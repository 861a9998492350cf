from leavedesk.schemas.auth import LoginRequest, Token, AuthContextResponse
from leavedesk.schemas.employee import EmployeeCreate, EmployeeUpdate, EmployeeResponse
from leavedesk.schemas.leave import (
    LeaveRecordCreate,
    LeaveRecordUpdate,
    LeaveRecordResponse,
    LeaveCancel,
    LeaveDecision,
    LeaveBalanceResponse,
)

__all__ = [
    "LoginRequest", "Token", "AuthContextResponse",
    "EmployeeCreate", "EmployeeUpdate", "EmployeeResponse",
    "LeaveRecordCreate", "LeaveRecordUpdate", "LeaveRecordResponse",
    "LeaveCancel", "LeaveDecision", "LeaveBalanceResponse",
]
