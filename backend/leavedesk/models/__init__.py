from leavedesk.models.employee import Employee
from leavedesk.models.leave_record import LeaveRecord
from leavedesk.models.auth_session import AuthSession

__all__ = [
    "Employee",
    "LeaveRecord",
    "AuthSession",
]
