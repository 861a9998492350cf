"""
Employee Rules

Validation for adding and editing employees:
- Required fields
- Unique employee ids and emails (an edited employee's own values are allowed)
- Company email domain on employee and manager emails
- Minimum password length
- Employees must report to an existing manager; managers report to HR
"""

from enum import Enum
from typing import Dict, Iterable, Optional, Union

from leavedesk.models.employee import Employee, RoleType


class EmployeeErrorKind(str, Enum):
    MISSING_FIELD = "MissingField"
    DUPLICATE_EMP_ID = "DuplicateEmployeeId"
    INVALID_DOMAIN = "InvalidEmailDomain"
    DUPLICATE_EMAIL = "DuplicateEmployeeEmail"
    INVALID_PASSWORD_LENGTH = "InvalidPasswordLength"
    MANAGER_NOT_FOUND = "ManagerNotFound"


ERROR_MESSAGES: Dict[EmployeeErrorKind, str] = {
    EmployeeErrorKind.MISSING_FIELD: "Field is required",
    EmployeeErrorKind.DUPLICATE_EMP_ID: "Employee Id already Taken",
    EmployeeErrorKind.INVALID_DOMAIN: "Include domain ,include {domain}",
    EmployeeErrorKind.DUPLICATE_EMAIL: "Employee email already taken",
    EmployeeErrorKind.INVALID_PASSWORD_LENGTH: "Password minimum length is {min_length}",
    EmployeeErrorKind.MANAGER_NOT_FOUND: "Manager not found!",
}


def error_message(kind: EmployeeErrorKind, domain: str = "", min_length: int = 0) -> str:
    return ERROR_MESSAGES[kind].format(domain=domain, min_length=min_length)


def is_duplicate_emp_id(employees: Iterable[Employee], emp_id: str, initial: Optional[Employee] = None) -> bool:
    if initial is not None and emp_id == initial.emp_id:
        return False
    return any(employee.emp_id == emp_id for employee in employees)


def is_duplicate_email(employees: Iterable[Employee], email: str, initial: Optional[Employee] = None) -> bool:
    if initial is not None and email == initial.email:
        return False
    return any(employee.email == email for employee in employees)


def has_company_domain(email: str, domain: str) -> bool:
    return domain in email


def check_employee(
    employees: Iterable[Employee],
    *,
    emp_id: Optional[str],
    name: Optional[str],
    email: Optional[str],
    role: Optional[Union[RoleType, str]],
    manager_email: Optional[str] = None,
    password: Optional[str] = None,
    initial: Optional[Employee] = None,
    domain: str,
    min_password_length: int,
) -> Optional[EmployeeErrorKind]:
    """
    Return the first rule the candidate breaks, or None.

    A password is required for new employees only; on edit it is checked
    when supplied.
    """
    employees = list(employees)
    required = [emp_id, name, email, role]
    if initial is None:
        required.append(password)
    if not all(required):
        return EmployeeErrorKind.MISSING_FIELD

    if is_duplicate_emp_id(employees, emp_id, initial):
        return EmployeeErrorKind.DUPLICATE_EMP_ID
    if not has_company_domain(email, domain):
        return EmployeeErrorKind.INVALID_DOMAIN
    if is_duplicate_email(employees, email, initial):
        return EmployeeErrorKind.DUPLICATE_EMAIL
    if password is not None and len(password) < min_password_length:
        return EmployeeErrorKind.INVALID_PASSWORD_LENGTH

    if RoleType(role) == RoleType.EMPLOYEE:
        if not manager_email:
            return EmployeeErrorKind.MANAGER_NOT_FOUND
        if not has_company_domain(manager_email, domain):
            return EmployeeErrorKind.INVALID_DOMAIN
        managers = {e.email for e in employees if e.role == RoleType.MANAGER}
        if manager_email not in managers:
            return EmployeeErrorKind.MANAGER_NOT_FOUND

    return None


def resolve_manager_email(role: Union[RoleType, str], manager_email: Optional[str], hr_email: str) -> Optional[str]:
    """Managers always report to HR; HR reports to no one."""
    role = RoleType(role)
    if role == RoleType.MANAGER:
        return hr_email
    if role == RoleType.HR:
        return None
    return manager_email
