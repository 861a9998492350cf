import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from leavedesk.config import get_settings
from leavedesk.core.database import get_db
from leavedesk.core.security import AuthContext, get_password_hash
from leavedesk.models.employee import Employee, RoleType
from leavedesk.models.leave_record import LeaveRecord
from leavedesk.schemas.employee import EmployeeCreate, EmployeeUpdate, EmployeeResponse
from leavedesk.services.employee_rules import check_employee, error_message, resolve_manager_email
from leavedesk.scripts.seed_data import get_hr_email
from leavedesk.api.deps import get_current_user, require_hr

logger = logging.getLogger(__name__)

router = APIRouter()

HR_ACCOUNT_LOCKED = "The HR account's email and role cannot be changed"
SINGLE_HR_ACCOUNT = "An HR account already exists"


def _raise_for_rule(error) -> None:
    if error is None:
        return
    settings = get_settings()
    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=error_message(error, domain=settings.email_domain, min_length=settings.min_password_length),
    )


def get_employee_or_404(db: Session, employee_id: int) -> Employee:
    employee = db.query(Employee).filter(Employee.id == employee_id).first()
    if not employee:
        raise HTTPException(status_code=404, detail="Employee not found")
    return employee


@router.get("/", response_model=List[EmployeeResponse])
async def list_employees(
    manager_email: Optional[str] = Query(None, description="Filter by reporting manager"),
    role: Optional[RoleType] = None,
    email: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: AuthContext = Depends(get_current_user)
):
    """List employees. Can filter by manager_email, role and email."""
    query = db.query(Employee)
    if manager_email:
        query = query.filter(Employee.manager_email == manager_email)
    if role:
        query = query.filter(Employee.role == role)
    if email:
        query = query.filter(Employee.email == email)
    return query.order_by(Employee.id).offset(skip).limit(limit).all()


@router.get("/managers", response_model=List[EmployeeResponse])
async def list_managers(
    db: Session = Depends(get_db),
    current_user: AuthContext = Depends(get_current_user)
):
    """List everyone an employee can report to."""
    return db.query(Employee).filter(Employee.role == RoleType.MANAGER).order_by(Employee.name).all()


@router.get("/{employee_id}", response_model=EmployeeResponse)
async def get_employee(
    employee_id: int,
    db: Session = Depends(get_db),
    current_user: AuthContext = Depends(get_current_user)
):
    """Get a specific employee by ID."""
    return get_employee_or_404(db, employee_id)


@router.post("/", response_model=EmployeeResponse)
async def create_employee(
    employee_data: EmployeeCreate,
    db: Session = Depends(get_db),
    current_user: AuthContext = Depends(require_hr)
):
    """Create a new employee (HR only)."""
    settings = get_settings()
    if employee_data.role == RoleType.HR:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=SINGLE_HR_ACCOUNT)
    _raise_for_rule(check_employee(
        db.query(Employee).all(),
        emp_id=employee_data.emp_id,
        name=employee_data.name,
        email=employee_data.email,
        role=employee_data.role,
        manager_email=employee_data.manager_email,
        password=employee_data.password,
        domain=settings.email_domain,
        min_password_length=settings.min_password_length,
    ))

    employee = Employee(
        emp_id=employee_data.emp_id,
        name=employee_data.name,
        email=employee_data.email,
        role=employee_data.role,
        manager_email=resolve_manager_email(employee_data.role, employee_data.manager_email, get_hr_email(db)),
        password_hash=get_password_hash(employee_data.password),
    )
    db.add(employee)
    db.commit()
    db.refresh(employee)

    logger.info("Employee %s (%s) added by %s", employee.emp_id, employee.role.value, current_user.email)
    return employee


@router.put("/{employee_id}", response_model=EmployeeResponse)
async def update_employee(
    employee_id: int,
    employee_data: EmployeeUpdate,
    db: Session = Depends(get_db),
    current_user: AuthContext = Depends(require_hr)
):
    """Update an employee (HR only). Omitted fields keep their current values."""
    settings = get_settings()
    employee = get_employee_or_404(db, employee_id)
    update_data = employee_data.model_dump(exclude_unset=True, exclude_none=True)

    candidate = {
        "emp_id": employee.emp_id,
        "name": employee.name,
        "email": employee.email,
        "role": employee.role,
        "manager_email": employee.manager_email,
    }
    candidate.update(update_data)
    if employee.role == RoleType.HR:
        if candidate["email"] != employee.email or RoleType(candidate["role"]) != RoleType.HR:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=HR_ACCOUNT_LOCKED)
    elif RoleType(candidate["role"]) == RoleType.HR:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=SINGLE_HR_ACCOUNT)
    _raise_for_rule(check_employee(
        db.query(Employee).filter(Employee.id != employee.id).all(),
        initial=employee,
        domain=settings.email_domain,
        min_password_length=settings.min_password_length,
        **candidate,
    ))

    old_email = employee.email
    password = candidate.pop("password", None)
    candidate["manager_email"] = resolve_manager_email(candidate["role"], candidate["manager_email"], get_hr_email(db))
    for field, value in candidate.items():
        setattr(employee, field, value)
    if password:
        employee.password_hash = get_password_hash(password)

    if employee.email != old_email:
        db.query(LeaveRecord).filter(LeaveRecord.email == old_email).update(
            {LeaveRecord.email: employee.email, LeaveRecord.emp_id: employee.emp_id},
            synchronize_session=False,
        )
        db.query(Employee).filter(Employee.manager_email == old_email).update(
            {Employee.manager_email: employee.email},
            synchronize_session=False,
        )
    else:
        db.query(LeaveRecord).filter(LeaveRecord.email == old_email).update(
            {LeaveRecord.emp_id: employee.emp_id},
            synchronize_session=False,
        )

    db.commit()
    db.refresh(employee)
    logger.info("Employee %s updated by %s", employee.emp_id, current_user.email)
    return employee


@router.delete("/{employee_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_employee(
    employee_id: int,
    db: Session = Depends(get_db),
    current_user: AuthContext = Depends(require_hr)
):
    """Remove an employee together with all of their leave records (HR only)."""
    employee = get_employee_or_404(db, employee_id)
    if employee.id == current_user.employee_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot remove the signed-in account"
        )

    emp_id = employee.emp_id
    removed = db.query(LeaveRecord).filter(LeaveRecord.email == employee.email).delete(synchronize_session=False)
    db.delete(employee)
    db.commit()
    logger.info("Employee %s removed with %d leave records by %s", emp_id, removed, current_user.email)
