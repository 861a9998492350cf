"""
Sample Data Seeder

Creates the bootstrap HR account plus a small organisation for local testing:
- Managers reporting to HR
- Employees reporting to each manager
- A few leave records in every status

Run with: python -m leavedesk.scripts.seed_data
"""

import logging
from datetime import date, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from leavedesk.config import get_settings
from leavedesk.core.database import SessionLocal, init_db
from leavedesk.core.security import get_password_hash
from leavedesk.models.employee import Employee, RoleType
from leavedesk.models.leave_record import LeaveRecord, LeaveStatus, LeaveType
from leavedesk.services.leave_rules import day_difference

logger = logging.getLogger(__name__)

SAMPLE_PASSWORD = "welcome1"

MANAGER_DATA = [
    {"emp_id": "PT-100", "name": "Priya Raman", "email": "priya"},
    {"emp_id": "PT-200", "name": "Daniel Okafor", "email": "daniel"},
]

EMPLOYEE_DATA = [
    {"emp_id": "PT-101", "name": "Arjun Mehta", "email": "arjun", "manager": "priya"},
    {"emp_id": "PT-102", "name": "Sofia Lind", "email": "sofia", "manager": "priya"},
    {"emp_id": "PT-201", "name": "Kenji Watanabe", "email": "kenji", "manager": "daniel"},
    {"emp_id": "PT-202", "name": "Amara Nwosu", "email": "amara", "manager": "daniel"},
]

# (offset from today in days, length in days, type, status)
LEAVE_PATTERN = [
    (-40, 3, LeaveType.PAID, LeaveStatus.APPROVED),
    (-20, 1, LeaveType.UNPAID, LeaveStatus.REJECTED),
    (10, 2, LeaveType.PAID, LeaveStatus.PENDING),
    (30, 5, LeaveType.UNPAID, LeaveStatus.CANCELLED),
]


def get_hr_account(db: Session) -> Optional[Employee]:
    return db.query(Employee).filter(Employee.role == RoleType.HR).order_by(Employee.id).first()


def get_hr_email(db: Session) -> str:
    """Address managers report to: the stored HR account, else the configured one."""
    hr = get_hr_account(db)
    return hr.email if hr else get_settings().hr_email


def ensure_hr_account(db: Session) -> Employee:
    """Create the HR account from settings if no HR account exists yet."""
    settings = get_settings()
    hr = get_hr_account(db)
    if hr:
        if hr.email != settings.hr_email:
            logger.warning("HR account is %s, settings name %s; keeping the stored account", hr.email, settings.hr_email)
        return hr

    hr = Employee(
        emp_id=settings.hr_emp_id,
        name=settings.hr_name,
        email=settings.hr_email,
        role=RoleType.HR,
        password_hash=get_password_hash(settings.hr_password),
    )
    db.add(hr)
    db.commit()
    db.refresh(hr)
    logger.info("Created HR account %s", hr.email)
    return hr


def _address(local_part: str) -> str:
    return f"{local_part}{get_settings().email_domain}"


def seed_employees(db: Session) -> None:
    hr_email = get_hr_email(db)
    for data in MANAGER_DATA:
        if db.query(Employee).filter(Employee.emp_id == data["emp_id"]).first():
            continue
        db.add(Employee(
            emp_id=data["emp_id"],
            name=data["name"],
            email=_address(data["email"]),
            role=RoleType.MANAGER,
            manager_email=hr_email,
            password_hash=get_password_hash(SAMPLE_PASSWORD),
        ))
    for data in EMPLOYEE_DATA:
        if db.query(Employee).filter(Employee.emp_id == data["emp_id"]).first():
            continue
        db.add(Employee(
            emp_id=data["emp_id"],
            name=data["name"],
            email=_address(data["email"]),
            role=RoleType.EMPLOYEE,
            manager_email=_address(data["manager"]),
            password_hash=get_password_hash(SAMPLE_PASSWORD),
        ))
    db.commit()


def seed_leaves(db: Session) -> None:
    today = date.today()
    for data in EMPLOYEE_DATA:
        email = _address(data["email"])
        if db.query(LeaveRecord).filter(LeaveRecord.email == email).first():
            continue
        for offset, length, leave_type, status in LEAVE_PATTERN:
            start = today + timedelta(days=offset)
            end = start + timedelta(days=length - 1)
            db.add(LeaveRecord(
                emp_id=data["emp_id"],
                email=email,
                start_date=start,
                end_date=end,
                leave_type=leave_type,
                reason="Sample leave",
                day_difference=day_difference(start, end),
                status=status,
                responded_by=_address(data["manager"]) if status in (LeaveStatus.APPROVED, LeaveStatus.REJECTED) else None,
            ))
    db.commit()


def main():
    logging.basicConfig(level=logging.INFO)
    init_db()
    db = SessionLocal()
    try:
        ensure_hr_account(db)
        seed_employees(db)
        seed_leaves(db)
        print(f"Seeded {db.query(Employee).count()} employees and {db.query(LeaveRecord).count()} leave records.")
        print(f"Sample password: {SAMPLE_PASSWORD}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
