import os

# Point the app at a shared in-memory database before anything imports it
os.environ["DATABASE_URL"] = "sqlite://"

from datetime import date

import pytest
from fastapi.testclient import TestClient

from leavedesk.config import get_settings
from leavedesk.core.database import Base, SessionLocal, engine
from leavedesk.core.security import get_password_hash
from leavedesk.main import app
from leavedesk.models.employee import Employee, RoleType
from leavedesk.models.leave_record import LeaveRecord, LeaveStatus, LeaveType

PASSWORD = "secret123"
MANAGER_EMAIL = "manager@pal.tech"
EMPLOYEE_EMAIL = "alice@pal.tech"
OTHER_EMAIL = "bob@pal.tech"


@pytest.fixture
def db_session():
    import leavedesk.models  # noqa: F401

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db_session):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_employee(db_session):
    def _make(emp_id, email, role=RoleType.EMPLOYEE, manager_email=None, name=None, password=PASSWORD):
        employee = Employee(
            emp_id=emp_id,
            name=name or email.split("@")[0].title(),
            email=email,
            role=role,
            manager_email=manager_email,
            password_hash=get_password_hash(password),
        )
        db_session.add(employee)
        db_session.commit()
        db_session.refresh(employee)
        return employee
    return _make


@pytest.fixture
def make_leave(db_session):
    def _make(employee, start, end, leave_type=LeaveType.PAID, status=LeaveStatus.PENDING, reason="Family trip"):
        start, end = date.fromisoformat(start), date.fromisoformat(end)
        leave = LeaveRecord(
            emp_id=employee.emp_id,
            email=employee.email,
            start_date=start,
            end_date=end,
            leave_type=leave_type,
            reason=reason,
            day_difference=(end - start).days + 1,
            status=status,
        )
        db_session.add(leave)
        db_session.commit()
        db_session.refresh(leave)
        return leave
    return _make


@pytest.fixture
def manager(make_employee):
    return make_employee("PT-100", MANAGER_EMAIL, role=RoleType.MANAGER, manager_email=get_settings().hr_email)


@pytest.fixture
def employee(make_employee, manager):
    return make_employee("PT-101", EMPLOYEE_EMAIL, manager_email=manager.email)


@pytest.fixture
def other_employee(make_employee, manager):
    return make_employee("PT-102", OTHER_EMAIL, manager_email=manager.email)


def login(client, email, password=PASSWORD):
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def hr_headers(client):
    settings = get_settings()
    return login(client, settings.hr_email, settings.hr_password)


@pytest.fixture
def manager_headers(client, manager):
    return login(client, manager.email)


@pytest.fixture
def employee_headers(client, employee):
    return login(client, employee.email)


@pytest.fixture
def other_headers(client, other_employee):
    return login(client, other_employee.email)


@pytest.fixture
def login_as(client):
    def _login(email, password=PASSWORD):
        return login(client, email, password)
    return _login
