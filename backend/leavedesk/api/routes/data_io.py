"""
Data Export API Routes

Provides HR endpoints for:
- Leave record export (CSV/Excel)
- Employee directory export (CSV/Excel)
"""

from typing import Optional
from io import BytesIO, StringIO
import pandas as pd

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from leavedesk.core.database import get_db
from leavedesk.core.security import AuthContext
from leavedesk.api.deps import require_hr
from leavedesk.models.employee import Employee
from leavedesk.models.leave_record import LeaveRecord, LeaveStatus, LeaveType

router = APIRouter()

LEAVE_COLUMNS = [
    "id", "emp_id", "email", "start_date", "end_date", "leave_type", "day_difference",
    "status", "reason", "responded_by", "cancel_reason",
]
EMPLOYEE_COLUMNS = ["id", "emp_id", "name", "email", "role", "manager_email"]


def _frame_response(df: pd.DataFrame, format: str, filename: str) -> StreamingResponse:
    if format == "xlsx":
        output = BytesIO()
        df.to_excel(output, index=False, engine='openpyxl')
        output.seek(0)
        return StreamingResponse(
            output,
            media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            headers={"Content-Disposition": f"attachment; filename={filename}.xlsx"}
        )
    output = StringIO()
    df.to_csv(output, index=False)
    output.seek(0)
    return StreamingResponse(
        iter([output.getvalue()]),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}.csv"}
    )


@router.get("/export/leaves")
async def export_leaves(
    email: Optional[str] = Query(None),
    leave_type: Optional[LeaveType] = None,
    status_filter: Optional[LeaveStatus] = Query(None, alias="status"),
    format: str = Query("csv", pattern="^(csv|xlsx)$"),
    db: Session = Depends(get_db),
    current_user: AuthContext = Depends(require_hr)
):
    """Export leave records to CSV or Excel."""
    query = db.query(LeaveRecord)
    if email:
        query = query.filter(LeaveRecord.email == email)
    if leave_type:
        query = query.filter(LeaveRecord.leave_type == leave_type)
    if status_filter:
        query = query.filter(LeaveRecord.status == status_filter)

    data = []
    for leave in query.order_by(LeaveRecord.start_date).all():
        data.append({
            "id": leave.id,
            "emp_id": leave.emp_id,
            "email": leave.email,
            "start_date": leave.start_date.isoformat(),
            "end_date": leave.end_date.isoformat(),
            "leave_type": leave.leave_type.value,
            "day_difference": leave.day_difference,
            "status": leave.status.value,
            "reason": leave.reason,
            "responded_by": leave.responded_by or "",
            "cancel_reason": leave.cancel_reason or "",
        })

    df = pd.DataFrame(data, columns=LEAVE_COLUMNS)
    return _frame_response(df, format, "leaves")


@router.get("/export/employees")
async def export_employees(
    format: str = Query("csv", pattern="^(csv|xlsx)$"),
    db: Session = Depends(get_db),
    current_user: AuthContext = Depends(require_hr)
):
    """Export the employee directory to CSV or Excel."""
    data = []
    for emp in db.query(Employee).order_by(Employee.id).all():
        data.append({
            "id": emp.id,
            "emp_id": emp.emp_id,
            "name": emp.name,
            "email": emp.email,
            "role": emp.role.value,
            "manager_email": emp.manager_email or "",
        })

    df = pd.DataFrame(data, columns=EMPLOYEE_COLUMNS)
    return _frame_response(df, format, "employees")
