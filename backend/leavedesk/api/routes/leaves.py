import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from leavedesk.config import get_settings
from leavedesk.core.database import get_db
from leavedesk.core.security import AuthContext
from leavedesk.models.employee import Employee, RoleType
from leavedesk.models.leave_record import LeaveRecord, LeaveStatus, LeaveType
from leavedesk.schemas.leave import (
    LeaveBalanceResponse,
    LeaveCancel,
    LeaveDecision,
    LeaveRecordCreate,
    LeaveRecordResponse,
    LeaveRecordUpdate,
)
from leavedesk.services.leave_rules import (
    ERROR_MESSAGES,
    LeaveErrorKind,
    compute_leave_balance,
    has_leave_changes,
    validate_leave_range,
)
from leavedesk.services.leave_workflow import (
    LeaveTransitionError,
    apply_cancel,
    apply_decision,
    apply_edit,
    can_edit,
)
from leavedesk.api.deps import get_current_user, require_hr, require_manager_or_hr

logger = logging.getLogger(__name__)

router = APIRouter()


def get_leaves_for_email(db: Session, email: str) -> List[LeaveRecord]:
    """Snapshot of every leave record filed by one requester."""
    return db.query(LeaveRecord).filter(LeaveRecord.email == email).all()


def get_leave_or_404(db: Session, leave_id: int) -> LeaveRecord:
    leave = db.query(LeaveRecord).filter(LeaveRecord.id == leave_id).first()
    if not leave:
        raise HTTPException(status_code=404, detail="Leave request not found")
    return leave


def get_direct_report_emails(db: Session, manager_email: str) -> List[str]:
    rows = db.query(Employee.email).filter(Employee.manager_email == manager_email).all()
    return [row.email for row in rows]


def ensure_can_view(db: Session, current_user: AuthContext, email: str) -> None:
    """Callers see their own leaves; HR sees everyone's; managers see their reports'."""
    if email == current_user.email or current_user.has_role(RoleType.HR):
        return
    if current_user.has_role(RoleType.MANAGER) and email in get_direct_report_emails(db, current_user.email):
        return
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not enough permissions")


def _apply_filters(query, leave_type: Optional[LeaveType], status_filter: Optional[LeaveStatus]):
    if leave_type:
        query = query.filter(LeaveRecord.leave_type == leave_type)
    if status_filter:
        query = query.filter(LeaveRecord.status == status_filter)
    return query


def _rule_error(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


def _transition_error(exc: LeaveTransitionError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=exc.message)


@router.get("/", response_model=List[LeaveRecordResponse])
async def list_leaves(
    email: Optional[str] = Query(None, description="Filter by requester email (HR only)"),
    leave_type: Optional[LeaveType] = None,
    status_filter: Optional[LeaveStatus] = Query(None, alias="status", description="Filter by status"),
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: AuthContext = Depends(get_current_user)
):
    """
    Leave history, newest first.

    - Employees and managers see their own requests
    - HR sees every request and may narrow it with email
    """
    query = db.query(LeaveRecord)
    if current_user.has_role(RoleType.HR):
        if email:
            query = query.filter(LeaveRecord.email == email)
    else:
        query = query.filter(LeaveRecord.email == current_user.email)
    query = _apply_filters(query, leave_type, status_filter)
    return query.order_by(LeaveRecord.id.desc()).offset(skip).limit(limit).all()


@router.get("/balance", response_model=LeaveBalanceResponse)
async def get_leave_balance(
    email: Optional[str] = Query(None, description="Requester email, defaults to the caller"),
    db: Session = Depends(get_db),
    current_user: AuthContext = Depends(get_current_user)
):
    """Paid and unpaid days consumed and the paid days still available."""
    target_email = email or current_user.email
    ensure_can_view(db, current_user, target_email)

    allowance = get_settings().annual_paid_allowance
    balance = compute_leave_balance(get_leaves_for_email(db, target_email))
    return LeaveBalanceResponse(
        email=target_email,
        paid_days=balance.paid_days,
        unpaid_days=balance.unpaid_days,
        allowance=allowance,
        remaining_paid=balance.remaining_paid(allowance),
    )


@router.get("/requests", response_model=List[LeaveRecordResponse])
async def list_leave_requests(
    leave_type: Optional[LeaveType] = None,
    status_filter: Optional[LeaveStatus] = Query(None, alias="status", description="Filter by status"),
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: AuthContext = Depends(require_manager_or_hr)
):
    """Leave requests filed by the caller's direct reports, newest first."""
    report_emails = get_direct_report_emails(db, current_user.email)
    if not report_emails:
        return []
    query = db.query(LeaveRecord).filter(LeaveRecord.email.in_(report_emails))
    query = _apply_filters(query, leave_type, status_filter)
    return query.order_by(LeaveRecord.id.desc()).offset(skip).limit(limit).all()


@router.get("/{leave_id}", response_model=LeaveRecordResponse)
async def get_leave(
    leave_id: int,
    db: Session = Depends(get_db),
    current_user: AuthContext = Depends(get_current_user)
):
    leave = get_leave_or_404(db, leave_id)
    ensure_can_view(db, current_user, leave.email)
    return leave


@router.post("/", response_model=LeaveRecordResponse)
async def submit_leave(
    leave_data: LeaveRecordCreate,
    db: Session = Depends(get_db),
    current_user: AuthContext = Depends(get_current_user)
):
    """Submit a new leave request for the caller."""
    result = validate_leave_range(
        get_leaves_for_email(db, current_user.email),
        leave_data.start_date,
        leave_data.end_date,
        leave_type=leave_data.leave_type,
        allowance=get_settings().annual_paid_allowance,
    )
    if not result.ok:
        logger.info("Leave request from %s rejected: %s", current_user.email, result.error.value)
        raise _rule_error(result.message)

    leave = LeaveRecord(
        emp_id=current_user.emp_id,
        email=current_user.email,
        start_date=leave_data.start_date,
        end_date=leave_data.end_date,
        leave_type=leave_data.leave_type,
        reason=leave_data.reason,
        day_difference=result.day_difference,
        status=LeaveStatus.PENDING,
    )
    db.add(leave)
    db.commit()
    db.refresh(leave)

    logger.info("Leave %s submitted by %s for %d days", leave.id, leave.email, leave.day_difference)
    return leave


@router.patch("/{leave_id}", response_model=LeaveRecordResponse)
async def modify_leave(
    leave_id: int,
    leave_data: LeaveRecordUpdate,
    db: Session = Depends(get_db),
    current_user: AuthContext = Depends(get_current_user)
):
    """Edit one of the caller's pending requests. The request returns to pending."""
    leave = get_leave_or_404(db, leave_id)
    if leave.email != current_user.email:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You can only modify your own leave requests")
    if not can_edit(leave):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Can only modify pending requests")

    changes = leave_data.model_dump(exclude_unset=True, exclude_none=True)
    if not has_leave_changes(leave, changes):
        raise _rule_error(ERROR_MESSAGES[LeaveErrorKind.NO_CHANGE_DETECTED])

    result = validate_leave_range(
        get_leaves_for_email(db, current_user.email),
        changes.get("start_date", leave.start_date),
        changes.get("end_date", leave.end_date),
        leave_type=changes.get("leave_type", leave.leave_type),
        exclude_record=leave,
        allowance=get_settings().annual_paid_allowance,
    )
    if not result.ok:
        logger.info("Edit of leave %s rejected: %s", leave.id, result.error.value)
        raise _rule_error(result.message)

    try:
        apply_edit(leave, changes, result.day_difference)
    except LeaveTransitionError as exc:
        raise _transition_error(exc)

    db.commit()
    db.refresh(leave)
    logger.info("Leave %s modified by %s", leave.id, current_user.email)
    return leave


@router.post("/{leave_id}/cancel", response_model=LeaveRecordResponse)
async def cancel_leave(
    leave_id: int,
    cancel_data: LeaveCancel,
    db: Session = Depends(get_db),
    current_user: AuthContext = Depends(get_current_user)
):
    """Cancel one of the caller's pending requests."""
    leave = get_leave_or_404(db, leave_id)
    if leave.email != current_user.email:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You can only cancel your own leave requests")

    try:
        apply_cancel(leave, cancel_data.reason)
    except LeaveTransitionError as exc:
        raise _transition_error(exc)

    db.commit()
    db.refresh(leave)
    return leave


@router.post("/{leave_id}/decision", response_model=LeaveRecordResponse)
async def decide_leave(
    leave_id: int,
    decision: LeaveDecision,
    db: Session = Depends(get_db),
    current_user: AuthContext = Depends(require_manager_or_hr)
):
    """Approve or reject a pending request filed by one of the caller's direct reports."""
    leave = get_leave_or_404(db, leave_id)
    if leave.email not in get_direct_report_emails(db, current_user.email):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only respond to requests from your direct reports"
        )

    try:
        apply_decision(leave, decision.action, current_user.email)
    except LeaveTransitionError as exc:
        raise _transition_error(exc)

    db.commit()
    db.refresh(leave)
    return leave


@router.delete("/{leave_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_leave(
    leave_id: int,
    db: Session = Depends(get_db),
    current_user: AuthContext = Depends(require_hr)
):
    """Delete a leave record (HR only)."""
    leave = get_leave_or_404(db, leave_id)
    db.delete(leave)
    db.commit()
    logger.info("Leave %s deleted by %s", leave_id, current_user.email)
