from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import date, datetime

from leavedesk.models.leave_record import ActionType, LeaveStatus, LeaveType


class LeaveRecordBase(BaseModel):
    start_date: date
    end_date: date
    leave_type: LeaveType
    reason: str = Field(..., min_length=1, max_length=500)


class LeaveRecordCreate(LeaveRecordBase):
    pass


class LeaveRecordUpdate(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    leave_type: Optional[LeaveType] = None
    reason: Optional[str] = Field(None, min_length=1, max_length=500)


class LeaveCancel(BaseModel):
    reason: str = Field(..., min_length=1, max_length=500)


class LeaveDecision(BaseModel):
    action: ActionType

    @field_validator("action")
    @classmethod
    def action_is_decision(cls, v: ActionType) -> ActionType:
        if v not in (ActionType.APPROVE, ActionType.REJECT):
            raise ValueError("action must be 'approve' or 'reject'")
        return v


class LeaveRecordResponse(LeaveRecordBase):
    id: int
    emp_id: str
    email: str
    day_difference: int
    status: LeaveStatus
    responded_by: Optional[str] = None
    responded_at: Optional[datetime] = None
    cancel_reason: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class LeaveBalanceResponse(BaseModel):
    email: str
    paid_days: int
    unpaid_days: int
    allowance: int
    remaining_paid: int
