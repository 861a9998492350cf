from sqlalchemy import Column, Integer, String, Date, DateTime, Enum as SQLEnum
from sqlalchemy.sql import func
import enum

from leavedesk.core.database import Base


class LeaveStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class LeaveType(str, enum.Enum):
    PAID = "paid"
    UNPAID = "unpaid"


class ActionType(str, enum.Enum):
    MODIFY = "modify"
    REJECT = "reject"
    CANCEL = "cancel"
    APPROVE = "approve"


class LeaveRecord(Base):
    __tablename__ = "leave_records"

    id = Column(Integer, primary_key=True, index=True)
    emp_id = Column(String(50), nullable=False)
    email = Column(String(255), index=True, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    leave_type = Column(SQLEnum(LeaveType, values_callable=lambda obj: [e.value for e in obj]), nullable=False)
    reason = Column(String(500), nullable=False)
    day_difference = Column(Integer, nullable=False)
    status = Column(SQLEnum(LeaveStatus, values_callable=lambda obj: [e.value for e in obj]), default=LeaveStatus.PENDING, nullable=False)
    responded_by = Column(String(255))
    responded_at = Column(DateTime(timezone=True))
    cancel_reason = Column(String(500))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<LeaveRecord(id={self.id}, email={self.email}, {self.start_date} to {self.end_date}, status={self.status})>"
