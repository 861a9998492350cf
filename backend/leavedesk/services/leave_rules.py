"""
Leave Rules

Accounting and validation rules for leave requests:
- Paid and unpaid day totals over a requester's records
- Overlap detection against records that are still live
- Annual paid allowance sufficiency for new and edited requests
- Status code normalization for display

Everything here is pure. Callers load the requester's records first and
persist whatever the rules accept.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional, Union

from leavedesk.models.leave_record import LeaveStatus, LeaveType

logger = logging.getLogger(__name__)

ANNUAL_PAID_ALLOWANCE = 20

DateInput = Union[date, str]


class LeaveErrorKind(str, Enum):
    INVALID_DATE_FORMAT = "InvalidDateFormat"
    INVALID_DATE_RANGE = "InvalidDateRange"
    DUPLICATE_LEAVE_RANGE = "DuplicateLeaveRange"
    INSUFFICIENT_PAID_BALANCE = "InsufficientPaidBalance"
    NO_CHANGE_DETECTED = "NoChangeDetected"


ERROR_MESSAGES: Dict[LeaveErrorKind, str] = {
    LeaveErrorKind.INVALID_DATE_FORMAT: "Invalid date format",
    LeaveErrorKind.INVALID_DATE_RANGE: "End date should be greater than start date.",
    LeaveErrorKind.DUPLICATE_LEAVE_RANGE: "You have already applied for leave on these dates",
    LeaveErrorKind.INSUFFICIENT_PAID_BALANCE: "Your paid leaves are not enough!",
    LeaveErrorKind.NO_CHANGE_DETECTED: "Form not updated, please try again!",
}

# Legacy decision codes stored by older clients
STATUS_LABELS = {
    "approve": LeaveStatus.APPROVED.value,
    "reject": LeaveStatus.REJECTED.value,
}

EXCLUDED_STATUSES = frozenset({LeaveStatus.CANCELLED.value, LeaveStatus.REJECTED.value})


class InvalidDateFormatError(ValueError):
    """Raised when a supplied date does not parse to a calendar date."""

    kind = LeaveErrorKind.INVALID_DATE_FORMAT

    def __init__(self, value: Any):
        self.value = value
        super().__init__(f"{ERROR_MESSAGES[self.kind]}: {value!r}")


@dataclass(frozen=True)
class LeaveBalance:
    """Days consumed by live records, split by leave type."""
    paid_days: int = 0
    unpaid_days: int = 0

    def remaining_paid(self, allowance: int = ANNUAL_PAID_ALLOWANCE) -> int:
        return allowance - self.paid_days


@dataclass(frozen=True)
class LeaveRangeResult:
    """Outcome of validating a proposed range: a day count or one error kind."""
    day_difference: Optional[int] = None
    error: Optional[LeaveErrorKind] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> Optional[str]:
        return ERROR_MESSAGES[self.error] if self.error else None

    @classmethod
    def accepted(cls, day_difference: int) -> "LeaveRangeResult":
        return cls(day_difference=day_difference)

    @classmethod
    def rejected(cls, error: LeaveErrorKind) -> "LeaveRangeResult":
        return cls(error=error)


def _code(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def normalize_status_label(status: Any) -> str:
    """Map a stored status code to its display label."""
    code = _code(status)
    return STATUS_LABELS.get(code, code)


def is_counted(record) -> bool:
    """Whether a record still takes part in accounting and conflict checks."""
    return normalize_status_label(record.status) not in EXCLUDED_STATUSES


def parse_leave_date(value: DateInput) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise InvalidDateFormatError(value) from None


def day_difference(start_date: DateInput, end_date: DateInput) -> int:
    """Inclusive number of calendar days between two dates."""
    return (parse_leave_date(end_date) - parse_leave_date(start_date)).days + 1


def compute_leave_balance(records: Iterable) -> LeaveBalance:
    """Total paid and unpaid days over records that are not cancelled or rejected."""
    paid_days = 0
    unpaid_days = 0
    for record in records:
        if not is_counted(record):
            continue
        leave_type = _code(record.leave_type)
        if leave_type == LeaveType.PAID.value:
            paid_days += record.day_difference
        elif leave_type == LeaveType.UNPAID.value:
            unpaid_days += record.day_difference
    return LeaveBalance(paid_days=paid_days, unpaid_days=unpaid_days)


def remaining_paid_balance(records: Iterable, allowance: int = ANNUAL_PAID_ALLOWANCE) -> int:
    return compute_leave_balance(records).remaining_paid(allowance)


def ranges_overlap(start: date, end: date, other_start: date, other_end: date) -> bool:
    """Inclusive overlap test between [start, end] and [other_start, other_end]."""
    return (
        other_start <= start <= other_end
        or other_start <= end <= other_end
        or (start <= other_start and other_end <= end)
    )


def _is_same_record(record, exclude_record) -> bool:
    if exclude_record is None:
        return False
    if record is exclude_record:
        return True
    return exclude_record.id is not None and record.id == exclude_record.id


def find_conflict(records: Iterable, start_date: DateInput, end_date: DateInput, exclude_record=None):
    """Return the first live record overlapping the range, or None."""
    start = parse_leave_date(start_date)
    end = parse_leave_date(end_date)
    for record in records:
        if _is_same_record(record, exclude_record) or not is_counted(record):
            continue
        if ranges_overlap(start, end, parse_leave_date(record.start_date), parse_leave_date(record.end_date)):
            return record
    return None


def validate_leave_range(
    records: Iterable,
    start_date: DateInput,
    end_date: DateInput,
    leave_type: Optional[Union[LeaveType, str]] = None,
    exclude_record=None,
    allowance: int = ANNUAL_PAID_ALLOWANCE,
) -> LeaveRangeResult:
    """
    Decide whether a proposed range may be submitted.

    For edits, pass the stored version as exclude_record: it is left out of
    both the overlap scan and the paid total, so the allowance check asks
    whether swapping the old range for the new one stays within allowance.

    Raises InvalidDateFormatError for dates that do not parse.
    """
    start = parse_leave_date(start_date)
    end = parse_leave_date(end_date)
    if start > end:
        return LeaveRangeResult.rejected(LeaveErrorKind.INVALID_DATE_RANGE)

    records = list(records)
    conflict = find_conflict(records, start, end, exclude_record=exclude_record)
    if conflict is not None:
        logger.debug("Range %s to %s overlaps leave %s", start, end, conflict.id)
        return LeaveRangeResult.rejected(LeaveErrorKind.DUPLICATE_LEAVE_RANGE)

    days = (end - start).days + 1
    if _code(leave_type) == LeaveType.PAID.value:
        others = [r for r in records if not _is_same_record(r, exclude_record)]
        consumed = compute_leave_balance(others).paid_days
        if allowance - consumed - days < 0:
            return LeaveRangeResult.rejected(LeaveErrorKind.INSUFFICIENT_PAID_BALANCE)

    return LeaveRangeResult.accepted(days)


def has_leave_changes(original, changes: Mapping[str, Any]) -> bool:
    """Whether any field in a partial update differs from the stored record."""
    for field, value in changes.items():
        if _code(getattr(original, field, None)) != _code(value):
            return True
    return False
