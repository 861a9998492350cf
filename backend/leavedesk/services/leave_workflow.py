"""Lifecycle transitions for leave records."""

import logging
from datetime import datetime
from typing import Any, Mapping, Optional, Union

from leavedesk.core.security import utc_now
from leavedesk.models.leave_record import ActionType, LeaveRecord, LeaveStatus
from leavedesk.services.leave_rules import normalize_status_label

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({"start_date", "end_date", "leave_type", "reason"})

DECISION_ACTIONS = (ActionType.APPROVE, ActionType.REJECT)


class LeaveTransitionError(Exception):
    """A transition the record's current status does not allow."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


def _is_pending(record: LeaveRecord) -> bool:
    return normalize_status_label(record.status) == LeaveStatus.PENDING.value


def can_cancel(record: LeaveRecord) -> bool:
    return _is_pending(record)


def can_decide(record: LeaveRecord) -> bool:
    return _is_pending(record)


def can_edit(record: LeaveRecord) -> bool:
    return _is_pending(record)


def decision_status(action: Union[ActionType, str]) -> LeaveStatus:
    """approve -> approved, reject -> rejected."""
    try:
        action = ActionType(action)
    except ValueError:
        raise LeaveTransitionError(f"Unsupported action: {action}") from None
    if action not in DECISION_ACTIONS:
        raise LeaveTransitionError(f"Unsupported action: {action.value}")
    return LeaveStatus(normalize_status_label(action))


def apply_decision(
    record: LeaveRecord,
    action: Union[ActionType, str],
    responder_email: str,
    now: Optional[datetime] = None,
) -> LeaveRecord:
    new_status = decision_status(action)
    if not can_decide(record):
        raise LeaveTransitionError("Can only approve or reject pending requests")

    record.status = new_status
    record.responded_by = responder_email
    record.responded_at = now or utc_now()
    logger.info("Leave %s %s by %s", record.id, new_status.value, responder_email)
    return record


def apply_cancel(record: LeaveRecord, reason: str) -> LeaveRecord:
    if not can_cancel(record):
        raise LeaveTransitionError("Can only cancel pending requests")

    record.status = LeaveStatus.CANCELLED
    record.cancel_reason = reason
    logger.info("Leave %s cancelled by requester", record.id)
    return record


def apply_edit(record: LeaveRecord, changes: Mapping[str, Any], day_difference: int) -> LeaveRecord:
    """Merge a validated partial update; an edited leave goes back to pending."""
    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        raise ValueError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")
    if not can_edit(record):
        raise LeaveTransitionError("Can only modify pending requests")

    for field, value in changes.items():
        setattr(record, field, value)
    record.day_difference = day_difference
    record.status = LeaveStatus.PENDING
    record.responded_by = None
    record.responded_at = None
    return record
