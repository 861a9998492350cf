from datetime import date

import pytest

from leavedesk.models.leave_record import LeaveRecord, LeaveStatus, LeaveType
from leavedesk.services.leave_rules import (
    ANNUAL_PAID_ALLOWANCE,
    InvalidDateFormatError,
    LeaveBalance,
    LeaveErrorKind,
    compute_leave_balance,
    day_difference,
    find_conflict,
    has_leave_changes,
    normalize_status_label,
    ranges_overlap,
    remaining_paid_balance,
    validate_leave_range,
)


def record(start, end, leave_type=LeaveType.PAID, status=LeaveStatus.APPROVED, id=None):
    return LeaveRecord(
        id=id,
        emp_id="PT-101",
        email="alice@pal.tech",
        start_date=date.fromisoformat(start),
        end_date=date.fromisoformat(end),
        leave_type=leave_type,
        reason="Trip",
        day_difference=day_difference(start, end),
        status=status,
    )


class TestComputeLeaveBalance:
    def test_empty(self):
        assert compute_leave_balance([]) == LeaveBalance(0, 0)

    def test_splits_paid_and_unpaid(self):
        records = [
            record("2024-01-01", "2024-01-03"),
            record("2024-02-01", "2024-02-02", leave_type=LeaveType.UNPAID),
            record("2024-03-04", "2024-03-04", status=LeaveStatus.PENDING),
        ]
        assert compute_leave_balance(records) == LeaveBalance(paid_days=4, unpaid_days=2)

    def test_cancelled_and_rejected_are_excluded(self):
        records = [
            record("2024-01-01", "2024-01-05", status=LeaveStatus.CANCELLED),
            record("2024-02-01", "2024-02-05", status=LeaveStatus.REJECTED),
            record("2024-03-01", "2024-03-02", leave_type=LeaveType.UNPAID),
        ]
        balance = compute_leave_balance(records)
        assert balance.paid_days == 0
        assert balance.unpaid_days == 2
        assert balance.paid_days + balance.unpaid_days < sum(r.day_difference for r in records)

    def test_legacy_decision_codes_are_normalized(self):
        legacy = record("2024-01-01", "2024-01-05")
        legacy.status = "reject"
        approved = record("2024-02-01", "2024-02-02")
        approved.status = "approve"
        assert compute_leave_balance([legacy, approved]).paid_days == 2

    def test_unknown_leave_type_is_ignored(self):
        odd = record("2024-01-01", "2024-01-02")
        odd.leave_type = "sabbatical"
        assert compute_leave_balance([odd]) == LeaveBalance(0, 0)

    def test_total_matches_sum_when_nothing_excluded(self):
        records = [
            record("2024-01-01", "2024-01-03"),
            record("2024-04-01", "2024-04-10", leave_type=LeaveType.UNPAID),
        ]
        balance = compute_leave_balance(records)
        assert balance.paid_days + balance.unpaid_days == sum(r.day_difference for r in records)

    def test_is_idempotent(self):
        records = [record("2024-01-01", "2024-01-03")]
        assert compute_leave_balance(records) == compute_leave_balance(records)

    def test_remaining_paid_balance(self):
        records = [record("2024-01-01", "2024-01-05")]
        assert remaining_paid_balance(records) == ANNUAL_PAID_ALLOWANCE - 5
        assert remaining_paid_balance(records, allowance=3) == -2


class TestValidateLeaveRange:
    def test_start_after_end(self):
        result = validate_leave_range([], "2024-05-10", "2024-05-01")
        assert not result.ok
        assert result.error == LeaveErrorKind.INVALID_DATE_RANGE
        assert result.message == "End date should be greater than start date."

    def test_start_after_end_wins_over_conflicts(self):
        records = [record("2024-05-01", "2024-05-10")]
        result = validate_leave_range(records, "2024-05-10", "2024-05-01", leave_type=LeaveType.PAID)
        assert result.error == LeaveErrorKind.INVALID_DATE_RANGE

    def test_malformed_date_raises(self):
        with pytest.raises(InvalidDateFormatError) as exc_info:
            validate_leave_range([], "2024-13-45", "2024-05-01")
        assert exc_info.value.kind == LeaveErrorKind.INVALID_DATE_FORMAT

    def test_partial_overlap_is_duplicate(self):
        records = [record("2024-06-01", "2024-06-05")]
        result = validate_leave_range(records, "2024-06-03", "2024-06-10")
        assert result.error == LeaveErrorKind.DUPLICATE_LEAVE_RANGE
        assert result.message == "You have already applied for leave on these dates"

    @pytest.mark.parametrize("start,end", [
        ("2024-05-28", "2024-06-01"),  # ends on existing start
        ("2024-06-05", "2024-06-08"),  # starts on existing end
        ("2024-06-02", "2024-06-04"),  # inside existing
        ("2024-05-30", "2024-06-07"),  # contains existing
    ])
    def test_inclusive_overlap(self, start, end):
        records = [record("2024-06-01", "2024-06-05")]
        assert validate_leave_range(records, start, end).error == LeaveErrorKind.DUPLICATE_LEAVE_RANGE

    def test_adjacent_ranges_do_not_overlap(self):
        records = [record("2024-06-01", "2024-06-05")]
        result = validate_leave_range(records, "2024-06-06", "2024-06-07")
        assert result.ok
        assert result.day_difference == 2

    def test_cancelled_record_does_not_conflict(self):
        records = [record("2024-06-01", "2024-06-05", status=LeaveStatus.CANCELLED)]
        result = validate_leave_range(records, "2024-06-01", "2024-06-05")
        assert result.ok
        assert result.day_difference == 5

    def test_rejected_record_does_not_conflict(self):
        records = [record("2024-06-01", "2024-06-05", status=LeaveStatus.REJECTED)]
        assert validate_leave_range(records, "2024-06-02", "2024-06-03").ok

    def test_accepts_date_objects(self):
        result = validate_leave_range([], date(2024, 2, 28), date(2024, 3, 1))
        assert result.day_difference == 3

    def test_paid_balance_exhausted(self):
        records = [record("2024-01-01", "2024-01-18")]  # 18 paid days
        result = validate_leave_range(records, "2024-08-01", "2024-08-03", leave_type=LeaveType.PAID)
        assert result.error == LeaveErrorKind.INSUFFICIENT_PAID_BALANCE
        assert result.message == "Your paid leaves are not enough!"

    def test_paid_balance_exactly_used_up(self):
        records = [record("2024-01-01", "2024-01-18")]
        result = validate_leave_range(records, "2024-08-01", "2024-08-02", leave_type=LeaveType.PAID)
        assert result.ok
        assert result.day_difference == 2

    def test_unpaid_ignores_allowance(self):
        records = [record("2024-01-01", "2024-01-20")]
        result = validate_leave_range(records, "2024-08-01", "2024-08-10", leave_type=LeaveType.UNPAID)
        assert result.ok
        assert result.day_difference == 10

    def test_edit_excludes_original_from_overlap_and_balance(self):
        original = record("2024-07-01", "2024-07-03", id=7)
        records = [record("2024-01-01", "2024-01-15", id=1), original]  # 18 paid days in total
        result = validate_leave_range(
            records, "2024-07-01", "2024-07-05", leave_type=LeaveType.PAID, exclude_record=original
        )
        assert result.ok
        assert result.day_difference == 5

    def test_edit_matches_stored_copy_by_id(self):
        stored = record("2024-07-01", "2024-07-03", id=7)
        edited_view = record("2024-07-01", "2024-07-03", id=7)
        result = validate_leave_range([stored], "2024-07-02", "2024-07-04", exclude_record=edited_view)
        assert result.ok

    def test_edit_still_checks_other_records(self):
        original = record("2024-07-01", "2024-07-03", id=7)
        records = [record("2024-07-10", "2024-07-12", id=8), original]
        result = validate_leave_range(records, "2024-07-01", "2024-07-10", exclude_record=original)
        assert result.error == LeaveErrorKind.DUPLICATE_LEAVE_RANGE

    def test_unpaid_to_paid_edit_near_allowance(self):
        original = record("2024-07-01", "2024-07-03", leave_type=LeaveType.UNPAID, id=7)
        records = [record("2024-01-01", "2024-01-18", id=1), original]
        result = validate_leave_range(
            records, "2024-07-01", "2024-07-03", leave_type=LeaveType.PAID, exclude_record=original
        )
        assert result.error == LeaveErrorKind.INSUFFICIENT_PAID_BALANCE

    def test_unsaved_records_are_not_excluded_by_missing_id(self):
        existing = record("2024-06-01", "2024-06-05")
        draft = record("2024-09-01", "2024-09-02")
        result = validate_leave_range([existing], "2024-06-01", "2024-06-02", exclude_record=draft)
        assert result.error == LeaveErrorKind.DUPLICATE_LEAVE_RANGE


class TestHelpers:
    def test_normalize_status_label(self):
        assert normalize_status_label("approve") == "approved"
        assert normalize_status_label("reject") == "rejected"
        assert normalize_status_label("pending") == "pending"
        assert normalize_status_label(LeaveStatus.CANCELLED) == "cancelled"

    def test_day_difference_is_inclusive(self):
        assert day_difference("2024-06-01", "2024-06-01") == 1
        assert day_difference("2024-02-28", "2024-03-01") == 3

    def test_ranges_overlap(self):
        d = date.fromisoformat
        assert ranges_overlap(d("2024-01-01"), d("2024-01-31"), d("2024-01-10"), d("2024-01-12"))
        assert not ranges_overlap(d("2024-01-01"), d("2024-01-09"), d("2024-01-10"), d("2024-01-12"))

    def test_find_conflict_returns_first_match(self):
        first = record("2024-06-01", "2024-06-05", id=1)
        second = record("2024-06-04", "2024-06-08", id=2)
        assert find_conflict([first, second], "2024-06-04", "2024-06-04") is first
        assert find_conflict([first, second], "2024-07-01", "2024-07-02") is None

    def test_has_leave_changes(self):
        original = record("2024-06-01", "2024-06-05")
        assert not has_leave_changes(original, {})
        assert not has_leave_changes(original, {"start_date": date(2024, 6, 1), "leave_type": "paid"})
        assert has_leave_changes(original, {"reason": "Moved trip"})
        assert has_leave_changes(original, {"leave_type": LeaveType.UNPAID})
