"""Submission-time and transition-time rules for leave requests.

Both functions are pure: they raise ``ValidationError`` or return ``None``.
"""

from __future__ import annotations

from collections.abc import Collection
from typing import Optional

from leavedesk.common.constants import LeaveStatus
from leavedesk.common.exceptions import ValidationError
from leavedesk.leave.dates import DateRange
from leavedesk.leave.schemas import LeaveRequestCreate

REQUIRED_FIELDS = ("employee_id", "leave_type", "start_date", "end_date")


def _is_blank(value: object) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_submission(
    data: LeaveRequestCreate,
    allowed_leave_types: Collection[str],
) -> None:
    missing = [f for f in REQUIRED_FIELDS if _is_blank(getattr(data, f))]
    if missing:
        raise ValidationError(
            "missing required field",
            {f: ["This field is required."] for f in missing},
        )

    if not DateRange(data.start_date, data.end_date).is_valid:
        raise ValidationError(
            "invalid date range",
            {"end_date": ["end_date must be on or after start_date."]},
        )

    if data.leave_type.strip() not in allowed_leave_types:
        raise ValidationError(
            "unknown leave type",
            {"leave_type": [f"'{data.leave_type}' is not a configured leave type."]},
        )


def validate_transition_notes(status: LeaveStatus, notes: Optional[str]) -> None:
    if status == LeaveStatus.rejected and _is_blank(notes):
        raise ValidationError(
            "rejection reason required",
            {"admin_notes": ["A reason is required when rejecting a request."]},
        )
