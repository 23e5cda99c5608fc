"""Leave Pydantic v2 schemas — request / response validation.

Naming conventions:
  - *Create / *Request  → request bodies (write)
  - *Out / *Result      → response bodies (read)

Submission bodies leave every field optional; the required-field and
date-range rules are enforced by ``leavedesk.leave.validator``.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from leavedesk.common.constants import LeaveDecision, LeaveStatus
from leavedesk.common.pagination import PaginationMeta


# ═════════════════════════════════════════════════════════════════════
# Leave Request — Create
# ═════════════════════════════════════════════════════════════════════


class LeaveRequestCreate(BaseModel):
    """Payload for submitting a leave request."""

    employee_id: Optional[uuid.UUID] = None
    leave_type: Optional[str] = None
    start_date: Optional[date] = Field(None, description="Leave start date (inclusive)")
    end_date: Optional[date] = Field(None, description="Leave end date (inclusive)")
    reason: Optional[str] = Field(None, max_length=1000)
    document_url: Optional[str] = Field(None, max_length=500)


# ═════════════════════════════════════════════════════════════════════
# Leave Request — Response
# ═════════════════════════════════════════════════════════════════════


class LeaveRequestOut(BaseModel):
    """Full leave request response."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_id: uuid.UUID
    employee_name: str
    leave_type: str
    start_date: date
    end_date: date
    total_days: int
    reason: Optional[str] = None
    document_url: Optional[str] = None
    status: LeaveStatus
    admin_notes: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    created_at: datetime


# ═════════════════════════════════════════════════════════════════════
# Leave Balance
# ═════════════════════════════════════════════════════════════════════


class LeaveBalanceOut(BaseModel):
    """Balance for a single leave type; remaining is derived."""

    model_config = ConfigDict(from_attributes=True)

    employee_id: uuid.UUID
    leave_type: str
    total_days: int
    used_days: int
    remaining_days: int


# ═════════════════════════════════════════════════════════════════════
# Decide / Delete
# ═════════════════════════════════════════════════════════════════════


class LeaveStatusUpdate(BaseModel):
    """Payload for approving or rejecting one request."""

    status: LeaveDecision
    admin_notes: Optional[str] = Field(None, max_length=1000)


class LeaveBulkStatusUpdate(LeaveStatusUpdate):
    """Payload for approving or rejecting a selection of requests."""

    ids: list[uuid.UUID] = Field(..., min_length=1)


class LeaveBulkDelete(BaseModel):
    """Payload for deleting one or many requests."""

    ids: list[uuid.UUID] = Field(..., min_length=1)


class BulkItemError(BaseModel):
    id: str
    type: str
    detail: str


class BulkDeleteResult(BaseModel):
    deleted_count: int = 0
    errors: list[BulkItemError] = Field(default_factory=list)


class BulkDecideResult(BaseModel):
    updated_count: int = 0
    errors: list[BulkItemError] = Field(default_factory=list)


# ═════════════════════════════════════════════════════════════════════
# Listings
# ═════════════════════════════════════════════════════════════════════


class LeaveStats(BaseModel):
    pending_count: int = 0
    approved_count: int = 0
    rejected_count: int = 0


class LeaveListOut(BaseModel):
    """Admin list: one page of requests plus status counts."""

    data: list[LeaveRequestOut]
    meta: PaginationMeta
    stats: LeaveStats


class MyLeaveOut(BaseModel):
    data: list[LeaveRequestOut]


class MyBalancesOut(BaseModel):
    data: list[LeaveBalanceOut]
