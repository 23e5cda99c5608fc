"""Enums and constants for Leave Desk."""

from __future__ import annotations

import enum


# ── Leave ───────────────────────────────────────────────────────────

class LeaveStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class LeaveDecision(str, enum.Enum):
    """Admin decision on a pending request, expressed as the target status."""

    approved = "approved"
    rejected = "rejected"

    @property
    def target_status(self) -> LeaveStatus:
        return LeaveStatus(self.value)


# ── Audit ───────────────────────────────────────────────────────────

class AuditAction(str, enum.Enum):
    create = "create"
    approve = "approve"
    reject = "reject"
    delete = "delete"


# ── Misc constants ──────────────────────────────────────────────────

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s — %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
