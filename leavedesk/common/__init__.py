"""Common module — shared utilities for Leave Desk."""

from leavedesk.common.audit import AuditTrail, create_audit_entry
from leavedesk.common.constants import (
    AuditAction,
    LeaveDecision,
    LeaveStatus,
)
from leavedesk.common.exceptions import (
    AppException,
    InsufficientBalanceError,
    InvalidStateError,
    LedgerInconsistencyError,
    NotFoundError,
    ValidationError,
    register_exception_handlers,
)
from leavedesk.common.pagination import (
    Page,
    PaginationMeta,
    PaginationParams,
    paginate,
)

__all__ = [
    # Audit
    "AuditTrail",
    "create_audit_entry",
    # Constants / Enums
    "AuditAction",
    "LeaveDecision",
    "LeaveStatus",
    # Exceptions
    "AppException",
    "InsufficientBalanceError",
    "InvalidStateError",
    "LedgerInconsistencyError",
    "NotFoundError",
    "ValidationError",
    "register_exception_handlers",
    # Pagination
    "Page",
    "PaginationMeta",
    "PaginationParams",
    "paginate",
]
