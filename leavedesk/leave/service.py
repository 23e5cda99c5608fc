"""Leave read side — list views for admins and employees."""

from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.common.constants import LeaveStatus
from leavedesk.common.exceptions import NotFoundError
from leavedesk.common.pagination import PaginationParams, paginate_query
from leavedesk.employees.service import EmployeeDirectory
from leavedesk.leave.ledger import LeaveBalanceLedger
from leavedesk.leave.models import LeaveRequest
from leavedesk.leave.query import filter_clauses, filter_requests
from leavedesk.leave.schemas import (
    LeaveBalanceOut,
    LeaveListOut,
    LeaveRequestOut,
    LeaveStats,
)

_NEWEST_FIRST = (LeaveRequest.created_at.desc(), LeaveRequest.id)


class LeaveService:
    """Async leave queries. Never mutates requests; may open ledger entries."""

    @staticmethod
    async def get_request(
        db: AsyncSession,
        request_id: uuid.UUID,
    ) -> LeaveRequestOut:
        req = await db.get(LeaveRequest, request_id)
        if req is None:
            raise NotFoundError("LeaveRequest", request_id)
        return LeaveRequestOut.model_validate(req)

    @staticmethod
    async def status_counts(db: AsyncSession) -> LeaveStats:
        """Requests per status across the whole collection."""
        result = await db.execute(
            select(LeaveRequest.status, func.count()).group_by(LeaveRequest.status)
        )
        counts = {status: n for status, n in result.all()}
        return LeaveStats(
            pending_count=counts.get(LeaveStatus.pending, 0),
            approved_count=counts.get(LeaveStatus.approved, 0),
            rejected_count=counts.get(LeaveStatus.rejected, 0),
        )

    @staticmethod
    async def list_requests(
        db: AsyncSession,
        pagination: PaginationParams,
        *,
        search: Optional[str] = None,
        leave_type: Optional[str] = None,
        status: Optional[str] = None,
    ) -> LeaveListOut:
        """All requests, newest first, filtered and paginated.

        ``stats`` counts the whole collection regardless of filters.
        """
        query = (
            select(LeaveRequest)
            .where(*filter_clauses(search=search, leave_type=leave_type, status=status))
            .order_by(*_NEWEST_FIRST)
        )
        page = await paginate_query(db, query, pagination)
        return LeaveListOut(
            data=[LeaveRequestOut.model_validate(r) for r in page.data],
            meta=page.meta,
            stats=await LeaveService.status_counts(db),
        )

    @staticmethod
    async def list_employee_requests(
        db: AsyncSession,
        employee_id: uuid.UUID,
        *,
        leave_type: Optional[str] = None,
        status: Optional[str] = None,
    ) -> list[LeaveRequestOut]:
        """One employee's requests, newest first."""
        if await EmployeeDirectory.get(db, employee_id) is None:
            raise NotFoundError("Employee", employee_id)
        result = await db.execute(
            select(LeaveRequest)
            .where(LeaveRequest.employee_id == employee_id)
            .order_by(*_NEWEST_FIRST)
        )
        mine = [LeaveRequestOut.model_validate(r) for r in result.scalars().all()]
        return filter_requests(mine, leave_type=leave_type, status=status)

    @staticmethod
    async def get_employee_balances(
        db: AsyncSession,
        ledger: LeaveBalanceLedger,
        employee_id: uuid.UUID,
        leave_types: list[str],
    ) -> list[LeaveBalanceOut]:
        """Every configured leave type's balance, opening missing entries."""
        if await EmployeeDirectory.get(db, employee_id) is None:
            raise NotFoundError("Employee", employee_id)
        return await ledger.balances_for(db, employee_id, leave_types)
