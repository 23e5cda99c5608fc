"""Leave router — list, submit, decide, delete, balances.

Authentication is handled upstream; callers identify the employee
explicitly where a view is scoped to one person.
"""


import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.common.pagination import PaginationParams
from leavedesk.common.rate_limit import limiter
from leavedesk.config import settings
from leavedesk.database import get_db
from leavedesk.dependencies import get_workflow
from leavedesk.leave.schemas import (
    BulkDecideResult,
    BulkDeleteResult,
    LeaveBulkDelete,
    LeaveBulkStatusUpdate,
    LeaveListOut,
    LeaveRequestCreate,
    LeaveRequestOut,
    LeaveStatusUpdate,
    MyBalancesOut,
    MyLeaveOut,
)
from leavedesk.leave.service import LeaveService
from leavedesk.leave.workflow import LeaveWorkflow

router = APIRouter(prefix="", tags=["leave"])


# ── GET / ───────────────────────────────────────────────────────────

@router.get("", response_model=LeaveListOut)
async def list_leaves(
    search: Optional[str] = Query(None, description="Employee name contains"),
    leave_type: Optional[str] = Query(None, alias="type"),
    status_filter: Optional[str] = Query(None, alias="status"),
    pagination: PaginationParams = Depends(PaginationParams),
    db: AsyncSession = Depends(get_db),
):
    """All leave requests with status counts (admin view)."""
    return await LeaveService.list_requests(
        db,
        pagination,
        search=search,
        leave_type=leave_type,
        status=status_filter,
    )


# ── GET /my ─────────────────────────────────────────────────────────

@router.get("/my", response_model=MyLeaveOut)
async def my_leaves(
    employee_id: uuid.UUID = Query(...),
    leave_type: Optional[str] = Query(None, alias="type"),
    status_filter: Optional[str] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
):
    """One employee's leave history."""
    data = await LeaveService.list_employee_requests(
        db, employee_id, leave_type=leave_type, status=status_filter,
    )
    return MyLeaveOut(data=data)


# ── GET /my-stats ───────────────────────────────────────────────────

@router.get("/my-stats", response_model=MyBalancesOut)
async def my_balances(
    employee_id: uuid.UUID = Query(...),
    db: AsyncSession = Depends(get_db),
    workflow: LeaveWorkflow = Depends(get_workflow),
):
    """One employee's balance for every configured leave type."""
    data = await LeaveService.get_employee_balances(
        db, workflow.ledger, employee_id, workflow.leave_types,
    )
    return MyBalancesOut(data=data)


# ── POST / ──────────────────────────────────────────────────────────

@router.post("", response_model=LeaveRequestOut, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.RATE_LIMIT_SUBMIT)
async def submit_leave(
    request: Request,
    body: LeaveRequestCreate,
    db: AsyncSession = Depends(get_db),
    workflow: LeaveWorkflow = Depends(get_workflow),
):
    """Submit a leave request; it starts as pending."""
    return await workflow.submit(db, body)


# ── PUT /status ─────────────────────────────────────────────────────

@router.put("/status", response_model=BulkDecideResult)
async def bulk_update_status(
    body: LeaveBulkStatusUpdate,
    db: AsyncSession = Depends(get_db),
    workflow: LeaveWorkflow = Depends(get_workflow),
):
    """Approve or reject a selection; per-request failures are returned."""
    return await workflow.bulk_decide(db, body.ids, body.status, body.admin_notes)


# ── DELETE / ────────────────────────────────────────────────────────

@router.delete("", response_model=BulkDeleteResult)
async def delete_leaves(
    body: LeaveBulkDelete,
    db: AsyncSession = Depends(get_db),
    workflow: LeaveWorkflow = Depends(get_workflow),
):
    """Delete one or many requests; approved ones return their days."""
    return await workflow.delete(db, body.ids)


# ── GET /{id} ───────────────────────────────────────────────────────

@router.get("/{request_id}", response_model=LeaveRequestOut)
async def get_leave(
    request_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    return await LeaveService.get_request(db, request_id)


# ── PUT /{id}/status ────────────────────────────────────────────────

@router.put("/{request_id}/status", response_model=LeaveRequestOut)
async def update_status(
    request_id: uuid.UUID,
    body: LeaveStatusUpdate,
    db: AsyncSession = Depends(get_db),
    workflow: LeaveWorkflow = Depends(get_workflow),
):
    """Approve (debits the balance) or reject (reason required) a pending request."""
    return await workflow.decide(db, request_id, body.status, body.admin_notes)
