"""Leave workflow — the pending → approved | rejected state machine.

The workflow is the only writer of leave requests and, through the ledger,
of balances:
  - submit: validate, then create a pending request
  - decide: approve (debits the ledger) or reject (requires a reason)
  - delete: remove requests, crediting back any that were approved
  - bulk_decide: decide over a selection with per-request isolation

Work on one request is serialized by a per-request lock taken before the
request is read and held until its status, ledger entry and audit row are
written. Ledger locks are only ever taken while holding a request lock.

In-process locks are released before the transaction commits, so a
transaction must not take a second request's locks while still holding
the row locks of the first. Single-request calls leave the commit to the
caller; the bulk calls commit after every id.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.common.audit import create_audit_entry
from leavedesk.common.constants import AuditAction, LeaveDecision, LeaveStatus
from leavedesk.common.exceptions import (
    AppException,
    InvalidStateError,
    LedgerInconsistencyError,
    NotFoundError,
    ValidationError,
)
from leavedesk.common.locks import KeyedLocks
from leavedesk.config import settings
from leavedesk.employees.service import EmployeeDirectory
from leavedesk.leave.ledger import LeaveBalanceLedger
from leavedesk.leave.models import LeaveRequest
from leavedesk.leave.schemas import (
    BulkDecideResult,
    BulkDeleteResult,
    BulkItemError,
    LeaveRequestCreate,
    LeaveRequestOut,
)
from leavedesk.leave.validator import validate_submission, validate_transition_notes

logger = logging.getLogger(__name__)

ENTITY_TYPE = "leave_request"


def _parse_decision(decision: LeaveDecision | str) -> LeaveDecision:
    try:
        return LeaveDecision(decision)
    except ValueError:
        raise ValidationError(
            "invalid decision",
            {"status": [f"'{decision}' is not one of: approved, rejected."]},
        ) from None


def _snapshot(req: LeaveRequest) -> dict:
    return {
        "employee_id": str(req.employee_id),
        "leave_type": req.leave_type,
        "start_date": req.start_date.isoformat(),
        "end_date": req.end_date.isoformat(),
        "total_days": req.total_days,
        "status": req.status.value,
    }


class LeaveWorkflow:
    """Async leave lifecycle operations bound to one ledger and lock registry."""

    def __init__(
        self,
        ledger: Optional[LeaveBalanceLedger] = None,
        *,
        leave_types: Optional[Iterable[str]] = None,
        locks: Optional[KeyedLocks] = None,
        directory: type[EmployeeDirectory] = EmployeeDirectory,
    ) -> None:
        self.locks = locks if locks is not None else KeyedLocks()
        self.ledger = (
            ledger if ledger is not None else LeaveBalanceLedger(locks=self.locks)
        )
        self.leave_types = list(
            settings.leave_types_list if leave_types is None else leave_types
        )
        self.directory = directory

    # ─────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    def _key(request_id: uuid.UUID) -> tuple[str, uuid.UUID]:
        return ("request", request_id)

    @staticmethod
    async def _load_for_update(
        db: AsyncSession,
        request_id: uuid.UUID,
    ) -> LeaveRequest:
        result = await db.execute(
            select(LeaveRequest)
            .where(LeaveRequest.id == request_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        req = result.scalars().first()
        if req is None:
            raise NotFoundError("LeaveRequest", request_id)
        return req

    # ─────────────────────────────────────────────────────────────────
    # Submit
    # ─────────────────────────────────────────────────────────────────

    async def submit(
        self,
        db: AsyncSession,
        data: LeaveRequestCreate,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> LeaveRequestOut:
        """Create a pending request. Nothing is written if validation fails."""
        validate_submission(data, self.leave_types)

        employee = await self.directory.get(db, data.employee_id)
        if employee is None:
            raise NotFoundError("Employee", data.employee_id)

        leave_request = LeaveRequest(
            id=uuid.uuid4(),
            employee_id=employee.id,
            employee_name=employee.full_name,
            leave_type=data.leave_type.strip(),
            start_date=data.start_date,
            end_date=data.end_date,
            reason=data.reason or None,
            document_url=data.document_url or None,
            status=LeaveStatus.pending,
            created_at=datetime.now(timezone.utc),
        )
        db.add(leave_request)
        await db.flush()

        await create_audit_entry(
            db,
            action=AuditAction.create,
            entity_type=ENTITY_TYPE,
            entity_id=leave_request.id,
            actor_id=actor_id or employee.id,
            new_values=_snapshot(leave_request),
        )
        logger.info(
            "Leave request %s submitted: %s, %s day(s) of %s",
            leave_request.id, employee.full_name,
            leave_request.total_days, leave_request.leave_type,
        )
        return LeaveRequestOut.model_validate(leave_request)

    # ─────────────────────────────────────────────────────────────────
    # Decide
    # ─────────────────────────────────────────────────────────────────

    async def decide(
        self,
        db: AsyncSession,
        request_id: uuid.UUID,
        decision: LeaveDecision,
        notes: Optional[str] = None,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> LeaveRequestOut:
        """Approve or reject a pending request.

        Raises NotFoundError, InvalidStateError, ValidationError or
        InsufficientBalanceError; on any of them the request and ledger are
        left exactly as they were.
        """
        target = _parse_decision(decision).target_status

        async with self.locks.hold(self._key(request_id)):
            leave_req = await self._load_for_update(db, request_id)

            if leave_req.status != LeaveStatus.pending:
                logger.warning(
                    "Decision %s on %s refused: already %s",
                    target.value, request_id, leave_req.status.value,
                )
                raise InvalidStateError(request_id, leave_req.status.value)

            validate_transition_notes(target, notes)

            if target == LeaveStatus.approved:
                await self.ledger.debit(
                    db,
                    leave_req.employee_id,
                    leave_req.leave_type,
                    leave_req.total_days,
                )

            old_status = leave_req.status.value
            leave_req.status = target
            leave_req.admin_notes = notes
            leave_req.reviewed_at = datetime.now(timezone.utc)
            await db.flush()

            await create_audit_entry(
                db,
                action=(
                    AuditAction.approve
                    if target == LeaveStatus.approved
                    else AuditAction.reject
                ),
                entity_type=ENTITY_TYPE,
                entity_id=leave_req.id,
                actor_id=actor_id,
                old_values={"status": old_status},
                new_values={"status": target.value, "admin_notes": notes},
            )
            logger.info("Leave request %s %s", request_id, target.value)
            return LeaveRequestOut.model_validate(leave_req)

    async def bulk_decide(
        self,
        db: AsyncSession,
        request_ids: Iterable[uuid.UUID],
        decision: LeaveDecision,
        notes: Optional[str] = None,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> BulkDecideResult:
        """Decide each request in its own transaction; failures are collected, not raised."""
        _parse_decision(decision)
        outcome = BulkDecideResult()
        for request_id in dict.fromkeys(request_ids):
            try:
                await self.decide(db, request_id, decision, notes, actor_id=actor_id)
            except AppException as exc:
                outcome.errors.append(BulkItemError(**exc.to_item(request_id)))
            else:
                outcome.updated_count += 1
            # Failed decisions write nothing but a freshly opened ledger entry
            await db.commit()
        return outcome

    # ─────────────────────────────────────────────────────────────────
    # Delete
    # ─────────────────────────────────────────────────────────────────

    async def _delete_one(
        self,
        db: AsyncSession,
        request_id: uuid.UUID,
        actor_id: Optional[uuid.UUID],
    ) -> Optional[LedgerInconsistencyError]:
        """Remove one request. Returns a ledger error that was clamped, if any."""
        async with self.locks.hold(self._key(request_id)):
            leave_req = await self._load_for_update(db, request_id)
            snapshot = _snapshot(leave_req)

            clamped: Optional[LedgerInconsistencyError] = None
            if leave_req.status == LeaveStatus.approved:
                try:
                    await self.ledger.credit(
                        db,
                        leave_req.employee_id,
                        leave_req.leave_type,
                        leave_req.total_days,
                    )
                except LedgerInconsistencyError as exc:
                    if not self.ledger.clamp_on_inconsistency:
                        raise
                    clamped = exc

            await db.delete(leave_req)
            await db.flush()

            await create_audit_entry(
                db,
                action=AuditAction.delete,
                entity_type=ENTITY_TYPE,
                entity_id=request_id,
                actor_id=actor_id,
                old_values=snapshot,
            )
            logger.info("Leave request %s deleted (was %s)", request_id, snapshot["status"])
            return clamped

    async def delete(
        self,
        db: AsyncSession,
        request_ids: Iterable[uuid.UUID],
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> BulkDeleteResult:
        """Delete every id it can, one transaction per id; unknown ids are reported, never raised.

        A request deleted after a clamped ledger credit counts as deleted and
        is also listed in ``errors`` so the inconsistency is visible.
        """
        outcome = BulkDeleteResult()
        for request_id in dict.fromkeys(request_ids):
            try:
                clamped = await self._delete_one(db, request_id, actor_id)
            except AppException as exc:
                outcome.errors.append(BulkItemError(**exc.to_item(request_id)))
            else:
                outcome.deleted_count += 1
                if clamped is not None:
                    outcome.errors.append(BulkItemError(**clamped.to_item(request_id)))
            await db.commit()
        return outcome
