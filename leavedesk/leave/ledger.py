"""Leave balance ledger — per-employee, per-leave-type allotment accounting.

Every balance mutation goes through ``debit`` / ``credit``. Each runs as a
single conditional UPDATE so the check and the write cannot interleave with
another writer, and each holds an in-process lock on the (employee, leave
type) pair for the duration of get-or-create → update → refresh.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable, Mapping
from typing import Callable, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.common.exceptions import (
    InsufficientBalanceError,
    LedgerInconsistencyError,
)
from leavedesk.common.locks import KeyedLocks
from leavedesk.config import settings
from leavedesk.leave.models import LeaveBalance
from leavedesk.leave.schemas import LeaveBalanceOut

logger = logging.getLogger(__name__)

# (employee_id, leave_type) -> allotted days for a fresh ledger entry
AllotmentPolicy = Callable[[uuid.UUID, str], int]


class SettingsAllotmentPolicy:
    """Allotment lookup backed by ``LEAVE_ALLOTMENTS`` / ``DEFAULT_ALLOTMENT_DAYS``."""

    def __init__(
        self,
        allotments: Optional[Mapping[str, int]] = None,
        default: Optional[int] = None,
    ) -> None:
        self.allotments = dict(
            settings.leave_allotments_map if allotments is None else allotments
        )
        self.default = settings.DEFAULT_ALLOTMENT_DAYS if default is None else default

    def __call__(self, employee_id: uuid.UUID, leave_type: str) -> int:
        return max(0, int(self.allotments.get(leave_type, self.default)))


class LeaveBalanceLedger:
    """Owns the ``leave_balances`` table."""

    def __init__(
        self,
        policy: Optional[AllotmentPolicy] = None,
        *,
        clamp_on_inconsistency: Optional[bool] = None,
        locks: Optional[KeyedLocks] = None,
    ) -> None:
        self.policy = policy if policy is not None else SettingsAllotmentPolicy()
        self.clamp_on_inconsistency = (
            settings.LEDGER_CLAMP_ON_INCONSISTENCY
            if clamp_on_inconsistency is None
            else clamp_on_inconsistency
        )
        self._locks = locks if locks is not None else KeyedLocks()

    @staticmethod
    def _key(employee_id: uuid.UUID, leave_type: str) -> tuple[str, uuid.UUID, str]:
        return ("ledger", employee_id, leave_type)

    # ─────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────

    async def _get_or_create(
        self,
        db: AsyncSession,
        employee_id: uuid.UUID,
        leave_type: str,
    ) -> LeaveBalance:
        """Load the entry, materializing it from the allotment policy if absent.

        Caller must hold the entry's lock.
        """
        result = await db.execute(
            select(LeaveBalance).where(
                LeaveBalance.employee_id == employee_id,
                LeaveBalance.leave_type == leave_type,
            )
        )
        entry = result.scalars().first()
        if entry is not None:
            return entry

        allotted = self.policy(employee_id, leave_type)
        entry = LeaveBalance(
            employee_id=employee_id,
            leave_type=leave_type,
            total_days=allotted,
            used_days=0,
        )
        db.add(entry)
        await db.flush()
        logger.info(
            "Opened %s ledger for employee %s with %d day(s)",
            leave_type, employee_id, allotted,
        )
        return entry

    # ─────────────────────────────────────────────────────────────────
    # Reads
    # ─────────────────────────────────────────────────────────────────

    async def get(
        self,
        db: AsyncSession,
        employee_id: uuid.UUID,
        leave_type: str,
    ) -> LeaveBalanceOut:
        async with self._locks.hold(self._key(employee_id, leave_type)):
            entry = await self._get_or_create(db, employee_id, leave_type)
            return LeaveBalanceOut.model_validate(entry)

    async def balances_for(
        self,
        db: AsyncSession,
        employee_id: uuid.UUID,
        leave_types: Iterable[str],
    ) -> list[LeaveBalanceOut]:
        """Every configured leave type's balance for one employee, in order."""
        return [await self.get(db, employee_id, lt) for lt in leave_types]

    # ─────────────────────────────────────────────────────────────────
    # Mutations
    # ─────────────────────────────────────────────────────────────────

    async def debit(
        self,
        db: AsyncSession,
        employee_id: uuid.UUID,
        leave_type: str,
        days: int,
    ) -> LeaveBalanceOut:
        """Consume *days*. All-or-nothing: on overflow nothing is written."""
        if days < 0:
            raise ValueError("days must be >= 0")

        async with self._locks.hold(self._key(employee_id, leave_type)):
            entry = await self._get_or_create(db, employee_id, leave_type)
            result = await db.execute(
                update(LeaveBalance)
                .where(
                    LeaveBalance.id == entry.id,
                    LeaveBalance.used_days + days <= LeaveBalance.total_days,
                )
                .values(used_days=LeaveBalance.used_days + days)
                .execution_options(synchronize_session=False)
            )
            await db.refresh(entry)

            if result.rowcount == 0:
                logger.warning(
                    "Debit of %d %s day(s) denied for employee %s (remaining %d)",
                    days, leave_type, employee_id, entry.remaining_days,
                )
                raise InsufficientBalanceError(leave_type, entry.remaining_days, days)

            logger.info(
                "Debited %d %s day(s) for employee %s (used %d/%d)",
                days, leave_type, employee_id, entry.used_days, entry.total_days,
            )
            return LeaveBalanceOut.model_validate(entry)

    async def credit(
        self,
        db: AsyncSession,
        employee_id: uuid.UUID,
        leave_type: str,
        days: int,
    ) -> LeaveBalanceOut:
        """Give back *days* previously debited.

        Crediting more than is recorded as used raises
        ``LedgerInconsistencyError``. With ``clamp_on_inconsistency`` the
        entry is first clamped to zero used days, otherwise it is left as is.
        """
        if days < 0:
            raise ValueError("days must be >= 0")

        async with self._locks.hold(self._key(employee_id, leave_type)):
            entry = await self._get_or_create(db, employee_id, leave_type)
            result = await db.execute(
                update(LeaveBalance)
                .where(
                    LeaveBalance.id == entry.id,
                    LeaveBalance.used_days >= days,
                )
                .values(used_days=LeaveBalance.used_days - days)
                .execution_options(synchronize_session=False)
            )
            await db.refresh(entry)

            if result.rowcount == 0:
                error = LedgerInconsistencyError(
                    employee_id, leave_type, entry.used_days, days,
                )
                logger.error("%s (clamp=%s)", error.detail, self.clamp_on_inconsistency)
                if self.clamp_on_inconsistency:
                    await db.execute(
                        update(LeaveBalance)
                        .where(LeaveBalance.id == entry.id)
                        .values(used_days=0)
                        .execution_options(synchronize_session=False)
                    )
                    await db.refresh(entry)
                raise error

            logger.info(
                "Credited %d %s day(s) for employee %s (used %d/%d)",
                days, leave_type, employee_id, entry.used_days, entry.total_days,
            )
            return LeaveBalanceOut.model_validate(entry)
