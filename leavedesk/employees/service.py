"""Employee directory lookups (read-only)."""

from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.employees.models import Employee
from leavedesk.employees.schemas import EmployeeBrief


class EmployeeDirectory:
    """Resolves employee ids to display names. Never writes."""

    @staticmethod
    async def get(
        db: AsyncSession,
        employee_id: uuid.UUID,
    ) -> Optional[EmployeeBrief]:
        result = await db.execute(
            select(Employee).where(
                Employee.id == employee_id,
                Employee.is_active.is_(True),
            )
        )
        emp = result.scalars().first()
        return EmployeeBrief.model_validate(emp) if emp else None

    @staticmethod
    async def list_active(db: AsyncSession) -> list[EmployeeBrief]:
        result = await db.execute(
            select(Employee)
            .where(Employee.is_active.is_(True))
            .order_by(Employee.full_name)
        )
        return [EmployeeBrief.model_validate(e) for e in result.scalars().all()]
