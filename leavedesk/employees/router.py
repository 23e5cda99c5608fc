"""Employee directory router — feeds the employee picker on the leave form."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.database import get_db
from leavedesk.employees.schemas import EmployeeBrief
from leavedesk.employees.service import EmployeeDirectory

router = APIRouter(prefix="", tags=["employees"])


@router.get("", response_model=dict[str, list[EmployeeBrief]])
async def list_employees(db: AsyncSession = Depends(get_db)):
    """List active employees as ``{"data": [...]}``."""
    return {"data": await EmployeeDirectory.list_active(db)}
