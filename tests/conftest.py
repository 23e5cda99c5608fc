"""Shared test fixtures — async DB, client, seed helpers.

Uses SQLite + aiosqlite for fast isolated tests without PostgreSQL.
"""

from __future__ import annotations

import os

# Configure settings before any leavedesk import touches pydantic-settings
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("ENVIRONMENT", "test")

import uuid
from datetime import date, datetime, timezone
from typing import AsyncGenerator, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from leavedesk.common.constants import LeaveStatus
from leavedesk.database import Base, get_db
from leavedesk.employees.models import Employee
from leavedesk.leave.ledger import LeaveBalanceLedger, SettingsAllotmentPolicy
from leavedesk.leave.models import LeaveBalance, LeaveRequest
from leavedesk.leave.workflow import LeaveWorkflow
from leavedesk.main import create_app

import leavedesk.common.audit  # noqa: F401

# ── Test database (SQLite in-memory) ────────────────────────────────

TEST_DATABASE_URL = "sqlite+aiosqlite://"

engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestSessionFactory = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False,
)

LEAVE_TYPES = ["Annual Leave", "Sick Leave", "Unpaid Leave"]
ALLOTMENTS = {"Annual Leave": 10, "Sick Leave": 5}


@pytest.fixture(autouse=True)
async def _setup_db():
    """Create all tables before each test, drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    """Reset rate limiter storage between tests."""
    from leavedesk.common.rate_limit import limiter

    limiter.reset()
    yield


async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Workflow wired to a fixed test policy ───────────────────────────

def make_workflow(*, clamp: bool = True) -> LeaveWorkflow:
    ledger = LeaveBalanceLedger(
        SettingsAllotmentPolicy(ALLOTMENTS, default=0),
        clamp_on_inconsistency=clamp,
    )
    return LeaveWorkflow(ledger, leave_types=LEAVE_TYPES)


@pytest.fixture
def workflow() -> LeaveWorkflow:
    return make_workflow()


# ── FastAPI test client ─────────────────────────────────────────────

@pytest.fixture
async def app(workflow):
    """Create a fresh app instance with DB dependency overridden."""
    application = create_app(workflow)
    application.dependency_overrides[get_db] = _override_get_db
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the test app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ── Database session (for direct DB operations in tests) ────────────

@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        yield session
        await session.commit()


# ── Seed helpers ────────────────────────────────────────────────────

async def seed_employee(
    db: AsyncSession,
    *,
    full_name: str = "Test User",
    is_active: bool = True,
) -> Employee:
    emp = Employee(
        id=uuid.uuid4(),
        employee_code=f"EMP-{uuid.uuid4().hex[:6].upper()}",
        full_name=full_name,
        is_active=is_active,
        created_at=datetime.now(timezone.utc),
    )
    db.add(emp)
    await db.flush()
    return emp


async def seed_balance(
    db: AsyncSession,
    employee_id: uuid.UUID,
    *,
    leave_type: str = "Annual Leave",
    total_days: int = 10,
    used_days: int = 0,
) -> LeaveBalance:
    bal = LeaveBalance(
        id=uuid.uuid4(),
        employee_id=employee_id,
        leave_type=leave_type,
        total_days=total_days,
        used_days=used_days,
    )
    db.add(bal)
    await db.flush()
    return bal


async def seed_request(
    db: AsyncSession,
    employee: Employee,
    *,
    leave_type: str = "Annual Leave",
    start_date: date = date(2026, 3, 2),
    end_date: date = date(2026, 3, 4),
    status: LeaveStatus = LeaveStatus.pending,
    created_at: Optional[datetime] = None,
) -> LeaveRequest:
    req = LeaveRequest(
        id=uuid.uuid4(),
        employee_id=employee.id,
        employee_name=employee.full_name,
        leave_type=leave_type,
        start_date=start_date,
        end_date=end_date,
        status=status,
        created_at=created_at or datetime.now(timezone.utc),
    )
    db.add(req)
    await db.flush()
    return req


@pytest.fixture
async def employee(db) -> Employee:
    return await seed_employee(db, full_name="Priya Sharma")
