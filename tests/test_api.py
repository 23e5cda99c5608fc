"""HTTP API tests — routes, status codes and problem+json bodies."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

from leavedesk.common.constants import LeaveStatus
from tests.conftest import seed_balance, seed_employee, seed_request


def _body(employee_id, **overrides) -> dict:
    data = {
        "employee_id": str(employee_id),
        "leave_type": "Annual Leave",
        "start_date": "2026-03-02",
        "end_date": "2026-03-04",
        "reason": "Wedding",
    }
    data.update(overrides)
    return data


async def test_health(client):
    resp = await client.get("/api/v1/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"


async def test_employee_directory(client, db, employee):
    await seed_employee(db, full_name="Arjun Mehta")
    await seed_employee(db, full_name="Hidden", is_active=False)
    await db.commit()

    resp = await client.get("/api/v1/employees")
    assert resp.status_code == 200
    names = [e["full_name"] for e in resp.json()["data"]]
    assert names == ["Arjun Mehta", "Priya Sharma"]


async def test_submit_leave(client, db, employee):
    await db.commit()

    resp = await client.post("/api/v1/leaves", json=_body(employee.id))

    assert resp.status_code == 201
    data = resp.json()
    assert data["status"] == "pending"
    assert data["total_days"] == 3
    assert data["employee_name"] == "Priya Sharma"


async def test_submit_missing_field_is_problem_json(client, db, employee):
    await db.commit()

    resp = await client.post(
        "/api/v1/leaves", json=_body(employee.id, leave_type=""),
    )

    assert resp.status_code == 422
    assert resp.headers["content-type"].startswith("application/problem+json")
    body = resp.json()
    assert body["detail"] == "missing required field"
    assert "leave_type" in body["errors"]

    listing = await client.get("/api/v1/leaves")
    assert listing.json()["meta"]["total"] == 0


async def test_submit_invalid_range(client, db, employee):
    await db.commit()
    resp = await client.post(
        "/api/v1/leaves",
        json=_body(employee.id, start_date="2026-03-05", end_date="2026-03-01"),
    )
    assert resp.status_code == 422
    assert resp.json()["detail"] == "invalid date range"


async def test_list_with_filters_and_stats(client, db, employee):
    other = await seed_employee(db, full_name="Arjun Mehta")
    now = datetime.now(timezone.utc)
    await seed_request(db, employee, status=LeaveStatus.approved, created_at=now - timedelta(hours=3))
    await seed_request(db, other, status=LeaveStatus.pending, created_at=now - timedelta(hours=2))
    await seed_request(db, employee, status=LeaveStatus.rejected, created_at=now - timedelta(hours=1))
    await db.commit()

    resp = await client.get("/api/v1/leaves", params={"status": "approved"})
    data = resp.json()
    assert [r["status"] for r in data["data"]] == ["approved"]
    assert data["stats"] == {"pending_count": 1, "approved_count": 1, "rejected_count": 1}

    resp = await client.get("/api/v1/leaves", params={"search": "priya"})
    assert [r["status"] for r in resp.json()["data"]] == ["rejected", "approved"]


async def test_list_page_beyond_end(client, db, employee):
    for _ in range(3):
        await seed_request(db, employee)
    await db.commit()

    resp = await client.get("/api/v1/leaves", params={"page": 2, "page_size": 2})
    assert len(resp.json()["data"]) == 1

    resp = await client.get("/api/v1/leaves", params={"page": 5, "page_size": 2})
    assert resp.status_code == 200
    assert resp.json()["data"] == []


async def test_approve_then_balances(client, db, employee):
    req = await seed_request(db, employee)
    await db.commit()

    resp = await client.put(
        f"/api/v1/leaves/{req.id}/status",
        json={"status": "approved", "admin_notes": "Have fun"},
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "approved"

    resp = await client.get("/api/v1/leaves/my-stats", params={"employee_id": str(employee.id)})
    balances = {b["leave_type"]: b for b in resp.json()["data"]}
    assert balances["Annual Leave"]["used_days"] == 3
    assert balances["Annual Leave"]["remaining_days"] == 7
    assert set(balances) == {"Annual Leave", "Sick Leave", "Unpaid Leave"}


async def test_reject_without_notes(client, db, employee):
    req = await seed_request(db, employee)
    await db.commit()

    resp = await client.put(f"/api/v1/leaves/{req.id}/status", json={"status": "rejected"})

    assert resp.status_code == 422
    assert resp.json()["detail"] == "rejection reason required"


async def test_redecide_is_conflict(client, db, employee):
    req = await seed_request(db, employee, status=LeaveStatus.rejected)
    await db.commit()

    resp = await client.put(f"/api/v1/leaves/{req.id}/status", json={"status": "approved"})

    assert resp.status_code == 409
    assert resp.json()["type"].endswith("/invalid-state")


async def test_approve_insufficient_balance(client, db, employee):
    await seed_balance(db, employee.id, total_days=10, used_days=8)
    req = await seed_request(db, employee)
    await db.commit()

    resp = await client.put(f"/api/v1/leaves/{req.id}/status", json={"status": "approved"})

    assert resp.status_code == 409
    assert resp.json()["type"].endswith("/insufficient-balance")
    detail = await client.get(f"/api/v1/leaves/{req.id}")
    assert detail.json()["status"] == "pending"


async def test_decide_unknown(client):
    resp = await client.put(f"/api/v1/leaves/{uuid.uuid4()}/status", json={"status": "approved"})
    assert resp.status_code == 404


async def test_bulk_delete(client, db, employee):
    a = await seed_request(db, employee)
    b = await seed_request(db, employee)
    await db.commit()
    unknown = uuid.uuid4()

    resp = await client.request(
        "DELETE",
        "/api/v1/leaves",
        json={"ids": [str(a.id), str(b.id), str(unknown)]},
    )

    assert resp.status_code == 200
    data = resp.json()
    assert data["deleted_count"] == 2
    assert data["errors"] == [
        {"id": str(unknown), "type": "not-found", "detail": data["errors"][0]["detail"]},
    ]


async def test_bulk_status(client, db, employee):
    a = await seed_request(db, employee)
    b = await seed_request(db, employee, status=LeaveStatus.approved)
    await db.commit()

    resp = await client.put(
        "/api/v1/leaves/status",
        json={"ids": [str(a.id), str(b.id)], "status": "rejected", "admin_notes": "Freeze"},
    )

    data = resp.json()
    assert data["updated_count"] == 1
    assert [e["type"] for e in data["errors"]] == ["invalid-state"]


async def test_my_leaves_scoped(client, db, employee):
    other = await seed_employee(db, full_name="Arjun Mehta")
    mine = await seed_request(db, employee, leave_type="Sick Leave")
    await seed_request(db, other)
    await db.commit()

    resp = await client.get("/api/v1/leaves/my", params={"employee_id": str(employee.id)})

    assert [r["id"] for r in resp.json()["data"]] == [str(mine.id)]

    resp = await client.get(
        "/api/v1/leaves/my",
        params={"employee_id": str(employee.id), "type": "Annual Leave"},
    )
    assert resp.json()["data"] == []


async def test_my_leaves_unknown_employee(client):
    resp = await client.get("/api/v1/leaves/my", params={"employee_id": str(uuid.uuid4())})
    assert resp.status_code == 404
