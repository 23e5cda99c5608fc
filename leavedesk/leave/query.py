"""Read-only list operations over leave requests: filtering, counts, selection.

Works on any objects exposing ``id``, ``employee_name``, ``leave_type`` and
``status`` (ORM rows or ``LeaveRequestOut``). ``filter_clauses`` expresses
the same filters as SQL for the database-backed listings. Pagination lives
in ``leavedesk.common.pagination``.
"""

from __future__ import annotations

import re
from collections.abc import Hashable, Iterable, Sequence
from typing import Any, Optional, TypeVar

from sqlalchemy import ColumnElement, false

from leavedesk.common.constants import LeaveStatus
from leavedesk.leave.models import LeaveRequest
from leavedesk.leave.schemas import LeaveStats

R = TypeVar("R")

_LIKE_ESCAPE = re.compile(r"[\\%_]")


def _blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def _status_value(status: Any) -> str:
    return status.value if isinstance(status, LeaveStatus) else str(status)


# ── Filtering ───────────────────────────────────────────────────────

def filter_requests(
    requests: Iterable[R],
    *,
    search: Optional[str] = None,
    leave_type: Optional[str] = None,
    status: Optional[str] = None,
) -> list[R]:
    """
    Keep requests matching every non-blank filter, preserving input order.

    ============  ==========================================
    Filter        Match
    ============  ==========================================
    search        case-insensitive substring of employee name
    leave_type    exact
    status        exact (enum or its string value)
    ============  ==========================================
    """
    needle = None if _blank(search) else search.strip().casefold()
    wanted_type = None if _blank(leave_type) else leave_type
    wanted_status = None if _blank(status) else _status_value(status)

    out: list[R] = []
    for req in requests:
        if needle is not None and needle not in (req.employee_name or "").casefold():
            continue
        if wanted_type is not None and req.leave_type != wanted_type:
            continue
        if wanted_status is not None and _status_value(req.status) != wanted_status:
            continue
        out.append(req)
    return out


def filter_clauses(
    *,
    search: Optional[str] = None,
    leave_type: Optional[str] = None,
    status: Optional[str] = None,
) -> list[ColumnElement[bool]]:
    """WHERE clauses on ``LeaveRequest`` matching ``filter_requests`` semantics."""
    clauses: list[ColumnElement[bool]] = []
    if not _blank(search):
        needle = _LIKE_ESCAPE.sub(r"\\\g<0>", search.strip())
        clauses.append(LeaveRequest.employee_name.ilike(f"%{needle}%", escape="\\"))
    if not _blank(leave_type):
        clauses.append(LeaveRequest.leave_type == leave_type)
    if not _blank(status):
        try:
            clauses.append(LeaveRequest.status == LeaveStatus(_status_value(status)))
        except ValueError:
            clauses.append(false())
    return clauses


def count_by_status(requests: Iterable[Any]) -> LeaveStats:
    stats = LeaveStats()
    for req in requests:
        status = _status_value(req.status)
        if status == LeaveStatus.pending.value:
            stats.pending_count += 1
        elif status == LeaveStatus.approved.value:
            stats.approved_count += 1
        elif status == LeaveStatus.rejected.value:
            stats.rejected_count += 1
    return stats


# ── Selection ───────────────────────────────────────────────────────

class SelectionSet:
    """Ids picked for a bulk action, never wider than what is on screen.

    ``visible`` is the current page after filtering. Ids that drop out of
    view (new filter, new page, deleted) are forgotten on ``restrict_to``.
    """

    def __init__(self, visible: Iterable[Hashable] = ()) -> None:
        self._visible: list[Hashable] = list(dict.fromkeys(visible))
        self._selected: set[Hashable] = set()

    @classmethod
    def over(cls, items: Sequence[Any]) -> SelectionSet:
        return cls(item.id for item in items)

    @property
    def visible(self) -> list[Hashable]:
        return list(self._visible)

    @property
    def ids(self) -> list[Hashable]:
        """Selected ids in on-screen order."""
        return [i for i in self._visible if i in self._selected]

    @property
    def all_selected(self) -> bool:
        return bool(self._visible) and len(self._selected) == len(self._visible)

    def __len__(self) -> int:
        return len(self._selected)

    def __contains__(self, item_id: Hashable) -> bool:
        return item_id in self._selected

    def select(self, item_id: Hashable) -> bool:
        """Select a visible id. Returns False for ids not on screen."""
        if item_id not in self._visible:
            return False
        self._selected.add(item_id)
        return True

    def deselect(self, item_id: Hashable) -> None:
        self._selected.discard(item_id)

    def toggle(self, item_id: Hashable) -> bool:
        """Flip one id; returns whether it is selected afterwards."""
        if item_id in self._selected:
            self._selected.discard(item_id)
            return False
        return self.select(item_id)

    def select_all(self) -> None:
        self._selected = set(self._visible)

    def clear(self) -> None:
        self._selected.clear()

    def restrict_to(self, visible: Iterable[Hashable]) -> None:
        """Replace the visible ids and drop selections that fell out of view."""
        self._visible = list(dict.fromkeys(visible))
        self._selected &= set(self._visible)
