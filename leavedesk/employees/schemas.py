"""Employee directory Pydantic schemas."""

from __future__ import annotations

import uuid

from pydantic import BaseModel, ConfigDict


class EmployeeBrief(BaseModel):
    """Name/id pair used to populate submission forms."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_code: str
    full_name: str
