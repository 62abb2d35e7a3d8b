# autograder/schemas/assignment.py
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel


class AssignmentCreate(BaseModel):
    title: str
    type: Literal["reading", "listening", "writing", "speaking"]
    assignment_config: dict[str, Any] | None = None
    due_at: datetime | None = None
