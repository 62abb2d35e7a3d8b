# autograder/schemas/score.py
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel


class ScoreResult(BaseModel):
    """Output of the objective scorer; one point per correct unit."""
    raw_score: int
    correct_count: int
    total_count: int
    band: float
    final_score: float


class GradePublic(BaseModel):
    id: int
    submission_id: int
    raw_score: int
    correct_count: int
    total_count: int
    band: Decimal
    final_score: Decimal
    graded_at: datetime

    model_config = {"from_attributes": True}
