# autograder/models/submission.py
from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    JSON,
    ForeignKey,
    UniqueConstraint,
)
from sqlalchemy.sql import func
from autograder.db.base import Base

# Statuses that consume an attempt
COUNTED_STATUSES = ("submitted", "late", "graded")


class Submission(Base):
    __tablename__ = "submissions"
    __table_args__ = (
        # One row per attempt; concurrent creates for the same attempt collide here
        UniqueConstraint(
            "assignment_id", "student_id", "attempt_number",
            name="uq_submission_attempt",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)

    assignment_id = Column(Integer, ForeignKey("assignments.id"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    attempt_number = Column(Integer, nullable=False, default=1)

    # draft / submitted / late / graded
    status = Column(String(20), nullable=False, default="draft", index=True)
    payload = Column(JSON, nullable=False)
    submitted_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )
