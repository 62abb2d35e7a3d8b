# autograder/models/assignment.py
from sqlalchemy import Column, Integer, String, DateTime, JSON, ForeignKey
from sqlalchemy.sql import func
from autograder.db.base import Base

# Assignment types whose answers can be compared against an answer key
AUTO_SCORE_TYPES = frozenset({"reading", "listening"})


class Assignment(Base):
    __tablename__ = "assignments"

    id = Column(Integer, primary_key=True, index=True)
    teacher_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    title = Column(String(255), nullable=False)
    # reading / listening / writing / speaking
    type = Column(String(20), nullable=False, index=True)

    # Versioned IELTS config, stored with camelCase keys as clients send it
    assignment_config = Column(JSON, nullable=True)
    due_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )
