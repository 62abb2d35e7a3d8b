# autograder/models/grade.py
from sqlalchemy import Column, Integer, DateTime, Numeric, ForeignKey
from sqlalchemy.sql import func
from autograder.db.base import Base


class Grade(Base):
    __tablename__ = "grades"

    id = Column(Integer, primary_key=True, index=True)
    # unique: the upsert target that keeps one grade per submission
    submission_id = Column(
        Integer, ForeignKey("submissions.id"), nullable=False, unique=True, index=True
    )

    raw_score = Column(Integer, nullable=False)
    correct_count = Column(Integer, nullable=False)
    total_count = Column(Integer, nullable=False)
    band = Column(Numeric(4, 1), nullable=False)
    final_score = Column(Numeric(4, 1), nullable=False)

    graded_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )
