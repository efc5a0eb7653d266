"""Criteria model definitions."""

from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, String

from backend.database import Base


class Criteria(Base):
    """A named, scored rubric item belonging to an event."""
    __tablename__ = "criteria"
    __table_args__ = (
        CheckConstraint("max_score > 0", name="ck_criteria_max_score_positive"),
    )

    id = Column(Integer, primary_key=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    max_score = Column(Integer, nullable=False, default=10)
