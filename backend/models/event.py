"""Event model definitions."""

from sqlalchemy import Column, Integer, String

from backend.database import Base


class Event(Base):
    """Owner of a set of scoring criteria."""
    __tablename__ = "events"

    id = Column(Integer, primary_key=True)
    title = Column(String, nullable=False)
