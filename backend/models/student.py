"""Student profile model definitions."""

from sqlalchemy import Column, ForeignKey, Integer, String

from backend.database import Base


class Student(Base):
    """Profile owned by a user with the student role."""
    __tablename__ = "students"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    year_level_type = Column(String)
    strand_id = Column(Integer, nullable=True)
    course_id = Column(Integer, nullable=True)
    tesda_course_id = Column(Integer, nullable=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
