"""User model definitions."""

from sqlalchemy import CheckConstraint, Column, Integer, String

from backend.database import Base

USER_ROLES = ("student", "staff", "admin")


class User(Base):
    """Represents an application account."""
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("role IN ('student', 'staff', 'admin')", name="ck_users_role"),
    )

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, index=True, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    role = Column(String, nullable=False, default="student")  # student/staff/admin
