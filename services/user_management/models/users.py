# services/user_management/models/users.py
from sqlalchemy import Column, Integer, String, Enum, DateTime, Index
from shared.db import Base, utcnow
import enum


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    TEACHER = "teacher"
    HEADTEACHER = "headteacher"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(100), unique=True, nullable=False)
    full_name = Column(String(150), nullable=True)
    hashed_password = Column(String, nullable=False)
    role = Column(Enum(UserRole, values_callable=lambda roles: [r.value for r in roles]), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("idx_user_role", "role"),  # headteacher fan-out and shared inbox
    )

    @property
    def display_name(self):
        return self.full_name or self.username
