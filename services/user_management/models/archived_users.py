# services/user_management/models/archived_users.py
from sqlalchemy import Column, Integer, String, Enum, DateTime
from shared.db import Base, utcnow
from services.user_management.models.users import UserRole


class ArchivedUser(Base):
    __tablename__ = "archived_users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(100), nullable=False)
    full_name = Column(String(150), nullable=True)
    role = Column(Enum(UserRole, values_callable=lambda roles: [r.value for r in roles]), nullable=False)
    hashed_password = Column(String, nullable=False)
    archived_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
