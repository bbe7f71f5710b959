from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from services.user_management.models.users import UserRole


class UserCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    full_name: Optional[str] = None
    password: str = Field(..., min_length=1)
    role: UserRole


class UserOut(BaseModel):
    id: int
    username: str
    full_name: Optional[str] = None
    role: UserRole
    created_at: datetime

    class Config:
        from_attributes = True


class ArchivedUserOut(BaseModel):
    id: int
    username: str
    full_name: Optional[str] = None
    role: UserRole
    archived_at: datetime

    class Config:
        from_attributes = True


class UserLoginRequest(BaseModel):
    username: str
    password: str


class UserLoginResponse(BaseModel):
    user_id: int
    name: str
    role: UserRole
    access_token: str
    token_type: str = "bearer"


class StatisticsOut(BaseModel):
    total_users: int
    total_assessments: int
    pending_reviews: int
