# services/user_management/api/auth_router.py
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from services.user_management.controllers.user_service import authenticate_user
from services.user_management.schemas.users import UserLoginRequest, UserLoginResponse
from shared.db import get_db
from shared.exceptions import AuthorizationError

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/login", response_model=UserLoginResponse)
async def login(payload: UserLoginRequest, db: AsyncSession = Depends(get_db)):
    try:
        user, access_token = await authenticate_user(db, payload.username, payload.password)
    except AuthorizationError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    return UserLoginResponse(
        user_id=user.id,
        name=user.display_name,
        role=user.role,
        access_token=access_token,
    )
