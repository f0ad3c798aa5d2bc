from fastapi import APIRouter, Depends
from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
from app.schemas import ApiResponse, UserOut, UserRegistration
from app.db.session import get_session
from app.services.user_service import UserService
from app.auth import get_current_user

router = APIRouter(prefix="/user", tags=["user"])


def get_user_service(session: AsyncSession = Depends(get_session)) -> UserService:
    return UserService(session)


@router.get("/profile", response_model=ApiResponse[UserOut], response_model_exclude_none=True)
async def get_profile(
    user=Depends(get_current_user),
    user_service: UserService = Depends(get_user_service)
):
    profile = await user_service.get_user_profile(user.id)
    return ApiResponse(data=UserOut.model_validate(profile))


@router.get(
    "/registrations",
    response_model=ApiResponse[List[UserRegistration]],
    response_model_exclude_none=True,
)
async def get_user_registrations(
    user=Depends(get_current_user),
    user_service: UserService = Depends(get_user_service)
):
    """Events the current user is registered for, newest registration first."""
    registrations = await user_service.get_user_registrations(user.id)
    return ApiResponse(data=registrations)
