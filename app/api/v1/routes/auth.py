"""Authentication routes for account registration and login."""
from fastapi import APIRouter, Depends, Request, status
from app.schemas import ApiResponse, AuthResult, LoginRequest, UserCreate, UserOut
from app.services.auth_service import AuthService
from app.db.session import get_session
from sqlalchemy.ext.asyncio import AsyncSession
from slowapi import Limiter
from slowapi.util import get_remote_address

router = APIRouter(tags=["auth"])
limiter = Limiter(key_func=get_remote_address)


def get_auth_service(session: AsyncSession = Depends(get_session)) -> AuthService:
    """
    Dependency injection for AuthService.

    Args:
        session: Database session

    Returns:
        AuthService instance
    """
    return AuthService(session)


def _auth_result(result: dict) -> AuthResult:
    return AuthResult(user=UserOut.model_validate(result["user"]), token=result["token"])


@router.post(
    "/register",
    response_model=ApiResponse[AuthResult],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit("10/minute")
async def register(
    request: Request,
    payload: UserCreate,
    auth_service: AuthService = Depends(get_auth_service)
):
    """
    Register a new account.

    Rate limit: 10 requests per minute

    Returns:
        The created user and an access token

    Raises:
        ConflictError: If the email already exists
        InvalidInputError: If the role is unknown
    """
    result = await auth_service.register(payload.email, payload.password, payload.name, payload.role)
    return ApiResponse(message="User registered successfully", data=_auth_result(result))


@router.post("/login", response_model=ApiResponse[AuthResult], response_model_exclude_none=True)
@limiter.limit("5/minute")
async def login(
    request: Request,
    form_data: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    """
    Login endpoint returning the user and an access token.

    Rate limit: 5 requests per minute
    """
    result = await auth_service.login(form_data.email, form_data.password)
    return ApiResponse(message="Login successful", data=_auth_result(result))
