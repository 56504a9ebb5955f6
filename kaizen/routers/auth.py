"""Auth router - API endpoints for authentication and the current user."""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from pydantic import BaseModel

from kaizen.database import get_database
from kaizen.errors import UnauthorizedError, to_http_exception
from kaizen.models.user import User, UserCreate, UserSettings, UserSettingsUpdate, UserUpdate
from kaizen.services.auth_service import AuthService
from kaizen.utils.auth import verify_access_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])
security = HTTPBearer(auto_error=False)


class LoginRequest(BaseModel):
    """Login request model."""

    email: str
    password: str


class TokenResponse(BaseModel):
    """Token response model."""

    access_token: str
    token_type: str = "bearer"


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> str:
    """
    Resolve the bearer token to an internal user id.

    Raises:
        HTTPException: If the token is missing or invalid (401)
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    try:
        return verify_access_token(credentials.credentials)
    except JWTError as e:
        logger.info("Rejected bearer token: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
        )


@router.post("/register", response_model=User, status_code=status.HTTP_201_CREATED)
async def register(user: UserCreate, db=Depends(get_database)):
    """
    Register a new user.

    - Email must not be registered yet (400)
    - Default settings are created
    """
    service = AuthService(db)
    try:
        return await service.register_user(
            email=user.email,
            password=user.password,
            name=user.name,
        )
    except ValueError as e:
        raise to_http_exception(e)


@router.post("/login", response_model=TokenResponse)
async def login(login_req: LoginRequest, db=Depends(get_database)):
    """Login user and return an access token (401 on bad credentials)."""
    service = AuthService(db)
    try:
        token = await service.login(
            email=login_req.email,
            password=login_req.password,
        )
    except UnauthorizedError as e:
        raise to_http_exception(e)
    return TokenResponse(access_token=token)


@router.get("/me", response_model=User)
async def get_current_user(
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Get current authenticated user."""
    service = AuthService(db)
    try:
        return await service.get_user_by_id(user_id)
    except ValueError as e:
        raise to_http_exception(e)


@router.patch("/me", response_model=User)
async def update_current_user(
    user_update: UserUpdate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Update name and/or email of the current user."""
    service = AuthService(db)
    try:
        return await service.update_user(user_id, user_update)
    except ValueError as e:
        raise to_http_exception(e)


@router.get("/me/settings", response_model=UserSettings)
async def get_settings(
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Get display settings of the current user."""
    service = AuthService(db)
    try:
        return await service.get_settings(user_id)
    except ValueError as e:
        raise to_http_exception(e)


@router.put("/me/settings", response_model=UserSettings)
async def update_settings(
    settings_update: UserSettingsUpdate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Update display settings of the current user."""
    service = AuthService(db)
    try:
        return await service.update_settings(user_id, settings_update)
    except ValueError as e:
        raise to_http_exception(e)
