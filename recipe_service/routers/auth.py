from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from recipe_service.core.errors import ApiError, AuthError
from recipe_service.core.security import validate_password, verify_password
from recipe_service.core.tokens import TokenIdentity, TokenService
from recipe_service.db.session import get_session
from recipe_service.dependencies.users import get_current_user_required, get_token_service
from recipe_service.models.user import User
from recipe_service.schemas import (
    ChangePasswordRequest,
    LoginRequest,
    ProfileUpdate,
    RefreshRequest,
    RegisterRequest,
    UserProfile,
)
from recipe_service.services.users import user_service

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _issue_tokens(tokens: TokenService, user: User) -> dict[str, str]:
    identity = TokenIdentity(user_id=user.id, email=user.email, name=user.name)
    return {
        "accessToken": tokens.create_access_token(identity),
        "refreshToken": tokens.create_refresh_token(user.id),
    }


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest,
    session: AsyncSession = Depends(get_session),
    tokens: TokenService = Depends(get_token_service),
):
    """Create an account and return its profile with a fresh token pair."""
    errors = validate_password(payload.password)
    if errors:
        raise ApiError(status.HTTP_400_BAD_REQUEST, "Password does not meet requirements", "WEAK_PASSWORD", errors)
    if await user_service.get_user_by_email(session, payload.email):
        raise ApiError(status.HTTP_409_CONFLICT, "User with this email already exists", "EMAIL_TAKEN")

    user_id = await user_service.create_user(session, payload.name, payload.email, payload.password)
    user = await user_service.get_user_by_id(session, user_id)
    return {"success": True, "data": {"user": UserProfile.model_validate(user), **_issue_tokens(tokens, user)}}


@router.post("/login")
async def login(
    payload: LoginRequest,
    session: AsyncSession = Depends(get_session),
    tokens: TokenService = Depends(get_token_service),
):
    """Check credentials and return the profile with a fresh token pair."""
    user = await user_service.authenticate(session, payload.email, payload.password)
    if user is None:
        raise AuthError("Invalid email or password")
    await user_service.touch_user_login(session, user)
    return {"success": True, "data": {"user": UserProfile.model_validate(user), **_issue_tokens(tokens, user)}}


@router.post("/refresh")
async def refresh(
    payload: RefreshRequest,
    session: AsyncSession = Depends(get_session),
    tokens: TokenService = Depends(get_token_service),
):
    """Exchange a refresh token for a new access token."""
    user_id = tokens.verify_refresh_token(payload.refreshToken)
    user = await user_service.get_user_by_id(session, user_id)
    if user is None:
        raise AuthError("User not found")
    identity = TokenIdentity(user_id=user.id, email=user.email, name=user.name)
    return {"success": True, "data": {"accessToken": tokens.create_access_token(identity)}}


@router.get("/profile")
async def get_profile(current_user: User = Depends(get_current_user_required)):
    return {"success": True, "data": UserProfile.model_validate(current_user)}


@router.put("/profile")
async def update_profile(
    payload: ProfileUpdate,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user_required),
):
    """Change name and/or email; the email must not belong to another user."""
    if payload.email:
        existing = await user_service.get_user_by_email(session, payload.email)
        if existing and existing.id != current_user.id:
            raise ApiError(status.HTTP_409_CONFLICT, "Email already taken", "EMAIL_TAKEN")
    user = await user_service.update_user(session, current_user.id, name=payload.name, email=payload.email)
    return {"success": True, "data": UserProfile.model_validate(user)}


@router.post("/change-password")
async def change_password(
    payload: ChangePasswordRequest,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user_required),
):
    errors = validate_password(payload.newPassword)
    if errors:
        raise ApiError(
            status.HTTP_400_BAD_REQUEST, "New password does not meet requirements", "WEAK_PASSWORD", errors
        )
    if not verify_password(payload.currentPassword, current_user.password_hash):
        raise ApiError(status.HTTP_400_BAD_REQUEST, "Current password is incorrect", "WRONG_PASSWORD")
    await user_service.update_user_password(session, current_user, payload.newPassword)
    return {"success": True, "message": "Password changed successfully"}


@router.post("/logout")
async def logout():
    """Tokens are stateless; the client discards them."""
    return {"success": True, "message": "Logged out successfully"}
