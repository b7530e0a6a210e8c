from fastapi import APIRouter, Depends
from app.modules.auth.schemas import (
    LoginRequest, LoginResponse, VerifyRequest, TokenResponse, CurrentUserResponse
)
from app.modules.auth.service import AuthService, get_profile_store
from app.core.dependencies import get_auth_service, get_current_token, get_current_user_id
from typing import Dict

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Send a passwordless login link / code to the given email"""
    return service.login(login_data.email)


@router.post("/verify", response_model=TokenResponse)
async def verify(
    verify_data: VerifyRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Exchange the emailed code for an access token"""
    return service.verify(verify_data.email, verify_data.token)


@router.post("/logout", status_code=200)
async def logout(
    token: str = Depends(get_current_token),
    current_user: Dict = Depends(get_current_user_id),
    service: AuthService = Depends(get_auth_service)
):
    """Logout and invalidate token"""
    service.logout(token, current_user["id"])
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=CurrentUserResponse)
async def get_current_user(current_user: Dict = Depends(get_current_user_id)):
    """Get current authenticated user together with their latest known profile."""
    return CurrentUserResponse(
        id=current_user["id"],
        email=current_user.get("email"),
        user_metadata=current_user.get("user_metadata") or {},
        profile=get_profile_store(current_user["id"]),
    )
