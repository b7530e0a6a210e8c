from fastapi import APIRouter, Depends
from app.modules.profiles.schemas import ProfileUpdate, ProfileResponse
from app.modules.profiles.service import ProfileService
from app.core.dependencies import get_optional_user, get_request_supabase
from supabase import Client
from typing import Optional, Dict

router = APIRouter(prefix="/profile", tags=["profile"])


def get_profile_service(
    supabase: Client = Depends(get_request_supabase),
    current_user: Optional[Dict] = Depends(get_optional_user)
) -> ProfileService:
    return ProfileService(supabase, current_user)


@router.get("", response_model=ProfileResponse)
async def read_profile(service: ProfileService = Depends(get_profile_service)):
    """Get the current user's profile"""
    return service.read_profile()


@router.put("", response_model=ProfileResponse)
async def update_profile(
    profile_data: ProfileUpdate,
    service: ProfileService = Depends(get_profile_service)
):
    """Update full name and description of the current user's profile"""
    return service.update_profile(profile_data)
