from supabase import Client
from app.modules.profiles.schemas import ProfileUpdate, ProfileResponse
from app.modules.auth.service import set_profile_store
from typing import Any, Dict, Optional
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class ProfileService:
    def __init__(self, supabase: Client, current_user: Optional[Dict[str, Any]] = None):
        self.supabase = supabase
        self.current_user = current_user

    def _require_user(self) -> str:
        if not self.current_user or not self.current_user.get("id") or not self.current_user.get("email"):
            raise HTTPException(status_code=401, detail="User is not logged in")
        return self.current_user["id"]

    def read_profile(self) -> ProfileResponse:
        """Get the profile of the current user"""
        user_id = self._require_user()

        result = self.supabase.table("profiles")\
            .select("full_name, description, email")\
            .eq("user_id", user_id)\
            .maybe_single()\
            .execute()

        if not result or not result.data:
            # the signup trigger creates a profile for every user
            logger.error(f"No profile row for user {user_id}")
            raise HTTPException(status_code=404, detail="Fetching profile unsuccessful")

        return ProfileResponse(**result.data)

    def update_profile(self, new_profile: ProfileUpdate) -> ProfileResponse:
        """Update the current user's profile and publish it to the profile store"""
        user_id = self._require_user()
        if not new_profile.full_name:
            raise HTTPException(status_code=400, detail="Argument object is missing 'full_name' attribute")

        update_data = {"full_name": new_profile.full_name}
        # an omitted description keeps the stored one; an explicit null clears it
        if "description" in new_profile.model_fields_set:
            update_data["description"] = new_profile.description

        try:
            result = self.supabase.table("profiles")\
                .update(update_data)\
                .eq("user_id", user_id)\
                .execute()
        except Exception as e:
            logger.error(f"Failed to update profile of user {user_id}: {str(e)}")
            raise

        if not result.data:
            raise HTTPException(status_code=404, detail="Update of profile unsuccessful")

        profile = ProfileResponse(**result.data[0])
        set_profile_store(user_id, profile.model_dump())
        logger.info(f"Updated profile of user {user_id}")
        return profile
