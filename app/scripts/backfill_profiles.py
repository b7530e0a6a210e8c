"""
Backfill Profiles Script
Creates the missing profile row for every auth user that has none.
The on_user_created_create_profile trigger does this at signup; this is the
service-account path for users created before the trigger existed.
Requires SUPABASE_SERVICE_ROLE_KEY.
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from app.config import settings
from app.database.supabase_client import SupabaseClient
from supabase import Client
from typing import List, Set
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

PAGE_SIZE = 100


def list_auth_users(supabase: Client, per_page: int = PAGE_SIZE) -> List:
    """All users of auth.users, page by page"""
    users = []
    page = 1
    while True:
        batch = supabase.auth.admin.list_users(page=page, per_page=per_page)
        users.extend(batch)
        if len(batch) < per_page:
            return users
        page += 1


def existing_profile_user_ids(supabase: Client) -> Set[str]:
    result = supabase.table("profiles").select("user_id").execute()
    return {row["user_id"] for row in (result.data or [])}


def backfill_profiles(supabase: Client) -> int:
    """Insert a profile for each auth user without one. Returns the number created."""
    logger.info("Backfilling profiles...")

    have_profile = existing_profile_user_ids(supabase)
    created_count = 0

    for user in list_auth_users(supabase):
        if user.id in have_profile:
            continue
        try:
            supabase.table("profiles").insert({
                "user_id": user.id,
                "email": user.email
            }).execute()
            created_count += 1
            logger.debug(f"Created profile for user: {user.id}")
        except Exception as e:
            logger.error(f"Error creating profile for user {user.id}: {e}")

    logger.info(f"Profiles backfilled: {created_count} created")
    return created_count


def main():
    """Main function to backfill profiles"""
    if not settings.supabase_service_role_key:
        logger.error("SUPABASE_SERVICE_ROLE_KEY is required to list auth users")
        sys.exit(1)
    try:
        supabase = SupabaseClient.get_service_client()
        created = backfill_profiles(supabase)
        logger.info(f"Backfill completed successfully! {created} profile(s) created")
    except Exception as e:
        logger.error(f"Error during backfill: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
