"""
Core dependencies for resolving the caller and the Supabase client acting for them
"""

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.database.supabase_client import SupabaseClient, get_supabase
from app.modules.auth.service import AuthService
from supabase import Client
from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)

# auto_error=False: anonymous callers may browse events
security = HTTPBearer(auto_error=False)


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_optional_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security)
) -> Optional[str]:
    """Bearer token from the Authorization header, or None"""
    if credentials is None:
        return None
    return credentials.credentials


def get_current_token(token: Optional[str] = Depends(get_optional_token)) -> str:
    """Bearer token; 401 when missing"""
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not logged in",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return token


def get_optional_user(
    token: Optional[str] = Depends(get_optional_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> Optional[Dict[str, Any]]:
    """Auth context of the request: the user behind the token, or None when anonymous.

    An invalid token is still an error; only a missing one means anonymous.
    """
    if not token:
        return None
    return auth_service.get_current_user(token)


def get_current_user_id(
    user_data: Optional[Dict[str, Any]] = Depends(get_optional_user)
) -> Dict[str, Any]:
    """Extract current user info from JWT token; 401 when anonymous"""
    if not user_data:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not logged in",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user_data


def get_request_supabase(token: Optional[str] = Depends(get_optional_token)) -> Client:
    """Supabase client for this request: user-scoped when a token is present, anon otherwise"""
    if token:
        return SupabaseClient.get_user_client(token)
    return get_supabase()
