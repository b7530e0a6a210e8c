import hashlib
import time
import logging
from supabase import Client
from app.database.supabase_client import SupabaseClient
from app.modules.auth.schemas import LoginResponse, TokenResponse
from app.config.settings import settings
from fastapi import HTTPException
from typing import Callable, Dict, Any, Optional

logger = logging.getLogger(__name__)

# In-memory cache for get_current_user to reduce Supabase auth calls (e.g. many parallel requests with same token)
_AUTH_USER_CACHE: Dict[str, tuple] = {}
_AUTH_CACHE_TTL_SEC = 60
_AUTH_CACHE_MAX_SIZE = 500

# Latest known profile per user id, written by profile updates
_PROFILE_STORE: Dict[str, Dict[str, Any]] = {}


def set_profile_store(user_id: str, profile: Dict[str, Any]) -> None:
    _PROFILE_STORE[user_id] = dict(profile)


def get_profile_store(user_id: str) -> Optional[Dict[str, Any]]:
    profile = _PROFILE_STORE.get(user_id)
    return dict(profile) if profile is not None else None


def clear_profile_store(user_id: Optional[str] = None) -> None:
    if user_id is None:
        _PROFILE_STORE.clear()
    else:
        _PROFILE_STORE.pop(user_id, None)


def _token_cache_key(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def _remember_user(cache_key: str, user_data: Dict[str, Any], now: float) -> None:
    """Cache a resolved user, evicting expired entries and then the oldest one when full"""
    if len(_AUTH_USER_CACHE) >= _AUTH_CACHE_MAX_SIZE:
        for key in [k for k, (_, expiry) in _AUTH_USER_CACHE.items() if expiry <= now]:
            del _AUTH_USER_CACHE[key]
    if len(_AUTH_USER_CACHE) >= _AUTH_CACHE_MAX_SIZE:
        del _AUTH_USER_CACHE[next(iter(_AUTH_USER_CACHE))]
    _AUTH_USER_CACHE[cache_key] = (user_data, now + _AUTH_CACHE_TTL_SEC)


class AuthService:
    def __init__(self, supabase: Client, session_client_factory: Optional[Callable[[], Client]] = None):
        self.supabase = supabase
        # sign-in and sign-out store session state on the client, so they never touch the shared one
        self.session_client_factory = session_client_factory or SupabaseClient.get_session_client

    def login(self, email: str) -> LoginResponse:
        """Start a passwordless login by emailing a one-time code / magic link"""
        credentials: Dict[str, Any] = {"email": email}
        if settings.login_redirect_url:
            credentials["options"] = {"email_redirect_to": settings.login_redirect_url}
        try:
            self.session_client_factory().auth.sign_in_with_otp(credentials)
        except Exception as e:
            logger.error(f"Passwordless login failed for {email}: {str(e)}")
            raise HTTPException(status_code=500, detail=f"Login failed: {str(e)}")
        logger.info(f"Login link sent to {email}")
        return LoginResponse(email=email, message="Check your email for the login link")

    def verify(self, email: str, token: str) -> TokenResponse:
        """Exchange the emailed one-time code for a session"""
        try:
            auth_response = self.session_client_factory().auth.verify_otp({
                "email": email,
                "token": token,
                "type": "email"
            })
        except Exception as e:
            error_message = str(e)
            if "invalid" in error_message.lower() or "expired" in error_message.lower():
                raise HTTPException(status_code=401, detail="Invalid or expired login code")
            raise HTTPException(status_code=500, detail=f"Login failed: {error_message}")

        if not auth_response.user or not auth_response.session:
            raise HTTPException(status_code=401, detail="Invalid or expired login code")

        return TokenResponse(
            access_token=auth_response.session.access_token,
            refresh_token=auth_response.session.refresh_token,
            token_type="bearer",
            user_id=auth_response.user.id,
            email=auth_response.user.email or email
        )

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Get current user details from Supabase Auth token. Uses short TTL cache to reduce auth API calls."""
        try:
            cache_key = _token_cache_key(token)
            now = time.monotonic()
            if cache_key in _AUTH_USER_CACHE:
                user_data, expiry = _AUTH_USER_CACHE[cache_key]
                if now < expiry:
                    return user_data
                del _AUTH_USER_CACHE[cache_key]
            user_response = self.supabase.auth.get_user(jwt=token)
            if not user_response or not user_response.user:
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            user = user_response.user
            user_data = {
                "id": user.id,
                "email": user.email,
                "user_metadata": user.user_metadata or {},
                "app_metadata": user.app_metadata or {},
                "access_token": token,
            }
            _remember_user(cache_key, user_data, now)
            return user_data
        except HTTPException:
            raise
        except Exception as e:
            error_msg = str(e)
            if "JWT" in error_msg or "expired" in error_msg.lower() or "invalid" in error_msg.lower():
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            raise HTTPException(status_code=401, detail="Authentication failed")

    def logout(self, token: str, user_id: Optional[str] = None) -> bool:
        """Logout user and forget what is cached for them"""
        _AUTH_USER_CACHE.pop(_token_cache_key(token), None)
        if user_id:
            clear_profile_store(user_id)
        try:
            # revokes the refresh tokens of this JWT's session only
            self.session_client_factory().auth.admin.sign_out(token, scope="local")
            return True
        except Exception as e:
            logger.warning(f"Supabase sign out failed: {str(e)}")
            return False
