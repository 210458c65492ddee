import hashlib
import logging
import time
from supabase import Client
from staffdesk.modules.auth.schemas import LoginRequest, TokenResponse
from staffdesk.config.settings import settings
from fastapi import HTTPException
from typing import Dict, Any, Optional, Tuple

logger = logging.getLogger(__name__)

# token digest -> (user dict, expiry on the monotonic clock)
_AUTH_USER_CACHE: Dict[str, Tuple[Dict[str, Any], float]] = {}


def clear_auth_cache() -> None:
    _AUTH_USER_CACHE.clear()


def _token_key(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def _cached_user(key: str, now: float) -> Optional[Dict[str, Any]]:
    hit = _AUTH_USER_CACHE.get(key)
    if hit is None:
        return None
    user_data, expiry = hit
    if now >= expiry:
        del _AUTH_USER_CACHE[key]
        return None
    return user_data


def _remember_user(key: str, user_data: Dict[str, Any], now: float) -> None:
    if len(_AUTH_USER_CACHE) >= settings.auth_cache_max_size:
        for stale in [k for k, (_, expiry) in _AUTH_USER_CACHE.items() if expiry <= now]:
            del _AUTH_USER_CACHE[stale]
    if len(_AUTH_USER_CACHE) < settings.auth_cache_max_size:
        _AUTH_USER_CACHE[key] = (user_data, now + settings.auth_cache_ttl_seconds)


class AuthService:
    """Thin wrapper over Supabase Auth: password login and bearer token lookup."""

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def login(self, login_data: LoginRequest) -> TokenResponse:
        """Exchange email and password for a Supabase session token"""
        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password
            })
            if not auth_response.user or not auth_response.session:
                raise HTTPException(status_code=401, detail="Invalid credentials")
        except HTTPException:
            raise
        except Exception as e:
            message = str(e).lower()
            if "invalid" in message or "credentials" in message:
                raise HTTPException(status_code=401, detail="Invalid email or password")
            logger.error("Supabase login failed: %s", e)
            raise HTTPException(status_code=500, detail=f"Login failed: {e}")

        return TokenResponse(
            access_token=auth_response.session.access_token,
            token_type="bearer",
            user_id=auth_response.user.id,
            email=auth_response.user.email or login_data.email
        )

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """User behind a bearer token.

        Lookups are memoized per token digest for auth_cache_ttl_seconds so a
        burst of parallel requests costs one Supabase Auth call. Any failure
        is reported as 401.
        """
        key = _token_key(token)
        now = time.monotonic()
        user_data = _cached_user(key, now)
        if user_data is not None:
            return user_data

        try:
            user_response = self.supabase.auth.get_user(jwt=token)
        except Exception as e:
            logger.debug("Token rejected by Supabase Auth: %s", e)
            raise HTTPException(status_code=401, detail="Invalid or expired token")
        if not user_response or not user_response.user:
            raise HTTPException(status_code=401, detail="Invalid or expired token")

        user = user_response.user
        user_data = {
            "id": user.id,
            "email": user.email,
            "user_metadata": user.user_metadata or {},
            "app_metadata": user.app_metadata or {},
        }
        _remember_user(key, user_data, now)
        return user_data
