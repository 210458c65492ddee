"""Unit tests for AuthService token lookups (Supabase Auth mocked)."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from fastapi import HTTPException

from staffdesk.modules.auth.service import AuthService, clear_auth_cache


@pytest.fixture(autouse=True)
def reset_auth_cache():
    clear_auth_cache()
    yield
    clear_auth_cache()


def _user(user_id: str = "u1"):
    return SimpleNamespace(id=user_id, email="u1@example.com", user_metadata=None, app_metadata={"org": "x"})


def test_get_current_user_maps_supabase_user() -> None:
    supabase = MagicMock()
    supabase.auth.get_user.return_value = SimpleNamespace(user=_user())
    user = AuthService(supabase).get_current_user("tok")
    assert user == {
        "id": "u1",
        "email": "u1@example.com",
        "user_metadata": {},
        "app_metadata": {"org": "x"},
    }
    supabase.auth.get_user.assert_called_once_with(jwt="tok")


def test_get_current_user_is_cached_per_token() -> None:
    supabase = MagicMock()
    supabase.auth.get_user.return_value = SimpleNamespace(user=_user())
    service = AuthService(supabase)
    service.get_current_user("tok")
    service.get_current_user("tok")
    assert supabase.auth.get_user.call_count == 1


def test_missing_user_is_401() -> None:
    supabase = MagicMock()
    supabase.auth.get_user.return_value = SimpleNamespace(user=None)
    with pytest.raises(HTTPException) as exc_info:
        AuthService(supabase).get_current_user("tok")
    assert exc_info.value.status_code == 401


def test_supabase_error_is_401() -> None:
    supabase = MagicMock()
    supabase.auth.get_user.side_effect = RuntimeError("invalid JWT")
    with pytest.raises(HTTPException) as exc_info:
        AuthService(supabase).get_current_user("tok")
    assert exc_info.value.status_code == 401
    assert exc_info.value.detail == "Invalid or expired token"


def test_full_cache_drops_expired_tokens(monkeypatch) -> None:
    from staffdesk.modules.auth import service as auth_service

    monkeypatch.setattr(auth_service.settings, "auth_cache_max_size", 1)
    clock = iter([100.0, 1000.0])
    monkeypatch.setattr(auth_service.time, "monotonic", lambda: next(clock))
    supabase = MagicMock()
    supabase.auth.get_user.return_value = SimpleNamespace(user=_user())
    service = AuthService(supabase)

    service.get_current_user("old")
    service.get_current_user("new")

    assert list(auth_service._AUTH_USER_CACHE) == [auth_service._token_key("new")]


def test_login_bad_credentials_is_401() -> None:
    from staffdesk.modules.auth.schemas import LoginRequest

    supabase = MagicMock()
    supabase.auth.sign_in_with_password.side_effect = RuntimeError("Invalid login credentials")
    with pytest.raises(HTTPException) as exc_info:
        AuthService(supabase).login(LoginRequest(email="a@example.com", password="x"))
    assert exc_info.value.status_code == 401
