from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from fastapi import HTTPException

from app.config import settings
from app.modules.auth import service as auth_service_module
from app.modules.auth.service import (
    AuthService, get_profile_store, set_profile_store, clear_profile_store
)


def auth_user(user_id="user-1", email="ada@example.com"):
    return SimpleNamespace(id=user_id, email=email, user_metadata={"name": "Ada"}, app_metadata={})


def verified(user_id, email, access_token):
    return SimpleNamespace(
        user=auth_user(user_id, email),
        session=SimpleNamespace(access_token=access_token, refresh_token=f"refresh-{user_id}"),
    )


@pytest.fixture
def session_clients():
    """Every client handed out for sign-in / sign-out, in order"""
    return []


@pytest.fixture
def service(fake_supabase, session_clients):
    def new_session_client():
        client = MagicMock()
        client.auth.verify_otp.return_value = verified("user-2", "bob@example.com", "bob-jwt")
        session_clients.append(client)
        return client
    return AuthService(fake_supabase, session_client_factory=new_session_client)


def test_login_sends_otp(service, session_clients, monkeypatch):
    monkeypatch.setattr(settings, "login_redirect_url", "http://localhost:5173/")

    response = service.login("ada@example.com")

    assert response.email == "ada@example.com"
    session_clients[0].auth.sign_in_with_otp.assert_called_once_with({
        "email": "ada@example.com",
        "options": {"email_redirect_to": "http://localhost:5173/"},
    })


def test_login_failure_is_reported(fake_supabase):
    session_client = MagicMock()
    session_client.auth.sign_in_with_otp.side_effect = RuntimeError("rate limited")

    with pytest.raises(HTTPException) as exc:
        AuthService(fake_supabase, session_client_factory=lambda: session_client).login("ada@example.com")
    assert exc.value.status_code == 500


def test_verify_returns_session_tokens(fake_supabase):
    session_client = MagicMock()
    session_client.auth.verify_otp.return_value = verified("user-1", "ada@example.com", "access")

    tokens = AuthService(fake_supabase, session_client_factory=lambda: session_client).verify("ada@example.com", "123456")

    assert tokens.access_token == "access"
    assert tokens.refresh_token == "refresh-user-1"
    assert tokens.user_id == "user-1"
    session_client.auth.verify_otp.assert_called_once_with(
        {"email": "ada@example.com", "token": "123456", "type": "email"}
    )


def test_verify_with_bad_code_is_unauthorized(fake_supabase):
    session_client = MagicMock()
    session_client.auth.verify_otp.side_effect = RuntimeError("Token has expired or is invalid")

    with pytest.raises(HTTPException) as exc:
        AuthService(fake_supabase, session_client_factory=lambda: session_client).verify("ada@example.com", "000000")
    assert exc.value.status_code == 401


def test_sign_in_never_stores_a_session_on_the_shared_client(service, session_clients, fake_supabase):
    service.login("ada@example.com")
    service.verify("bob@example.com", "123456")

    # each call got its own client
    assert len(session_clients) == 2
    assert session_clients[0] is not session_clients[1]
    fake_supabase.auth.sign_in_with_otp.assert_not_called()
    fake_supabase.auth.verify_otp.assert_not_called()
    fake_supabase.auth.set_session.assert_not_called()


def test_current_user_is_cached(fake_supabase):
    fake_supabase.auth.get_user.return_value = SimpleNamespace(user=auth_user())
    service = AuthService(fake_supabase)

    first = service.get_current_user("jwt")
    second = service.get_current_user("jwt")

    assert first == second
    assert first["id"] == "user-1"
    assert first["access_token"] == "jwt"
    fake_supabase.auth.get_user.assert_called_once_with(jwt="jwt")


def test_invalid_token_is_unauthorized(fake_supabase):
    fake_supabase.auth.get_user.side_effect = RuntimeError("invalid JWT")

    with pytest.raises(HTTPException) as exc:
        AuthService(fake_supabase).get_current_user("garbage")
    assert exc.value.status_code == 401


def test_logout_forgets_cached_user_and_profile(service, fake_supabase):
    fake_supabase.auth.get_user.return_value = SimpleNamespace(user=auth_user())
    service.get_current_user("jwt")
    set_profile_store("user-1", {"full_name": "Ada"})

    assert service.logout("jwt", "user-1") is True

    assert get_profile_store("user-1") is None
    service.get_current_user("jwt")
    assert fake_supabase.auth.get_user.call_count == 2


def test_logout_revokes_the_callers_own_token(service, session_clients, fake_supabase):
    assert service.logout("alice-jwt", "alice") is True

    session_clients[0].auth.admin.sign_out.assert_called_once_with("alice-jwt", scope="local")
    fake_supabase.auth.sign_out.assert_not_called()
    fake_supabase.auth.admin.sign_out.assert_not_called()


def test_logout_after_another_user_signed_in_revokes_only_the_caller(service, session_clients, fake_supabase):
    service.verify("bob@example.com", "123456")

    service.logout("alice-jwt", "alice")

    verify_client, logout_client = session_clients
    logout_client.auth.admin.sign_out.assert_called_once_with("alice-jwt", scope="local")
    verify_client.auth.admin.sign_out.assert_not_called()
    verify_client.auth.sign_out.assert_not_called()
    fake_supabase.auth.sign_out.assert_not_called()


def test_logout_reports_failed_revocation(fake_supabase):
    session_client = MagicMock()
    session_client.auth.admin.sign_out.side_effect = RuntimeError("network down")
    set_profile_store("user-1", {"full_name": "Ada"})

    assert AuthService(fake_supabase, session_client_factory=lambda: session_client).logout("jwt", "user-1") is False
    assert get_profile_store("user-1") is None


class TestUserCacheBound:
    @pytest.fixture(autouse=True)
    def small_cache(self, monkeypatch):
        monkeypatch.setattr(auth_service_module, "_AUTH_CACHE_MAX_SIZE", 3)

    def test_expired_entries_make_room(self, fake_supabase):
        cache = auth_service_module._AUTH_USER_CACHE
        for index in range(3):
            cache[f"stale-{index}"] = ({"id": f"old-{index}"}, 0.0)
        fake_supabase.auth.get_user.return_value = SimpleNamespace(user=auth_user())
        service = AuthService(fake_supabase)

        service.get_current_user("jwt")
        service.get_current_user("jwt")

        assert not any(key.startswith("stale-") for key in cache)
        fake_supabase.auth.get_user.assert_called_once_with(jwt="jwt")

    def test_oldest_entry_is_evicted_when_all_are_live(self, fake_supabase):
        fake_supabase.auth.get_user.side_effect = lambda jwt: SimpleNamespace(user=auth_user(user_id=jwt))
        service = AuthService(fake_supabase)

        for token in ("t1", "t2", "t3", "t4"):
            service.get_current_user(token)

        cache = auth_service_module._AUTH_USER_CACHE
        assert len(cache) == 3
        assert sorted(user["id"] for user, _ in cache.values()) == ["t2", "t3", "t4"]

        # the newest user is still served from the cache
        service.get_current_user("t4")
        assert fake_supabase.auth.get_user.call_count == 4


def test_profile_store_returns_copies():
    profile = {"full_name": "Ada"}
    set_profile_store("user-1", profile)
    profile["full_name"] = "Changed"

    stored = get_profile_store("user-1")
    stored["full_name"] = "Also changed"

    assert get_profile_store("user-1") == {"full_name": "Ada"}
    clear_profile_store("user-1")
    assert get_profile_store("user-1") is None
