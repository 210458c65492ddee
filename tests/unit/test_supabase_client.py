"""Tests for the cached Supabase client accessors (client creation patched)."""

import pytest

from staffdesk.database import supabase_client
from staffdesk.database.supabase_client import SupabaseClient, get_service_supabase, get_supabase


@pytest.fixture
def created(monkeypatch):
    calls = []

    def fake_create_client(url, key):
        calls.append(key)
        return ("client", key)

    monkeypatch.setattr(supabase_client, "create_client", fake_create_client)
    monkeypatch.setattr(supabase_client.settings, "supabase_url", "https://example.supabase.co")
    monkeypatch.setattr(supabase_client.settings, "supabase_key", "anon-key")
    SupabaseClient.reset_client()
    yield calls
    SupabaseClient.reset_client()


def test_clients_are_created_once(created) -> None:
    assert get_supabase() is get_supabase()
    assert created == ["anon-key"]


def test_service_client_uses_service_role_key(created, monkeypatch) -> None:
    monkeypatch.setattr(supabase_client.settings, "supabase_service_role_key", "service-key")
    assert get_service_supabase() == ("client", "service-key")


def test_service_client_falls_back_to_anon_without_key(created, monkeypatch) -> None:
    monkeypatch.setattr(supabase_client.settings, "supabase_service_role_key", None)
    assert get_service_supabase() == ("client", "anon-key")


def test_reset_client_drops_cached_clients(created) -> None:
    get_supabase()
    SupabaseClient.reset_client()
    get_supabase()
    assert created == ["anon-key", "anon-key"]
