"""Pytest configuration and fixtures for staffdesk.

No Supabase is needed: the permission store, auth service and admin services
are replaced by in-memory fakes through FastAPI dependency overrides.
"""

import time
from typing import Dict, List, Optional, Tuple

import pytest
from fastapi import HTTPException
from httpx import ASGITransport, AsyncClient

from staffdesk.core.dependencies import get_auth_service, get_permission_cache
from staffdesk.main import app
from staffdesk.modules.permissions.cache import PermissionCache
from staffdesk.modules.permissions.resolver import PermissionResolver
from staffdesk.modules.permissions.schemas import PermissionOverride, RoleGrant

ORG_ID = "org-1"
OTHER_ORG_ID = "org-2"


class FakePermissionStore:
    """In-memory PermissionStore that counts queries and can be told to fail or stall."""

    def __init__(self) -> None:
        self.grants: Dict[Tuple[str, str], List[RoleGrant]] = {}
        self.overrides: Dict[Tuple[str, str], List[PermissionOverride]] = {}
        self.role_calls = 0
        self.override_calls = 0
        self.location_ids: List[Optional[str]] = []
        self.error: Optional[Exception] = None
        self.delay = 0.0

    def grant(self, user_id: str, org_id: str, *codes: str, role_id: str = "role-1") -> None:
        self.grants.setdefault((user_id, org_id), []).append(
            RoleGrant(role_id=role_id, permission_codes=list(codes))
        )

    def override(self, user_id: str, org_id: str, code: str, allow: bool) -> None:
        self.overrides.setdefault((user_id, org_id), []).append(
            PermissionOverride(permission_code=code, allow=allow)
        )

    def fetch_role_permissions(self, user_id, org_id, location_id=None):
        self.role_calls += 1
        self.location_ids.append(location_id)
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.grants.get((user_id, org_id), []))

    def fetch_overrides(self, user_id, org_id):
        self.override_calls += 1
        if self.error is not None:
            raise self.error
        return list(self.overrides.get((user_id, org_id), []))


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeAuthService:
    """Maps bearer tokens to user dicts; unknown tokens are rejected with 401."""

    def __init__(self, users: Dict[str, Dict]) -> None:
        self.users = users

    def get_current_user(self, token: str) -> Dict:
        if token not in self.users:
            raise HTTPException(status_code=401, detail="Invalid or expired token")
        return self.users[token]


USERS = {
    "token-alice": {"id": "alice", "email": "alice@example.com", "user_metadata": {}, "app_metadata": {}},
    "token-bob": {"id": "bob", "email": "bob@example.com", "user_metadata": {}, "app_metadata": {}},
}


@pytest.fixture
def store() -> FakePermissionStore:
    return FakePermissionStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def resolver(store: FakePermissionStore) -> PermissionResolver:
    return PermissionResolver(store, timeout=1.0)


@pytest.fixture
def cache(resolver: PermissionResolver, clock: FakeClock) -> PermissionCache:
    return PermissionCache(resolver, ttl_seconds=30, clock=clock)


@pytest.fixture
def alice_headers() -> Dict[str, str]:
    return {"Authorization": "Bearer token-alice"}


@pytest.fixture
def bob_headers() -> Dict[str, str]:
    return {"Authorization": "Bearer token-bob"}


@pytest.fixture
async def client(cache: PermissionCache) -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI) with fake auth and an isolated cache."""
    app.dependency_overrides[get_auth_service] = lambda: FakeAuthService(USERS)
    app.dependency_overrides[get_permission_cache] = lambda: cache
    app.state.limiter.reset()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
