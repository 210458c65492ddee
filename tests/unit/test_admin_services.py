"""Unit tests for the role, override and flag services (Supabase client mocked)."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from fastapi import HTTPException

from staffdesk.modules.flags.service import FlagService
from staffdesk.modules.overrides.service import OverrideService
from staffdesk.modules.roles.schemas import UserRoleAssign
from staffdesk.modules.roles.service import RoleService

NOW = "2026-01-01T00:00:00+00:00"


def _query(*results):
    """Query builder mock; each execute() returns the next data payload."""
    query = MagicMock()
    for name in ("select", "eq", "in_", "order", "limit", "offset", "insert", "upsert", "delete"):
        getattr(query, name).return_value = query
    query.execute.side_effect = [SimpleNamespace(data=data) for data in results]
    return query


def _client(**tables):
    client = MagicMock()
    client.table.side_effect = lambda name: tables[name]
    return client


ROLE_ROW = {"id": "r1", "org_id": "org-1", "code": "staff", "name": "Staff", "created_at": NOW}


class TestRoleService:
    def test_replace_role_permissions(self) -> None:
        roles = _query([ROLE_ROW])
        permissions = _query([{"id": "p1", "code": "orders:view"}, {"id": "p2", "code": "tasks:view"}])
        links = _query([], [])
        service = RoleService(_client(roles=roles, permissions=permissions, role_permissions=links))

        result = service.replace_role_permissions("org-1", "r1", ["tasks:view", "orders:view", "tasks:view"])

        assert result.permission_codes == ["orders:view", "tasks:view"]
        links.delete.assert_called_once()
        links.insert.assert_called_once_with([
            {"role_id": "r1", "permission_id": "p1"},
            {"role_id": "r1", "permission_id": "p2"},
        ])

    def test_replace_rejects_unknown_codes(self) -> None:
        roles = _query([ROLE_ROW])
        permissions = _query([{"id": "p1", "code": "orders:view"}])
        links = _query()
        service = RoleService(_client(roles=roles, permissions=permissions, role_permissions=links))

        with pytest.raises(HTTPException) as exc_info:
            service.replace_role_permissions("org-1", "r1", ["orders:view", "orders:nope"])
        assert exc_info.value.status_code == 400
        assert "orders:nope" in exc_info.value.detail
        links.delete.assert_not_called()

    def test_replace_with_empty_set_only_deletes(self) -> None:
        links = _query([])
        service = RoleService(_client(roles=_query([ROLE_ROW]), permissions=_query(), role_permissions=links))
        result = service.replace_role_permissions("org-1", "r1", [])
        assert result.permission_codes == []
        links.insert.assert_not_called()

    def test_role_from_other_org_is_404(self) -> None:
        service = RoleService(_client(roles=_query([])))
        with pytest.raises(HTTPException) as exc_info:
            service.assign_role("org-1", "bob", UserRoleAssign(role_id="r9"))
        assert exc_info.value.status_code == 404

    def test_assign_role_upserts(self) -> None:
        user_roles = _query([{
            "id": "ur1", "user_id": "bob", "org_id": "org-1", "role_id": "r1",
            "location_id": "loc-1", "created_at": NOW,
        }])
        service = RoleService(_client(roles=_query([ROLE_ROW]), user_roles=user_roles))
        result = service.assign_role("org-1", "bob", UserRoleAssign(role_id="r1", location_id="loc-1"))
        assert result.location_id == "loc-1"
        _, kwargs = user_roles.upsert.call_args
        assert kwargs["on_conflict"] == "user_id,org_id,role_id"

    def test_remove_missing_assignment_is_404(self) -> None:
        service = RoleService(_client(user_roles=_query([])))
        with pytest.raises(HTTPException) as exc_info:
            service.remove_role("org-1", "bob", "r1")
        assert exc_info.value.status_code == 404

    def test_store_error_is_500(self) -> None:
        roles = MagicMock()
        roles.select.side_effect = RuntimeError("connection reset")
        service = RoleService(_client(roles=roles))
        with pytest.raises(HTTPException) as exc_info:
            service.list_roles("org-1")
        assert exc_info.value.status_code == 500


class TestOverrideService:
    def test_set_override(self) -> None:
        table = _query([{
            "id": "o1", "user_id": "bob", "org_id": "org-1",
            "permission_code": "tasks:create", "allow": False, "created_at": NOW,
        }])
        result = OverrideService(_client(user_permission_overrides=table)).set_override(
            "org-1", "bob", "tasks:create", False
        )
        assert result.allow is False
        payload = table.upsert.call_args.args[0]
        assert payload["permission_code"] == "tasks:create"
        assert payload["allow"] is False

    def test_delete_missing_is_404(self) -> None:
        service = OverrideService(_client(user_permission_overrides=_query([])))
        with pytest.raises(HTTPException) as exc_info:
            service.delete_override("org-1", "bob", "tasks:create")
        assert exc_info.value.status_code == 404


class TestFlagService:
    def test_list_filters_by_module(self) -> None:
        table = _query([{
            "id": "f1", "org_id": "org-1", "module_code": "orders",
            "flag_code": "auto_approve", "enabled": True,
        }])
        flags = FlagService(_client(feature_flags=table)).list_flags("org-1", module_code="orders")
        assert [f.flag_code for f in flags] == ["auto_approve"]
        eq_calls = [c.args for c in table.eq.call_args_list]
        assert eq_calls == [("org_id", "org-1"), ("module_code", "orders")]

    def test_set_flag_failure_is_500(self) -> None:
        service = FlagService(_client(feature_flags=_query([])))
        with pytest.raises(HTTPException) as exc_info:
            service.set_flag("org-1", "orders", "auto_approve", True)
        assert exc_info.value.status_code == 500
