"""Tests for the permissions/roles seed script (Supabase client mocked)."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from staffdesk.config.permissions_config import PERMISSION_MATRIX
from staffdesk.scripts import seed_permissions_roles as seed


def _query(data):
    query = MagicMock()
    for name in ("select", "eq", "in_", "insert", "update", "delete"):
        getattr(query, name).return_value = query
    query.execute.return_value = SimpleNamespace(data=data)
    return query


def test_seed_permissions_inserts_missing() -> None:
    table = _query([])
    inserted_row = _query([{"id": "new"}])
    table.insert.return_value = inserted_row
    client = MagicMock()
    client.table.return_value = table

    count = seed.seed_permissions(client)

    assert count == len(PERMISSION_MATRIX["permissions"])
    inserted = {c.args[0]["code"] for c in table.insert.call_args_list}
    assert {"*", "orders:*", "orders:approve"} <= inserted
    table.update.assert_not_called()


def test_assign_permissions_syncs_links() -> None:
    permissions = _query([{"id": "p1"}, {"id": "p2"}])
    links = _query([{"permission_id": "p2"}, {"permission_id": "p3"}])
    client = MagicMock()
    client.table.side_effect = lambda name: {"permissions": permissions, "role_permissions": links}[name]

    seed.assign_permissions_to_role(client, "r1", "staff", ["tasks:view", "orders:view"])

    links.insert.assert_called_once_with([{"role_id": "r1", "permission_id": "p1"}])
    links.in_.assert_called_with("permission_id", ["p3"])


def test_main_requires_org_id() -> None:
    with pytest.raises(SystemExit) as exc_info:
        seed.main([])
    assert exc_info.value.code == 2


def test_seed_roles_updates_existing_and_continues_on_error(monkeypatch) -> None:
    roles = _query([{"id": "r1"}])
    client = MagicMock()
    client.table.return_value = roles
    links_failed = []

    def failing_links(supabase, role_id, role_code, codes):
        links_failed.append(role_code)
        raise RuntimeError("link failure")

    monkeypatch.setattr(seed, "assign_permissions_to_role", failing_links)
    count = seed.seed_roles(client, "org-1")

    assert count == 0
    assert len(links_failed) == len(PERMISSION_MATRIX["roles"])
    roles.insert.assert_not_called()
    roles.update.assert_called()


def test_assign_permissions_clears_links_when_catalog_has_none() -> None:
    permissions = _query([])
    links = _query([{"permission_id": "p3"}])
    client = MagicMock()
    client.table.side_effect = lambda name: {"permissions": permissions, "role_permissions": links}[name]

    seed.assign_permissions_to_role(client, "r1", "staff", ["tasks:view"])

    links.insert.assert_not_called()
    links.delete.assert_called_once()
    links.in_.assert_called_with("permission_id", ["p3"])
