"""Tests for role-based type capabilities."""

import pytest

from triggerkit.auth import (
    ROLE_HIERARCHY,
    Capability,
    TypeCapabilities,
    TypePermissions,
    UserContext,
    capabilities_for,
    has_role_or_higher,
)


# ── Helpers ──────────────────────────────────────────────────────────────────


def make_user(role: str) -> UserContext:
    return UserContext(user_id="u1", tenant_id="t1", roles=[role])


def granted(capabilities: TypeCapabilities) -> set[Capability]:
    return {c for c in Capability if capabilities.allows(c)}


# ── TypeCapabilities ─────────────────────────────────────────────────────────


def test_full_allows_everything():
    assert granted(TypeCapabilities.full("Deal")) == set(Capability)


def test_none_allows_nothing():
    assert granted(TypeCapabilities.none("Deal")) == set()


def test_capabilities_are_immutable():
    capabilities = TypeCapabilities.none("Deal")
    with pytest.raises(AttributeError):
        capabilities.can_create = True


# ── capabilities_for — default thresholds ────────────────────────────────────


def test_no_user_gets_nothing():
    capabilities = capabilities_for("Deal", None)
    assert capabilities.record_type == "Deal"
    assert granted(capabilities) == set()


def test_readonly_gets_nothing():
    assert granted(capabilities_for("Deal", make_user("readonly"))) == set()


def test_user_can_create_and_update():
    assert granted(capabilities_for("Deal", make_user("user"))) == {
        Capability.CREATE,
        Capability.UPDATE,
    }


def test_manager_can_do_everything_by_default():
    assert granted(capabilities_for("Deal", make_user("manager"))) == set(Capability)


def test_unknown_role_gets_nothing():
    assert granted(capabilities_for("Deal", make_user("intern"))) == set()


def test_user_without_roles_gets_nothing():
    user = UserContext(user_id="u1")
    assert granted(capabilities_for("Deal", user)) == set()


# ── capabilities_for — per-type thresholds ───────────────────────────────────


def test_custom_permissions_raise_thresholds():
    perms = TypePermissions(create="manager", delete="admin", restore="admin")
    capabilities = capabilities_for("Deal", make_user("manager"), perms)
    assert granted(capabilities) == {
        Capability.CREATE,
        Capability.UPDATE,
    }


def test_custom_permissions_lower_thresholds():
    perms = TypePermissions(delete="user", restore="user")
    capabilities = capabilities_for("Deal", make_user("user"), perms)
    assert granted(capabilities) == set(Capability)


def test_permissions_from_dict_keeps_defaults():
    perms = TypePermissions.from_dict({"delete": "admin"})
    assert perms == TypePermissions(create="user", update="user", delete="admin", restore="manager")


def test_permissions_from_none():
    assert TypePermissions.from_dict(None) == TypePermissions()


# ── has_role_or_higher ───────────────────────────────────────────────────────


def test_role_hierarchy_order():
    assert ROLE_HIERARCHY["readonly"] < ROLE_HIERARCHY["user"] < ROLE_HIERARCHY["manager"]
    assert ROLE_HIERARCHY["manager"] < ROLE_HIERARCHY["admin"]


def test_admin_has_every_role():
    admin = make_user("admin")
    assert all(has_role_or_higher(admin, role) for role in ROLE_HIERARCHY)


def test_unknown_required_role_is_never_satisfied():
    assert not has_role_or_higher(make_user("admin"), "superuser")
