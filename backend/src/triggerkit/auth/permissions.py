"""Capability resolution for record types."""

from __future__ import annotations

from triggerkit.auth.types import Capability, TypeCapabilities, TypePermissions, UserContext


# Role hierarchy - higher number = more permissions
# Higher roles automatically have all permissions of lower roles
ROLE_HIERARCHY = {
    "readonly": 1,
    "user": 2,
    "manager": 3,
    "admin": 4,
}


def _role_level(role: str | None) -> int:
    """Return numeric level for a role name, 0 if unknown/None."""
    return ROLE_HIERARCHY.get(role or "", 0)


def _user_role_level(user_context: UserContext | None) -> int:
    """Return the numeric role level for the current user."""
    if not user_context or not user_context.roles:
        return 0
    return _role_level(user_context.roles[0])


def has_role_or_higher(user_context: UserContext | None, required_role: str) -> bool:
    """Check if user has the required role or a higher one.

    Unknown required roles are never satisfied.
    """
    if not user_context or not user_context.roles:
        return False
    return _user_role_level(user_context) >= ROLE_HIERARCHY.get(required_role, 999)


def capabilities_for(
    record_type: str,
    user_context: UserContext | None,
    permissions: TypePermissions | None = None,
) -> TypeCapabilities:
    """Describe what the user may do with records of a type.

    Args:
        record_type: Name of the record type
        user_context: The acting user (None grants nothing)
        permissions: Per-type role thresholds, defaults when omitted

    Returns:
        An immutable TypeCapabilities descriptor
    """
    if user_context is None:
        return TypeCapabilities.none(record_type)

    perms = permissions or TypePermissions()
    granted = {
        capability: has_role_or_higher(user_context, perms.required_role(capability))
        for capability in Capability
    }
    return TypeCapabilities(
        record_type=record_type,
        can_create=granted[Capability.CREATE],
        can_update=granted[Capability.UPDATE],
        can_delete=granted[Capability.DELETE],
        can_restore=granted[Capability.RESTORE],
    )
