"""Authorization for triggerkit: per-type capability descriptors."""

from triggerkit.auth.permissions import (
    ROLE_HIERARCHY,
    capabilities_for,
    has_role_or_higher,
)
from triggerkit.auth.types import (
    Capability,
    TypeCapabilities,
    TypePermissions,
    UserContext,
)

__all__ = [
    "Capability",
    "ROLE_HIERARCHY",
    "TypeCapabilities",
    "TypePermissions",
    "UserContext",
    "capabilities_for",
    "has_role_or_higher",
]
