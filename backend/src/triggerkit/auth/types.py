"""Type definitions for record-type authorization."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Capability(Enum):
    """An action an actor may be permitted to perform on a record type."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    RESTORE = "restore"


@dataclass
class UserContext:
    """Identity of the actor performing the write.

    Attributes:
        user_id: The acting user's ID
        tenant_id: The tenant the user is acting in
        roles: Role names; the first entry is the primary role
    """

    user_id: str | None = None
    tenant_id: str | None = None
    roles: list[str] = field(default_factory=list)


@dataclass
class TypePermissions:
    """Minimum role required for each capability on a record type."""

    create: str = "user"
    update: str = "user"
    delete: str = "manager"
    restore: str = "manager"

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "TypePermissions":
        """Create TypePermissions from a YAML dict, keeping defaults for omitted keys."""
        data = data or {}
        defaults = cls()
        return cls(
            create=data.get("create", defaults.create),
            update=data.get("update", defaults.update),
            delete=data.get("delete", defaults.delete),
            restore=data.get("restore", defaults.restore),
        )

    def required_role(self, capability: Capability) -> str:
        return getattr(self, capability.value)


@dataclass(frozen=True)
class TypeCapabilities:
    """What the current actor may do with records of one type.

    Immutable for the lifetime of a handler; queried by each "after" phase.
    """

    record_type: str
    can_create: bool = False
    can_update: bool = False
    can_delete: bool = False
    can_restore: bool = False

    def allows(self, capability: Capability) -> bool:
        return getattr(self, f"can_{capability.value}")

    @classmethod
    def full(cls, record_type: str) -> "TypeCapabilities":
        return cls(record_type, True, True, True, True)

    @classmethod
    def none(cls, record_type: str) -> "TypeCapabilities":
        return cls(record_type)
