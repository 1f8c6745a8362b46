"""Core types for triggerkit.

Defines the data passed through the trigger lifecycle:
- Record: one entity instance of a single record type
- FieldError: a field-level error annotation attached to a Record
- Operation / Phase: the lifecycle event being dispatched
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Operation(Enum):
    """The persistence operation that raised the trigger event."""

    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"
    UNDELETE = "undelete"


class Phase(Enum):
    """Whether the event fires before or after the write."""

    BEFORE = "before"
    AFTER = "after"


@dataclass(frozen=True)
class FieldError:
    """A validation annotation rejecting a record from persistence.

    Attributes:
        message: Human-readable message
        field: Field name this error relates to, or None for record-level errors
    """

    message: str
    field: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, "field": self.field}


@dataclass
class Record:
    """A single record under operation.

    Records are shared by reference between the caller and any handler
    holding them, so field changes made by hooks are visible to the
    persistence layer. Reading a field that is not set returns None.

    Attributes:
        type: Record type name (e.g., "Opportunity")
        fields: Field values keyed by field name
        id: Identifier once persisted, None before creation
        errors: Field-level error annotations added during validation
    """

    type: str
    fields: dict[str, Any] = field(default_factory=dict)
    id: str | None = None
    errors: list[FieldError] = field(default_factory=list)

    def __getitem__(self, name: str) -> Any:
        return self.fields.get(name)

    def __setitem__(self, name: str, value: Any) -> None:
        self.fields[name] = value

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)

    def add_error(self, message: str, field: str | None = None) -> None:
        """Annotate this record so the persistence layer will not commit it.

        Adding an error never interrupts processing of the rest of the batch.
        """
        self.errors.append(FieldError(message=message, field=field))

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def snapshot(self) -> "Record":
        """Return an independent copy suitable for use as prior state."""
        return Record(type=self.type, fields=dict(self.fields), id=self.id)


# Identifier -> record as it existed before the current change
PriorStateMapping = Mapping[str, Record]
