"""Trigger-invocation context passed to the dispatcher."""

from dataclasses import dataclass, field

from triggerkit.auth.types import TypeCapabilities
from triggerkit.core.types import Operation, Phase, Record


@dataclass
class TriggerContext:
    """Event flags and record sets for one trigger invocation.

    Attributes:
        capabilities: What the current actor may do with this record type
        is_before / is_after: Which side of the write is firing
        is_insert / is_update / is_delete / is_undelete: Which operation
        new: The new-record batch (insert, update, undelete)
        old_map: Prior state keyed by record id (update, delete)
    """

    capabilities: TypeCapabilities
    is_before: bool = False
    is_after: bool = False
    is_insert: bool = False
    is_update: bool = False
    is_delete: bool = False
    is_undelete: bool = False
    new: list[Record] = field(default_factory=list)
    old_map: dict[str, Record] | None = None

    @classmethod
    def for_event(
        cls,
        phase: Phase,
        operation: Operation,
        *,
        capabilities: TypeCapabilities,
        new: list[Record] | None = None,
        old_map: dict[str, Record] | None = None,
    ) -> "TriggerContext":
        """Build a context with exactly one phase and one operation flag set."""
        return cls(
            capabilities=capabilities,
            is_before=phase is Phase.BEFORE,
            is_after=phase is Phase.AFTER,
            is_insert=operation is Operation.INSERT,
            is_update=operation is Operation.UPDATE,
            is_delete=operation is Operation.DELETE,
            is_undelete=operation is Operation.UNDELETE,
            new=list(new or []),
            old_map=old_map,
        )

    @property
    def phase(self) -> Phase | None:
        """The single phase flagged, or None if the flags are inconsistent."""
        if self.is_before == self.is_after:
            return None
        return Phase.BEFORE if self.is_before else Phase.AFTER

    @property
    def operation(self) -> Operation | None:
        """The single operation flagged, or None if zero or several are set."""
        flagged = [
            op
            for op, flag in (
                (Operation.INSERT, self.is_insert),
                (Operation.UPDATE, self.is_update),
                (Operation.DELETE, self.is_delete),
                (Operation.UNDELETE, self.is_undelete),
            )
            if flag
        ]
        if len(flagged) != 1:
            return None
        return flagged[0]
