"""RecordStore Protocol - the interface trigger-aware stores implement."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from triggerkit.core.types import Record


@dataclass
class SaveResult:
    """Outcome of one batch write.

    Attributes:
        saved: Records committed by the operation
        rejected: Records not committed because of error annotations
    """

    saved: list[Record] = field(default_factory=list)
    rejected: list[Record] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.rejected

    def errors(self) -> list[dict[str, Any]]:
        """Error annotations of rejected records, in batch order."""
        return [
            {
                "id": record.id,
                "errors": [e.to_dict() for e in record.errors],
            }
            for record in self.rejected
            if record.errors
        ]


@runtime_checkable
class RecordStore(Protocol):
    """Persistence layer that raises trigger events around its writes.

    Every write takes a batch of records of one type and returns a
    SaveResult. Field-level error annotations never raise; trigger errors
    (authorization, configuration) propagate after rolling back.
    """

    def get(
        self, record_type: str, id: str, include_deleted: bool = False
    ) -> Record | None: ...

    def insert(self, records: Sequence[Record]) -> SaveResult: ...

    def update(self, records: Sequence[Record]) -> SaveResult: ...

    def delete(self, records: Sequence[Record]) -> SaveResult: ...

    def undelete(self, records: Sequence[Record]) -> SaveResult: ...
