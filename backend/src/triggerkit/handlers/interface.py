"""Capability interface every record-type trigger handler satisfies.

Hooks operate over the whole batch held by the handler. A business rule
iterates the batch itself rather than being called once per record.
"""

from collections.abc import Callable, Sequence
from typing import Protocol, runtime_checkable

from triggerkit.auth.types import TypeCapabilities
from triggerkit.core.types import PriorStateMapping, Record

# Either a ready mapping or a zero-argument source invoked on first access
PriorStateSource = PriorStateMapping | Callable[[], PriorStateMapping]


@runtime_checkable
class TriggerHandler(Protocol):
    """Lifecycle hooks and the phase-handling methods that sequence them."""

    records: list[Record]

    @property
    def prior_state(self) -> PriorStateMapping: ...

    def on_apply_defaults(self) -> None: ...

    def on_validate(self, prior_state: PriorStateMapping | None = None) -> None:
        """Validate the batch.

        Called with no prior state at creation time and with the
        Prior-State Mapping at update time. Implementations annotate
        records with Record.add_error and never raise for invalid data.
        """
        ...

    def on_before_insert(self) -> None: ...

    def on_before_update(self, prior_state: PriorStateMapping) -> None: ...

    def on_before_delete(self) -> None: ...

    def on_after_insert(self) -> None: ...

    def on_after_update(self, prior_state: PriorStateMapping) -> None: ...

    def on_after_delete(self) -> None: ...

    def on_after_undelete(self) -> None: ...

    def handle_before_insert(self) -> None: ...

    def handle_before_update(self, prior_state: PriorStateMapping) -> None: ...

    def handle_before_delete(self) -> None: ...

    def handle_after_insert(self) -> None: ...

    def handle_after_update(self, prior_state: PriorStateMapping) -> None: ...

    def handle_after_delete(self) -> None: ...

    def handle_after_undelete(self) -> None: ...


@runtime_checkable
class HandlerFactory(Protocol):
    """Produces a handler bound to a batch of records."""

    def create(
        self,
        records: Sequence[Record],
        *,
        capabilities: TypeCapabilities,
        prior_state: PriorStateSource | None = None,
    ) -> TriggerHandler: ...
