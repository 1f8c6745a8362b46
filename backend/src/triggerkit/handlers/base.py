"""Base trigger handler: hook ordering and the authorization gate.

Subclasses override only the hooks they need; every hook defaults to a
no-op. The handle_* methods are the phase entry points called by the
dispatcher and must not be overridden.

Call order per phase:
- handle_before_insert:  on_apply_defaults -> on_before_insert
- handle_before_update:  on_before_update
- handle_before_delete:  on_before_delete
- handle_after_insert:   [create] -> on_validate() -> on_after_insert
- handle_after_update:   [update] -> on_validate(prior) -> on_after_update
- handle_after_delete:   [delete] -> on_after_delete
- handle_after_undelete: [restore] -> on_after_undelete

[x] is the capability check; a denial raises AuthorizationError before
any hook of that phase runs.
"""

import logging
from collections.abc import Sequence

from triggerkit.auth.types import Capability, TypeCapabilities
from triggerkit.core.errors import AuthorizationError
from triggerkit.core.types import PriorStateMapping, Record
from triggerkit.handlers.interface import PriorStateSource

logger = logging.getLogger(__name__)


class BaseTriggerHandler:
    """Holds one batch of records and sequences the lifecycle hooks.

    Args:
        records: The batch; the handler keeps its own list of the same records
        capabilities: What the current actor may do with this record type
        prior_state: Prior-State Mapping, or a zero-argument callable that
            supplies it on first access
    """

    def __init__(
        self,
        records: Sequence[Record],
        *,
        capabilities: TypeCapabilities,
        prior_state: PriorStateSource | None = None,
    ):
        self.records: list[Record] = list(records)
        self.capabilities = capabilities
        self._prior_state_source = prior_state
        self._prior_state: PriorStateMapping | None = None

    @property
    def record_type(self) -> str:
        return self.capabilities.record_type

    @property
    def prior_state(self) -> PriorStateMapping:
        """Prior-State Mapping, sourced lazily on first access."""
        if self._prior_state is None:
            source = self._prior_state_source
            if source is None:
                self._prior_state = {}
            elif callable(source):
                self._prior_state = source() or {}
            else:
                self._prior_state = source
        return self._prior_state

    # -- hooks ---------------------------------------------------------------

    def on_apply_defaults(self) -> None:
        pass

    def on_validate(self, prior_state: PriorStateMapping | None = None) -> None:
        pass

    def on_before_insert(self) -> None:
        pass

    def on_before_update(self, prior_state: PriorStateMapping) -> None:
        pass

    def on_before_delete(self) -> None:
        pass

    def on_after_insert(self) -> None:
        pass

    def on_after_update(self, prior_state: PriorStateMapping) -> None:
        pass

    def on_after_delete(self) -> None:
        pass

    def on_after_undelete(self) -> None:
        pass

    # -- phase handling ------------------------------------------------------

    def handle_before_insert(self) -> None:
        self._log_phase("before insert")
        self.on_apply_defaults()
        self.on_before_insert()

    def handle_before_update(self, prior_state: PriorStateMapping) -> None:
        self._log_phase("before update")
        self.on_before_update(prior_state)

    def handle_before_delete(self) -> None:
        self._log_phase("before delete")
        self.on_before_delete()

    def handle_after_insert(self) -> None:
        self._require(Capability.CREATE)
        self._log_phase("after insert")
        self.on_validate()
        self.on_after_insert()

    def handle_after_update(self, prior_state: PriorStateMapping) -> None:
        self._require(Capability.UPDATE)
        self._log_phase("after update")
        self.on_validate(prior_state)
        self.on_after_update(prior_state)

    def handle_after_delete(self) -> None:
        self._require(Capability.DELETE)
        self._log_phase("after delete")
        self.on_after_delete()

    def handle_after_undelete(self) -> None:
        self._require(Capability.RESTORE)
        self._log_phase("after undelete")
        self.on_after_undelete()

    def _require(self, capability: Capability) -> None:
        if not self.capabilities.allows(capability):
            logger.warning(
                "%s denied %s on %s (%d records)",
                type(self).__name__,
                capability.value,
                self.record_type,
                len(self.records),
            )
            raise AuthorizationError(capability, self.record_type)

    def _log_phase(self, phase: str) -> None:
        logger.debug(
            "%s handling %s for %d %s records",
            type(self).__name__,
            phase,
            len(self.records),
            self.record_type,
        )
