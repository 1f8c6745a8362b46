"""Trigger dispatcher: routes one lifecycle event to a record-type handler."""

import logging
from collections.abc import Callable

from triggerkit.core.types import Operation, Phase, Record
from triggerkit.dispatch.context import TriggerContext
from triggerkit.handlers.interface import TriggerHandler
from triggerkit.handlers.registry import HandlerReference, HandlerRegistry

logger = logging.getLogger(__name__)


def _before_insert(handler: TriggerHandler) -> None:
    handler.handle_before_insert()


def _before_update(handler: TriggerHandler) -> None:
    handler.handle_before_update(handler.prior_state)


def _before_delete(handler: TriggerHandler) -> None:
    handler.handle_before_delete()


def _after_insert(handler: TriggerHandler) -> None:
    handler.handle_after_insert()


def _after_update(handler: TriggerHandler) -> None:
    handler.handle_after_update(handler.prior_state)


def _after_delete(handler: TriggerHandler) -> None:
    handler.handle_after_delete()


def _after_undelete(handler: TriggerHandler) -> None:
    handler.handle_after_undelete()


# (phase, operation) -> phase-handling call. Before-undelete is not an event.
PHASE_METHODS: dict[tuple[Phase, Operation], Callable[[TriggerHandler], None]] = {
    (Phase.BEFORE, Operation.INSERT): _before_insert,
    (Phase.BEFORE, Operation.UPDATE): _before_update,
    (Phase.BEFORE, Operation.DELETE): _before_delete,
    (Phase.AFTER, Operation.INSERT): _after_insert,
    (Phase.AFTER, Operation.UPDATE): _after_update,
    (Phase.AFTER, Operation.DELETE): _after_delete,
    (Phase.AFTER, Operation.UNDELETE): _after_undelete,
}


def _source_batch(context: TriggerContext) -> list[Record]:
    # Deleted records only exist as prior state
    if context.is_delete:
        return list((context.old_map or {}).values())
    return list(context.new)


def dispatch(
    handler_ref: HandlerReference, context: TriggerContext
) -> TriggerHandler | None:
    """Run the phase-handling method matching the context's event flags.

    Args:
        handler_ref: Handler class or name, resolved through HandlerRegistry
        context: Event flags and record sets for this invocation

    Returns:
        The handler that ran, or None if the flags matched no known event

    Raises:
        ConfigurationError: If the handler reference cannot be resolved
        AuthorizationError: If an "after" phase is denied; propagated unchanged
    """
    records = _source_batch(context)
    handler = HandlerRegistry.create(
        handler_ref,
        records,
        capabilities=context.capabilities,
        prior_state=lambda: context.old_map or {},
    )

    phase, operation = context.phase, context.operation
    method = PHASE_METHODS.get((phase, operation)) if phase and operation else None
    if method is None:
        logger.debug(
            "No phase matches trigger flags for %s; nothing dispatched",
            context.capabilities.record_type,
        )
        return None

    logger.debug(
        "Dispatching %s %s for %d %s records to %s",
        phase.value,
        operation.value,
        len(records),
        context.capabilities.record_type,
        type(handler).__name__,
    )
    method(handler)
    return handler
