"""triggerkit — bulk record trigger dispatch.

Routes persistence lifecycle events for a batch of same-typed records to
a per-record-type handler, in a fixed hook order and behind a capability
check for every "after" phase.

Usage:
    from triggerkit import BaseTriggerHandler, TriggerContext, dispatch, trigger_handler

    @trigger_handler
    class OpportunityTriggerHandler(BaseTriggerHandler):
        def on_validate(self, prior_state=None):
            for record in self.records:
                if not record["Amount"]:
                    record.add_error("Amount is required", field="Amount")

    dispatch("OpportunityTriggerHandler", context)
"""

from triggerkit.auth import Capability, TypeCapabilities, UserContext, capabilities_for
from triggerkit.core import (
    AuthorizationError,
    ConfigurationError,
    FieldError,
    Operation,
    Phase,
    Record,
    TriggerError,
)
from triggerkit.dispatch import TriggerContext, dispatch
from triggerkit.handlers import (
    BaseTriggerHandler,
    HandlerRegistry,
    TriggerHandler,
    trigger_handler,
)

__version__ = "0.1.0"

__all__ = [
    "AuthorizationError",
    "BaseTriggerHandler",
    "Capability",
    "ConfigurationError",
    "FieldError",
    "HandlerRegistry",
    "Operation",
    "Phase",
    "Record",
    "TriggerContext",
    "TriggerError",
    "TriggerHandler",
    "TypeCapabilities",
    "UserContext",
    "capabilities_for",
    "dispatch",
    "trigger_handler",
]
