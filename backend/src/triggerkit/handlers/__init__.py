"""Record-type trigger handlers.

Usage:
    from triggerkit.handlers import BaseTriggerHandler, trigger_handler

    @trigger_handler
    class OpportunityTriggerHandler(BaseTriggerHandler):
        def on_apply_defaults(self):
            for record in self.records:
                if not record["Stage"]:
                    record["Stage"] = "Prospecting"
"""

from triggerkit.handlers.base import BaseTriggerHandler
from triggerkit.handlers.interface import HandlerFactory, PriorStateSource, TriggerHandler
from triggerkit.handlers.registry import (
    FACTORY_SUFFIX,
    ClassFactory,
    HandlerRegistry,
    factory_name,
    trigger_handler,
)

__all__ = [
    "BaseTriggerHandler",
    "ClassFactory",
    "FACTORY_SUFFIX",
    "HandlerFactory",
    "HandlerRegistry",
    "PriorStateSource",
    "TriggerHandler",
    "factory_name",
    "trigger_handler",
]
