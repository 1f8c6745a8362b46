"""Trigger dispatch entry point."""

from triggerkit.dispatch.context import TriggerContext
from triggerkit.dispatch.dispatcher import PHASE_METHODS, dispatch

__all__ = ["PHASE_METHODS", "TriggerContext", "dispatch"]
