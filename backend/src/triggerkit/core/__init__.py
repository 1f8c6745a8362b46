"""Core record types and errors."""

from triggerkit.core.errors import AuthorizationError, ConfigurationError, TriggerError
from triggerkit.core.types import FieldError, Operation, Phase, PriorStateMapping, Record

__all__ = [
    "AuthorizationError",
    "ConfigurationError",
    "FieldError",
    "Operation",
    "Phase",
    "PriorStateMapping",
    "Record",
    "TriggerError",
]
