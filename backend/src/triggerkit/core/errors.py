"""Fatal error kinds raised by the trigger dispatcher.

Validation failures are not exceptions: they are FieldError annotations
on the affected records (see Record.add_error).
"""

from triggerkit.auth.types import Capability


class TriggerError(Exception):
    """Base class for errors that abort the current trigger invocation."""
    pass


class AuthorizationError(TriggerError):
    """The current actor lacks the capability required by an "after" phase."""

    def __init__(self, action: Capability, record_type: str):
        self.action = action
        self.record_type = record_type
        super().__init__(
            f"Insufficient privileges to {action.value} {record_type} records"
        )


class ConfigurationError(TriggerError):
    """A handler reference could not be resolved to a usable factory."""

    def __init__(self, reference: str, message: str):
        self.reference = reference
        super().__init__(message)
