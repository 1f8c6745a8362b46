"""Handler registry for triggerkit.

Resolves a handler reference to the factory that builds handler
instances. References follow a naming convention: the factory for
handler "OpportunityTriggerHandler" is registered as
"OpportunityTriggerHandlerFactory". A reference that already ends with
the factory suffix names the factory directly.

Handlers must be registered at process start, usually with the
@trigger_handler decorator, so that bindings can be checked for
completeness before any event is dispatched.
"""

import logging
from collections.abc import Callable, Sequence
from typing import Any

from triggerkit.auth.types import TypeCapabilities
from triggerkit.core.errors import ConfigurationError
from triggerkit.core.types import Record
from triggerkit.handlers.interface import HandlerFactory, PriorStateSource, TriggerHandler

logger = logging.getLogger(__name__)

FACTORY_SUFFIX = "Factory"

HandlerReference = str | type


def factory_name(reference: HandlerReference) -> str:
    """Return the registered factory name for a handler reference.

    The suffix is appended exactly once:
        factory_name("AccountHandler")        -> "AccountHandlerFactory"
        factory_name("AccountHandlerFactory") -> "AccountHandlerFactory"
    """
    name = reference if isinstance(reference, str) else reference.__name__
    if name.endswith(FACTORY_SUFFIX):
        return name
    return name + FACTORY_SUFFIX


class ClassFactory:
    """Factory that constructs a handler class directly."""

    def __init__(self, handler_cls: Callable[..., Any]):
        self.handler_cls = handler_cls

    def create(
        self,
        records: Sequence[Record],
        *,
        capabilities: TypeCapabilities,
        prior_state: PriorStateSource | None = None,
    ) -> TriggerHandler:
        return self.handler_cls(
            records, capabilities=capabilities, prior_state=prior_state
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ClassFactory):
            return NotImplemented
        return self.handler_cls is other.handler_cls

    def __hash__(self) -> int:
        return hash(self.handler_cls)

    def __repr__(self) -> str:
        cls = self.handler_cls
        return f"ClassFactory({cls.__module__}.{cls.__qualname__})"


class HandlerRegistry:
    """Registry of handler factories keyed by factory name.

    Example:
        @trigger_handler
        class OpportunityTriggerHandler(BaseTriggerHandler):
            ...

        factory = HandlerRegistry.resolve("OpportunityTriggerHandler")
    """

    _factories: dict[str, Any] = {}

    @classmethod
    def register_factory(cls, name: str, factory: HandlerFactory) -> None:
        """Register a factory under a handler or factory name.

        Idempotent - re-registering the same name is a no-op. A different
        factory offered under a taken name is ignored with a warning.

        Raises:
            ConfigurationError: If a factory class is passed instead of an
                instance
        """
        key = factory_name(name)
        if isinstance(factory, type):
            raise ConfigurationError(
                key,
                f"'{key}' was registered as the class {factory.__name__}; "
                "register a factory instance",
            )
        existing = cls._factories.get(key)
        if existing is not None:
            if existing != factory:
                logger.warning(
                    "Trigger handler factory %s already registered as %r; ignoring %r",
                    key,
                    existing,
                    factory,
                )
            return
        cls._factories[key] = factory
        logger.debug("Registered trigger handler factory %s", key)

    @classmethod
    def register(cls, handler_cls: type) -> None:
        """Register a handler class under "<ClassName>Factory"."""
        cls.register_factory(handler_cls.__name__, ClassFactory(handler_cls))

    @classmethod
    def resolve(cls, reference: HandlerReference) -> HandlerFactory:
        """Resolve the factory for a handler reference.

        Raises:
            ConfigurationError: If no factory is registered under the
                conventional name, or the entry has no create() operation
        """
        key = factory_name(reference)
        if key not in cls._factories:
            raise ConfigurationError(
                key,
                f"Trigger handler factory '{key}' is not registered. "
                "Handlers must be explicitly registered at application startup.",
            )
        factory = cls._factories[key]
        if not callable(getattr(factory, "create", None)):
            raise ConfigurationError(
                key, f"'{key}' does not provide a create() operation"
            )
        return factory

    @classmethod
    def create(
        cls,
        reference: HandlerReference,
        records: Sequence[Record],
        *,
        capabilities: TypeCapabilities,
        prior_state: PriorStateSource | None = None,
    ) -> TriggerHandler:
        """Resolve the factory and build a handler bound to the records.

        Raises:
            ConfigurationError: If resolution fails or the factory produces
                something that is not a TriggerHandler
        """
        factory = cls.resolve(reference)
        handler = factory.create(
            records, capabilities=capabilities, prior_state=prior_state
        )
        if not isinstance(handler, TriggerHandler):
            key = factory_name(reference)
            raise ConfigurationError(
                key,
                f"'{key}' produced {type(handler).__name__}, "
                "which does not implement TriggerHandler",
            )
        return handler

    @classmethod
    def is_registered(cls, reference: HandlerReference) -> bool:
        return factory_name(reference) in cls._factories

    @classmethod
    def list_registered(cls) -> list[str]:
        """List all registered factory names."""
        return sorted(cls._factories.keys())

    @classmethod
    def clear(cls) -> None:
        """Clear all registrations. Primarily for testing."""
        cls._factories.clear()


def trigger_handler(cls: type) -> type:
    """Class decorator registering a handler with the HandlerRegistry.

    Usage:
        @trigger_handler
        class OpportunityTriggerHandler(BaseTriggerHandler):
            def on_apply_defaults(self):
                ...
    """
    HandlerRegistry.register(cls)
    return cls
