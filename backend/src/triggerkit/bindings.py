"""Load record-type to handler bindings from YAML.

Example triggers.yaml:

    triggers:
      Opportunity:
        handler: OpportunityTriggerHandler
        module: myapp.handlers.opportunity
        abbreviation: OPP
        permissions:
          delete: admin
"""

import importlib
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from triggerkit.auth.types import TypePermissions
from triggerkit.core.errors import ConfigurationError
from triggerkit.handlers.registry import HandlerRegistry, factory_name

logger = logging.getLogger(__name__)


@dataclass
class HandlerBinding:
    """Binds one record type to the handler that processes its events.

    Attributes:
        record_type: Record type name
        handler: Handler or factory name resolved through HandlerRegistry
        module: Optional module imported to register the handler
        abbreviation: Id prefix used by the record store (defaults to the
            first three letters of the type, uppercased)
        permissions: Role thresholds for the type's capabilities
    """

    record_type: str
    handler: str
    module: str | None = None
    abbreviation: str = ""
    permissions: TypePermissions = field(default_factory=TypePermissions)

    def __post_init__(self) -> None:
        if not self.abbreviation:
            self.abbreviation = self.record_type[:3].upper()

    @property
    def factory_name(self) -> str:
        return factory_name(self.handler)

    @classmethod
    def from_dict(cls, record_type: str, data: dict[str, Any] | str) -> "HandlerBinding":
        """Create a HandlerBinding from its YAML dict.

        Raises:
            ConfigurationError: If the binding is not a handler name or a
                mapping, names no handler, or has non-mapping permissions
        """
        if isinstance(data, str):
            data = {"handler": data}
        if data is not None and not isinstance(data, dict):
            raise ConfigurationError(
                record_type,
                f"Binding for '{record_type}' must be a handler name or a mapping, "
                f"got {type(data).__name__}",
            )
        if not data or not isinstance(data.get("handler"), str) or not data["handler"]:
            raise ConfigurationError(
                record_type, f"Binding for '{record_type}' must name a handler"
            )
        permissions = data.get("permissions")
        if permissions is not None and not isinstance(permissions, dict):
            raise ConfigurationError(
                record_type,
                f"Permissions for '{record_type}' must be a mapping of "
                f"capability to role, got {type(permissions).__name__}",
            )
        return cls(
            record_type=record_type,
            handler=data["handler"],
            module=data.get("module"),
            abbreviation=data.get("abbreviation", ""),
            permissions=TypePermissions.from_dict(permissions),
        )


def load_bindings(path: Path) -> dict[str, HandlerBinding]:
    """Parse a bindings file into HandlerBindings keyed by record type.

    A binding may be a full mapping or just the handler name.

    Raises:
        ConfigurationError: If the file is malformed or a binding has no handler
    """
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(str(path), f"{path}: invalid YAML: {e}") from e

    triggers = data.get("triggers") if isinstance(data, dict) else None
    if not isinstance(triggers, dict):
        raise ConfigurationError(str(path), f"{path}: expected a 'triggers' mapping")

    bindings = {
        record_type: HandlerBinding.from_dict(record_type, entry)
        for record_type, entry in triggers.items()
    }
    logger.debug("Loaded %d trigger bindings from %s", len(bindings), path)
    return bindings


def import_binding_modules(bindings: dict[str, HandlerBinding]) -> None:
    """Import each binding's declared module so its handlers register.

    Raises:
        ConfigurationError: If a declared module cannot be imported
    """
    for binding in bindings.values():
        if not binding.module:
            continue
        try:
            importlib.import_module(binding.module)
        except ImportError as e:
            raise ConfigurationError(
                binding.module,
                f"Cannot import handler module '{binding.module}' "
                f"for {binding.record_type}: {e}",
            ) from e


def check_bindings(bindings: dict[str, HandlerBinding]) -> list[HandlerBinding]:
    """Return the bindings whose handler factory is not registered."""
    return [
        binding
        for binding in bindings.values()
        if not HandlerRegistry.is_registered(binding.handler)
    ]
