"""Handler CLI commands — list and check trigger bindings."""

import sys
from pathlib import Path

import click

from triggerkit.bindings import check_bindings, import_binding_modules, load_bindings
from triggerkit.config import TriggerConfig
from triggerkit.core.errors import ConfigurationError
from triggerkit.handlers.registry import HandlerRegistry

bindings_option = click.option(
    "--bindings",
    "bindings_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Bindings YAML file (defaults to TRIGGERKIT_BINDINGS or ./triggers.yaml).",
)


def _load(bindings_path: Path | None):
    """Load bindings and import their handler modules, exiting on failure."""
    path = bindings_path or TriggerConfig.from_env().bindings_path
    if not path.exists():
        click.echo(f"Error: bindings file not found: {path}", err=True)
        sys.exit(1)

    # Handler modules are commonly resolved relative to the project root
    cwd = str(Path.cwd())
    if cwd not in sys.path:
        sys.path.insert(0, cwd)

    try:
        bindings = load_bindings(path)
        import_binding_modules(bindings)
    except ConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    return path, bindings


@click.group()
def handlers():
    """Trigger handler commands."""
    pass


@handlers.command("list")
@bindings_option
def list_handlers(bindings_path: Path | None):
    """List record types and the handler factory each resolves to."""
    path, bindings = _load(bindings_path)
    click.echo(f"Bindings from {path}:")
    for record_type, binding in sorted(bindings.items()):
        status = "ok" if HandlerRegistry.is_registered(binding.handler) else "MISSING"
        click.echo(f"  {record_type}: {binding.factory_name} [{status}]")


@handlers.command()
@bindings_option
def check(bindings_path: Path | None):
    """Verify every binding resolves to a registered handler factory."""
    _, bindings = _load(bindings_path)
    missing = check_bindings(bindings)
    if missing:
        click.echo(f"{len(missing)} unresolved binding(s):", err=True)
        for binding in missing:
            click.echo(
                f"  {binding.record_type}: {binding.factory_name} is not registered",
                err=True,
            )
        sys.exit(1)
    click.echo(f"All handlers resolved ({len(bindings)} binding(s)).")
