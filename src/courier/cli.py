"""Typer CLI for courier."""

from __future__ import annotations

import json

import typer

from courier.builtin import demo
from courier.config import get_settings
from courier.errors import ConfigurationError
from courier.framework import CourierFramework
from courier.logging_utils import configure_logging
from courier.pending import Resolve, pending
from courier.render import Renderer, pending_table, state_tree

app = typer.Typer(name="courier", help="Route messages, compose effects, call services.", add_completion=False)


def _load_framework(*, with_demo: bool) -> CourierFramework:
    settings = get_settings()
    configure_logging(profile=settings.log_profile, level=settings.log_level)
    framework = CourierFramework(settings)
    framework.load_plugins([demo] if with_demo else [])
    return framework


@app.command("demo")
def run_demo(
    first: int = typer.Option(42, "--first", help="Value resolving the first prompt"),
    second: int = typer.Option(7, "--second", help="Value resolving the second prompt"),
) -> None:
    """Queue two prompt requests, resolve them out of order and show the state."""

    framework = _load_framework(with_demo=True)
    router = framework.create_router()
    renderer = Renderer()

    for label in ("first", "second"):
        message = demo.ask(label)
        renderer.dispatched(message, router.dispatch(message))
    renderer.show(pending_table(demo.PROMPT, pending(router.read(demo.PROMPT))))

    # resolve newest first: id 1 leaves id 0 pending
    for request_id, value in ((1, second), (0, first)):
        message = router.registry.get_or_raise(demo.PROMPT).lift(Resolve(request_id, value))
        effects = router.dispatch(message)
        renderer.dispatched(message, effects)
        for effect in effects:
            framework.execute_effect(effect, lambda _message: None)
        renderer.show(pending_table(demo.PROMPT, pending(router.read(demo.PROMPT))))

    renderer.show(state_tree(router))


@app.command("units")
def list_units(
    with_demo: bool = typer.Option(False, "--demo", help="Include the builtin demo units"),
) -> None:
    """Show units contributed by loaded plugins."""

    framework = _load_framework(with_demo=with_demo)
    try:
        registry = framework.build_registry()
    except ConfigurationError as exc:
        Renderer().error(str(exc))
        raise typer.Exit(1) from exc
    if not len(registry):
        typer.echo("(no units registered)")
        return
    for descriptor in registry.descriptors():
        kind = "service" if descriptor.is_service else "component"
        typer.echo(f"{descriptor.tag}: {kind}")


@app.command("settings")
def show_settings() -> None:
    """Print effective settings as JSON."""

    typer.echo(json.dumps(get_settings().model_dump(), indent=2))


def main() -> None:
    framework = CourierFramework()
    framework.load_plugins()
    framework.register_cli_commands(app)
    app()
