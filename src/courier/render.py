"""Rich presentation of unit state snapshots.

These helpers are pure: they turn state into renderables and never produce
messages or effects. The router does not call them.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from courier.descriptors import Message
from courier.router import Router


def pending_table(tag: str, listing: Iterable[tuple[int, str]]) -> Table:
    """Table of ``(id, label)`` pending requests for service ``tag``."""
    table = Table(title=f"{tag}: pending requests", min_width=40)
    table.add_column("id", justify="right", style="cyan")
    table.add_column("label", style="green")
    rows = list(listing)
    for request_id, label in rows:
        table.add_row(str(request_id), escape(label))
    if not rows:
        table.caption = "(none)"
    return table


def state_tree(router: Router) -> Tree:
    """One branch per registered unit with its presented state."""
    root = Tree("[bold]aggregate state[/bold]")
    for descriptor in router.registry.descriptors():
        kind = "service" if descriptor.is_service else "component"
        branch = root.add(f"[bold]{descriptor.tag}[/bold] [dim]({kind})[/dim]")
        branch.add(Text(repr(router.view(descriptor.tag))))
    return root


def describe_message(message: Message) -> str:
    return f"{message.tag} <- {message.body!r}"


class Renderer:
    """CLI renderer using Rich for terminal output."""

    def __init__(self, console: Console | None = None) -> None:
        self.console: Console = console or Console()

    def error(self, message: str) -> None:
        self.console.print(f"[bold red]Error:[/bold red] {message}")

    def dispatched(self, message: Message, effects: list[Any]) -> None:
        self.console.print(f"[bold cyan]dispatch[/bold cyan] {escape(describe_message(message))}")
        for effect in effects:
            self.console.print(f"  [yellow]effect[/yellow] {escape(repr(effect))}")

    def show(self, renderable: Any) -> None:
        self.console.print(renderable)
