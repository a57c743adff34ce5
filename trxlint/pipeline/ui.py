"""Shared Rich console and report helpers for trxlint commands.

Commands print through ``console`` so every report uses one theme. Markup
styles defined here: ``info``, ``warning``, ``error``, ``success``,
``rule``, ``path``, ``dim``.
"""

import sys

from rich.console import Console
from rich.panel import Panel
from rich.text import Text
from rich.theme import Theme

TRXLINT_THEME = Theme({
    "info": "bold cyan",
    "warning": "bold yellow",
    "error": "bold red",
    "success": "bold green",
    "rule": "bold magenta",
    "path": "bold cyan",
    "dim": "dim white",
})

console = Console(
    theme=TRXLINT_THEME,
    force_terminal=sys.stdout.isatty()
)

# Panel outcome -> (title style, border style)
_PANEL_STYLES = {
    "error": ("bold red", "red"),
    "warning": ("bold yellow", "yellow"),
    "success": ("bold green", "green"),
}


def print_header(title: str) -> None:
    console.rule(f"[bold]{title}[/bold]")


def print_warning(msg: str) -> None:
    console.print(f"[warning]WARNING:[/warning] {msg}")


def print_success(msg: str) -> None:
    console.print(f"[success]OK:[/success] {msg}")


def print_status_panel(status: str, message: str, detail: str, outcome: str = "success") -> None:
    """Print the closing summary of a run as a bordered panel.

    ``outcome`` is ``error``, ``warning`` or ``success`` and picks the colour.
    """
    text_style, border_style = _PANEL_STYLES[outcome]
    body = Text.assemble(
        (f"STATUS: [{status}]\n", text_style),
        (f"{message}\n", border_style),
        (detail, border_style),
    )
    console.print(Panel(body, border_style=border_style, expand=False))
