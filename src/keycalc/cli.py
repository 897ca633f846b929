"""
Command-line interface for keycalc.

A diagnostic tool for replaying key sequences through the calculator
state machine and inspecting the effective settings.
"""

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from keycalc.config import Settings, configure_logging, load_settings
from keycalc.machine import CalculatorStateMachine
from keycalc.models import DIGIT_SYMBOLS, InputEvent

app = typer.Typer(
    name="keycalc",
    help="keycalc - keypad calculator core",
    add_completion=False,
)

console = Console()

# Button labels accepted besides the canonical operator symbols
OPERATOR_ALIASES = {
    "+": "+",
    "-": "-",
    "*": "*",
    "/": "/",
    "×": "*",
    "x": "*",
    "X": "*",
    "÷": "/",
}

CLEAR_LABELS = {"C", "c", "AC", "ac"}


def parse_keys(tokens: List[str]) -> List[InputEvent]:
    """
    Translate key labels into input events.

    Multi-character numeric tokens such as ``12.5`` expand into one digit
    event per character.
    """
    events = []
    for token in tokens:
        if token in OPERATOR_ALIASES:
            events.append(InputEvent.operator(OPERATOR_ALIASES[token]))
        elif token == "=":
            events.append(InputEvent.equals())
        elif token in CLEAR_LABELS:
            events.append(InputEvent.clear())
        elif token and all(c in DIGIT_SYMBOLS for c in token):
            events.extend(InputEvent.digit(c) for c in token)
        else:
            raise ValueError(f"Unknown key: {token!r}")
    return events


def _describe(event: InputEvent) -> str:
    return event.symbol if event.symbol is not None else event.kind.value


def _load(config: Optional[Path]) -> Settings:
    config_settings = load_settings(config)
    configure_logging(config_settings.log_level)
    return config_settings


# =============================================================================
# Commands
# =============================================================================

@app.command()
def trace(
    keys: List[str] = typer.Argument(..., help="Key labels, e.g. 7 + 2 x 3 ="),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML settings file"),
):
    """Replay a key sequence and show the display after each key."""
    config_settings = _load(config)

    try:
        events = parse_keys(keys)
    except ValueError as e:
        console.print(f"[red]{e}[/]")
        raise typer.Exit(1)

    machine = CalculatorStateMachine(config=config_settings)

    table = Table(title="Key Trace")
    table.add_column("#", style="dim")
    table.add_column("Key", style="cyan")
    table.add_column("Display", style="green")

    for index, event in enumerate(events, start=1):
        display = machine.handle(event)
        table.add_row(str(index), _describe(event), display)

    console.print(table)

    final = machine.current_display()
    color = "red" if final == config_settings.error_marker else "green"
    console.print(f"Display: [{color}]{final}[/]")


@app.command("settings")
def show_settings(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML settings file"),
):
    """Show the effective settings."""
    config_settings = _load(config)

    table = Table(title="Settings")
    table.add_column("Name", style="cyan")
    table.add_column("Value", style="magenta")

    for name, value in config_settings.model_dump().items():
        table.add_row(name, str(value))

    console.print(table)


if __name__ == "__main__":
    app()
