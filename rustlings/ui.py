"""Coloured status lines for warnings and successes."""

import os

from rich.console import Console
from rich.text import Text


def no_emoji() -> bool:
    """Return True when the NO_EMOJI environment variable is set."""
    return "NO_EMOJI" in os.environ


def _announce(symbol: str, fallback: str, message: str, colour: str) -> None:
    line = Text(fallback if no_emoji() else symbol, style=colour)
    line.append(" ")
    line.append(message, style=colour)
    Console(highlight=False).print(line, soft_wrap=True)


def warn(message: str) -> None:
    """Print a red warning line."""
    _announce("⚠️ ", "!", message, "red")


def success(message: str) -> None:
    """Print a green success line."""
    _announce("✅", "✓", message, "green")