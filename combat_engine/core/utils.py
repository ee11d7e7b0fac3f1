"""
Utilities module for the combat engine.

Provides console printing with rich formatting, the random source factory,
and small numeric helpers shared by the combat formulas.
"""

import random
from typing import Any

from rich.console import Console
from rich.rule import Rule
from typing_extensions import TypeVar

_console = Console(markup=True, width=120, force_terminal=True, force_jupyter=False)

_Number = TypeVar("_Number", int, float)


def cprint(*args: Any, **kwargs: Any) -> None:
    """
    Custom print function to handle colored output.

    Args:
        *args: Arguments to pass to the console print function.
        **kwargs: Keyword arguments to pass to the console print function.

    """
    _console.print(*args, **kwargs)


def crule(*args: Any, **kwargs: Any) -> None:
    """
    Custom print function to handle colored output with a rule.

    Args:
        *args: Arguments to pass to the Rule constructor.
        **kwargs: Keyword arguments to pass to the Rule constructor.

    """
    _console.print(Rule(*args, **kwargs))


def ccapture(content: Any) -> str:
    """
    Captures console output as a string.

    Args:
        content (Any): The content to capture.

    Returns:
        str: The captured output as a string.

    """
    with _console.capture() as capture:
        _console.print(content, markup=True, end="")
    return capture.get()


def make_rng(seed: int | None = None) -> random.Random:
    """
    Builds the random source used by a battle session.

    Args:
        seed (int | None): A seed for reproducible battles. Without one the
            operating system entropy source is used.

    Returns:
        random.Random: The random source.

    """
    if seed is None:
        return random.SystemRandom()
    return random.Random(seed)


def clamp(value: _Number, lower: _Number, upper: _Number) -> _Number:
    """Restricts value to the closed interval [lower, upper]."""
    return max(lower, min(upper, value))


def make_bar(current: int, maximum: int, length: int = 10, color: str = "white") -> str:
    """
    Creates a visual progress bar representation.

    Args:
        current (int): The current value.
        maximum (int): The maximum value.
        length (int): The length of the bar in characters. Defaults to 10.
        color (str): The color for the filled portion. Defaults to "white".

    Returns:
        str: A formatted progress bar string.

    """
    if maximum <= 0:
        filled = 0
    else:
        filled = int((max(0, current) / maximum) * length)
    filled = min(filled, length)
    empty = length - filled
    bar = f"[{color}]" + "▮" * filled
    if empty > 0:
        bar += "[dim white]" + "▯" * empty + "[/]"
    bar += "[/]"
    return bar
