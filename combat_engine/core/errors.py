"""
Error definitions for the combat engine.

Content and configuration problems are raised as `ConfigurationError` while
data is loaded, so a battle never starts on broken data. Illegal requests
made during a battle raise `InvalidAction`, which the scheduler turns into a
forfeited turn.
"""

from typing import Any


class CombatEngineError(Exception):
    """Base class of every error raised by the engine."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context: dict[str, Any] = context or {}

    def __str__(self) -> str:
        if not self.context:
            return self.message
        context_str = " ".join(f"{k}={v}" for k, v in self.context.items())
        return f"{self.message} [{context_str}]"


class ConfigurationError(CombatEngineError):
    """Raised when content or settings data is malformed."""


class InvalidAction(CombatEngineError):
    """Raised when an action references an unknown ability or an invalid target."""
