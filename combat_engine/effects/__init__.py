"""
Effects module for the combat engine.

Contains the timed status effects and the ledger that tracks them.
"""

from .ledger import StatusLedger
from .status_effect import STATUS_RULES, StatusEffect, StatusRule, TickResult

__all__ = [
    # Import from ledger.py
    "StatusLedger",
    # Import from status_effect.py
    "STATUS_RULES",
    "StatusEffect",
    "StatusRule",
    "TickResult",
]
