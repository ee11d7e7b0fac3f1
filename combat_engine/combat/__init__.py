"""
Combat system module for the combat engine.

This module handles the combat mechanics: damage resolution, the combat log,
the per-session battle state, turn scheduling and the battle session that
ties them together.
"""
