"""
User interface module for the combat engine.

Contains the console rendering of battles and the interactive player
controller.
"""
