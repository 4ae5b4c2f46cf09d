"""
Commands Package.

This package contains all command classes implementing the Command pattern
for undo/redo functionality. Commands encapsulate actions on calendar
definitions and on the world clock.
"""
