"""
Core Package.

Domain model and the calendar engine. Nothing in here touches the
database or the terminal.
"""
