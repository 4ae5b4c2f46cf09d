"""
Almanac.

A time engine for invented worlds: custom calendars, linear instants,
calendar arithmetic and a small expression language for moving time
forward.
"""

__version__ = "0.3.0"
