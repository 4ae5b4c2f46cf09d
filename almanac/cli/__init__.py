"""
Command-line tools for managing calendars and world clocks.

Run as modules:
    python -m almanac.cli.calendar --help
    python -m almanac.cli.time --help
"""
