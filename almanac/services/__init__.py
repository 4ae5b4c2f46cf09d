"""
Services Package.

SQLite persistence for calendars and world clocks.
"""
