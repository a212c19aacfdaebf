"""
Recurring event generation engine.

Turns recurring event templates into concrete, non-duplicated calendar events.
"""
__version__ = "0.1.0"
