"""
Exceptions raised by the journey map engine.
"""


class JourneyMapError(Exception):
    """Base exception for journey map loading and normalization errors."""
    pass
