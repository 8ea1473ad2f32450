"""
Domain-specific exception hierarchy for the shop calendar engine.
"""


class ShopCalendarError(Exception):
    """Base class for all application-level errors."""


class InvalidFormatError(ShopCalendarError, ValueError):
    """Raised when a time or date string cannot be parsed."""


class TransactionDataError(ShopCalendarError, ValueError):
    """Raised when a payment record is structurally malformed."""


class ConfigError(ShopCalendarError):
    """Raised when configuration or fixture data cannot be loaded."""
