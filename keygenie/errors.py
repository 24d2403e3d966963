"""
errors.py — Exception types raised by the KeyGenie engine.
"""


class KeyGenieError(Exception):
    """Base class for every engine error."""


class ConfigurationError(KeyGenieError, ValueError):
    """Qubit count or probability settings are outside their valid range."""


class SessionStateError(KeyGenieError):
    """An operation was requested that the session's current phase cannot serve."""
