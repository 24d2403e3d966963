"""
config.py — Engine and application configuration.
"""
import os

from .errors import ConfigurationError

# QKD
SECURITY_THRESHOLD_PERCENT = 11.0   # standard BB84 abort threshold

# Qubit count bounds exposed by the front ends (the engine accepts any positive count)
QUBIT_COUNT_MIN = 4
QUBIT_COUNT_MAX = 50
DEFAULT_QUBIT_COUNT = 8

# Auto-play pacing (ms); never affects computed results
AUTO_INTERVAL_MS = 1000

# Logging
LOG_DIR = os.environ.get("KEYGENIE_LOG_DIR", "logs")
LOG_LEVEL = os.environ.get("KEYGENIE_LOG_LEVEL", "INFO").upper()

# HTTP API
API_HOST = os.environ.get("KEYGENIE_API_HOST", "127.0.0.1")
API_PORT = int(os.environ.get("KEYGENIE_API_PORT", "8000"))
MAX_SESSIONS = int(os.environ.get("KEYGENIE_MAX_SESSIONS", "256"))
CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get(
        "KEYGENIE_CORS_ORIGINS",
        "http://localhost:5173,http://localhost:3000,http://127.0.0.1:5173",
    ).split(",")
    if origin.strip()
]


def percent_to_probability(value: float, name: str = "value") -> float:
    """
    Converts a percentage-style setting (0–100, as the front ends expose
    noise and eavesdropping) into a probability in [0, 1].
    """
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from None
    if not 0.0 <= value <= 100.0:
        raise ConfigurationError(f"{name} must be between 0 and 100 percent, got {value}")
    return value / 100.0


def check_qubit_count(count: int) -> int:
    """Front-end bound on the qubit count (the engine itself takes any positive count)."""
    if isinstance(count, bool) or not isinstance(count, int):
        raise ConfigurationError(f"qubit count must be an integer, got {count!r}")
    if not QUBIT_COUNT_MIN <= count <= QUBIT_COUNT_MAX:
        raise ConfigurationError(
            f"qubit count must be between {QUBIT_COUNT_MIN} and {QUBIT_COUNT_MAX}, got {count}"
        )
    return count
