"""Utility modules for LeadPulse."""

from .config import Settings, get_settings
from .numbers import round_half_up, percent, mean_rounded

__all__ = [
    "Settings",
    "get_settings",
    # Numeric formatting
    "round_half_up",
    "percent",
    "mean_rounded",
]
