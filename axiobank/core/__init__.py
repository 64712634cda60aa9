"""
Core module for the AxioBank back office.

Exports the main configuration component.
"""

from axiobank.core.config import settings

__all__ = [
    # Config
    "settings",
]
