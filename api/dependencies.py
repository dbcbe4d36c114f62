"""
FastAPI dependencies
"""

from typing import Callable
from core.config import Settings


def get_settings_factory() -> Callable[[], Settings]:
    """
    Settings are built per invocation, not shared across requests, so a
    run always sees the current environment secrets.
    """
    return Settings
