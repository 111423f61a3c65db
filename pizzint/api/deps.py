"""FastAPI dependency injection for settings and the tick clock."""

from pizzint.core.config import Settings, settings
from pizzint.core.utils.clock import Clock, SystemClock


def get_settings() -> Settings:
    return settings


def get_clock() -> Clock:
    return SystemClock()
