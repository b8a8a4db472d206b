"""Path constants for Story Forge settings."""

from pathlib import Path

SETTINGS_FILE = Path(__file__).parent.parent / "settings.json"

__all__ = [
    "SETTINGS_FILE",
]
