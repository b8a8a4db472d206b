"""Settings package for Story Forge.

- _paths.py: Path constants for the settings file
- _types.py: Choice tables used by validation
- _validation.py: Settings validation functions
- _settings.py: Main Settings dataclass
"""

from story_forge.settings._paths import SETTINGS_FILE
from story_forge.settings._settings import Settings
from story_forge.settings._types import LOG_LEVELS

__all__ = [
    "LOG_LEVELS",
    "SETTINGS_FILE",
    "Settings",
]
