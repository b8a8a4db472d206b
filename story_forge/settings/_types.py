"""Type definitions and constants for Story Forge settings."""

import logging

logger = logging.getLogger(__name__)

# Log level options
LOG_LEVELS: dict[str, str] = {
    "DEBUG": "Debug",
    "INFO": "Info",
    "WARNING": "Warning",
    "ERROR": "Error",
}
