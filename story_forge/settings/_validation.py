"""Validation functions for Settings."""

import logging
from typing import TYPE_CHECKING

from story_forge.memory.locations import FREE_CHANNELS, SourcingChannel
from story_forge.settings._types import LOG_LEVELS
from story_forge.utils.validation import validate_choice, validate_day_rates, validate_not_empty

if TYPE_CHECKING:
    from story_forge.settings._settings import Settings

logger = logging.getLogger(__name__)


def validate(settings: "Settings") -> None:
    """Validate all settings fields.

    Raises:
        ValueError: If any field contains an invalid value.
    """
    _validate_log_level(settings)
    _validate_log_file(settings)
    _validate_flags(settings)
    _validate_story_theme(settings)
    _validate_location_base_rates(settings)
    logger.debug("Settings validated")


def _validate_log_level(settings: "Settings") -> None:
    """Validate log_level is a known logging level."""
    try:
        validate_choice(settings.log_level, "log_level", LOG_LEVELS)
    except TypeError as e:
        raise ValueError(str(e)) from e


def _validate_log_file(settings: "Settings") -> None:
    if not isinstance(settings.log_file, str):
        raise ValueError(
            f"log_file must be a string, got {type(settings.log_file).__name__}"
        )


def _validate_flags(settings: "Settings") -> None:
    """Validate boolean switches."""
    for name in ("include_latent_edges", "auto_accept_upgrades"):
        value = getattr(settings, name)
        if not isinstance(value, bool):
            raise ValueError(f"{name} must be a boolean, got {type(value).__name__}")


def _validate_story_theme(settings: "Settings") -> None:
    try:
        validate_not_empty(settings.default_story_theme, "default_story_theme")
    except TypeError as e:
        raise ValueError(str(e)) from e


def _validate_location_base_rates(settings: "Settings") -> None:
    """Validate per-channel day rates: known channels, at least 1 unless the channel is free."""
    try:
        validate_day_rates(
            settings.location_base_rates,
            "location_base_rates",
            channels=[channel.value for channel in SourcingChannel],
            free_channels=FREE_CHANNELS,
        )
    except TypeError as e:
        raise ValueError(str(e)) from e
