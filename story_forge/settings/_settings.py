"""Main Settings dataclass for Story Forge.

Settings are stored in settings.json next to the package.
"""

import copy
import json
import logging
import os
import shutil
import tempfile
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, ClassVar

from story_forge.memory.locations import BASE_DAY_RATES
from story_forge.settings import _paths
from story_forge.settings import _validation as _validation_mod

logger = logging.getLogger(__name__)

# Dict fields with fixed expected sub-keys - merged on load so that
# new sub-keys get defaults and removed ones are cleaned up.
_STRUCTURED_DICT_FIELDS = ("location_base_rates",)


def _merge_with_defaults(data: dict[str, Any], settings_cls: type["Settings"]) -> bool:
    """Merge loaded JSON data with dataclass defaults.

    - Adds missing top-level keys with their default values
    - Removes top-level keys that no longer exist in the dataclass
    - For dict fields with fixed sub-keys, adds missing and removes obsolete sub-keys

    Modifies *data* in place.

    Returns:
        True if any changes were made, False otherwise.
    """
    default_dict = asdict(settings_cls())
    known_fields = {f.name for f in fields(settings_cls)}
    changed = False

    for key in list(data):
        if key not in known_fields:
            logger.info("Removing obsolete setting: %s", key)
            del data[key]
            changed = True

    for key in known_fields:
        if key not in data:
            logger.info("Adding new setting with default: %s", key)
            data[key] = default_dict[key]
            changed = True

    for field_name in _STRUCTURED_DICT_FIELDS:
        default_sub = default_dict[field_name]
        current_sub = data[field_name]
        if not isinstance(current_sub, dict):
            logger.warning(
                "Resetting %s to default (expected dict, got %s)",
                field_name,
                type(current_sub).__name__,
            )
            data[field_name] = default_sub
            changed = True
            continue
        for sub_key in list(current_sub):
            if sub_key not in default_sub:
                logger.info("Removing obsolete %s[%s]", field_name, sub_key)
                del current_sub[sub_key]
                changed = True
        for sub_key, sub_value in default_sub.items():
            if sub_key not in current_sub:
                logger.info("Adding new %s[%s] = %r", field_name, sub_key, sub_value)
                current_sub[sub_key] = sub_value
                changed = True

    logger.debug("Merge summary: %d known fields, changed=%s", len(known_fields), changed)
    return changed


def _atomic_write_json(path: Path | str, data: dict[str, Any]) -> None:
    """Write JSON to *path* atomically via a temp file + rename."""
    path = Path(path)
    fd, tmp_path = tempfile.mkstemp(dir=str(path.parent), suffix=".tmp")
    try:
        with os.fdopen(fd, "w") as f:
            json.dump(data, f, indent=2)
        os.replace(tmp_path, str(path))
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError as cleanup_err:
            logger.warning("Failed to remove temp settings file %s: %s", tmp_path, cleanup_err)
        raise


def _backup_corrupt_file(settings_file: Path) -> None:
    backup_path = settings_file.with_suffix(".json.corrupt")
    try:
        shutil.copy(settings_file, backup_path)
        logger.info("Backed up corrupted settings to %s", backup_path)
    except OSError as copy_err:
        logger.warning("Failed to backup corrupted settings: %s", copy_err)


@dataclass
class Settings:
    """Application settings."""

    # Logging
    log_level: str = "INFO"
    log_file: str = "default"  # "default" = logs/story_forge.log, "" disables the file handler

    # Character web
    include_latent_edges: bool = True  # Draw faint edges between unrelated characters

    # Character upgrades
    auto_accept_upgrades: bool = False  # Backfill missing synthesized fields instead of failing
    default_story_theme: str = "personal growth"

    # Location pricing (channel -> day rate)
    location_base_rates: dict[str, float] = field(default_factory=lambda: dict(BASE_DAY_RATES))

    def save(self) -> None:
        """Save settings to JSON file."""
        self.validate()
        _atomic_write_json(_paths.SETTINGS_FILE, asdict(self))
        logger.debug("Settings saved to %s", _paths.SETTINGS_FILE)

    def validate(self) -> None:
        """Validate all settings fields. Delegates to _validation module.

        Raises:
            ValueError: If any field contains an invalid value.
        """
        _validation_mod.validate(self)

    # Class-level cache for settings (speeds up repeated load() calls)
    _cached_instance: ClassVar["Settings | None"] = None

    @classmethod
    def load(cls, use_cache: bool = True) -> "Settings":
        """Load settings from JSON file, or create defaults.

        New settings get default values and removed settings are cleaned up;
        customized values are preserved. A corrupted file is backed up to
        settings.json.corrupt and replaced with defaults.

        Args:
            use_cache: If True, return cached instance if available. Set to False
                to force reload from disk (useful after save() or in tests).

        Returns:
            Settings instance.

        Raises:
            ValueError: If a stored value has the wrong type or fails validation.
        """
        if use_cache and cls._cached_instance is not None:
            return cls._cached_instance

        settings_file = _paths.SETTINGS_FILE
        data: dict[str, Any] = {}
        loaded_from_file = False

        if settings_file.exists():
            try:
                with open(settings_file) as f:
                    raw = json.load(f)
                if isinstance(raw, dict):
                    data = raw
                    loaded_from_file = True
                else:
                    logger.error(
                        "Corrupted settings file (expected JSON object, got %s)",
                        type(raw).__name__,
                    )
                    _backup_corrupt_file(settings_file)
            except json.JSONDecodeError as e:
                logger.error("Corrupted settings file (invalid JSON): %s", e)
                _backup_corrupt_file(settings_file)
            except OSError as e:
                logger.error("Cannot read settings file (may be locked or inaccessible): %s", e)

        original_data = copy.deepcopy(data)
        changed = _merge_with_defaults(data, cls)

        try:
            settings = cls(**data)
            settings.validate()
        except TypeError as e:
            raise ValueError(f"A setting has an invalid type: {e}") from e

        if changed or not loaded_from_file:
            if loaded_from_file:
                logger.info(
                    "Settings updated during load (%d keys changed), saving to disk",
                    sum(1 for k, v in asdict(settings).items() if original_data.get(k) != v),
                )
            else:
                logger.info("No existing settings found, writing defaults to disk")
            try:
                _atomic_write_json(settings_file, asdict(settings))
            except OSError as write_err:
                logger.warning("Could not persist settings to disk: %s", write_err)

        cls._cached_instance = settings
        return settings

    @classmethod
    def clear_cache(cls) -> None:
        """Clear the cached settings instance.

        Use this in tests that need to verify settings loading behavior,
        or after programmatically modifying settings files.
        """
        cls._cached_instance = None
