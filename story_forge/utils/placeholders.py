"""Shared "authored vs placeholder" vocabulary.

Generated and imported character data is full of filler values ("TBD",
"Unknown", "Average") that should be treated as if the field had never been
filled in. Every consumer that needs to tell authored content from filler
(tier upgrades, required-field checks, UI collapse defaults) goes through
is_empty_value() so there is exactly one definition of "empty".
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel

logger = logging.getLogger(__name__)

# Compared after strip() + lower()
PLACEHOLDER_VALUES: frozenset[str] = frozenset(
    {
        "tbd",
        "to be defined",
        "to be determined",
        "n/a",
        "none",
        "unknown",
        "average",
        "good",
        "middle class",
    }
)


def is_placeholder(text: str) -> bool:
    """Return True if text is one of the placeholder phrases."""
    return text.strip().lower() in PLACEHOLDER_VALUES


def _own_fields(value: BaseModel | Mapping[str, Any]) -> dict[str, Any]:
    """Return the own fields of a model or mapping, including pydantic extras."""
    if isinstance(value, BaseModel):
        fields = {name: getattr(value, name) for name in type(value).model_fields}
        if value.model_extra:
            fields.update(value.model_extra)
        return fields
    return dict(value)


def is_empty_value(value: Any, ignore_keys: Iterable[str] = ()) -> bool:
    """Decide whether a field value counts as empty.

    Rules:
        - Scalars are empty when falsy (None, "", 0, False) or, for strings,
          when the trimmed lowercase text is a placeholder phrase.
        - Lists, tuples and sets are empty when they have no elements or every
          element is empty.
        - Mappings and pydantic models are empty when every own field not in
          ignore_keys is empty. Nested values are checked recursively, with the
          same ignore list.

    Args:
        value: The value to check.
        ignore_keys: Field names skipped when checking mappings/models
            (e.g. "id" or "schema_version").

    Returns:
        True if the value is empty or placeholder-only.
    """
    ignored = frozenset(ignore_keys)

    if value is None:
        return True
    if isinstance(value, str):
        return not value or is_placeholder(value)
    if isinstance(value, BaseModel | Mapping):
        return all(
            is_empty_value(field_value, ignored)
            for key, field_value in _own_fields(value).items()
            if key not in ignored
        )
    if isinstance(value, list | tuple | set | frozenset):
        return len(value) == 0 or all(is_empty_value(item, ignored) for item in value)
    return not value


def is_section_collapsed(section: Any, ignore_keys: Iterable[str] = ()) -> bool:
    """Default collapse state for an editor section: collapsed when nothing is authored."""
    collapsed = is_empty_value(section, ignore_keys)
    logger.debug("Section %s collapsed=%s", type(section).__name__, collapsed)
    return collapsed
