"""Input validation for settings and pricing inputs.

Validators raise ValueError for bad values and TypeError for values of the
wrong type, naming the offending parameter in the message.
"""

from collections.abc import Iterable, Mapping
from typing import Any


def validate_not_empty(value: str | None, param_name: str) -> None:
    """Require a non-blank string.

    Raises:
        ValueError: If value is None or only whitespace.
        TypeError: If value is not a string.
    """
    if value is None:
        raise ValueError(f"{param_name} cannot be None")
    if not isinstance(value, str):
        raise TypeError(f"{param_name} must be a string, got {type(value).__name__}")
    if not value.strip():
        raise ValueError(f"{param_name} cannot be empty")


def validate_choice(value: str | None, param_name: str, choices: Iterable[str]) -> None:
    """Require one of a fixed set of names (log levels, sourcing channels)."""
    validate_not_empty(value, param_name)
    allowed = list(choices)
    if value not in allowed:
        raise ValueError(f"{param_name} must be one of {allowed}, got '{value}'")


def validate_day_rate(value: Any, param_name: str) -> None:
    """Require a day rate: an int or float >= 0 (bools are not rates).

    Raises:
        ValueError: If value is None or negative.
        TypeError: If value is not a number.
    """
    if value is None:
        raise ValueError(f"{param_name} cannot be None")
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise TypeError(f"{param_name} must be numeric, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"{param_name} must be non-negative, got {value}")


def validate_day_rates(
    rates: Mapping[str, Any],
    param_name: str,
    channels: Iterable[str],
    free_channels: Iterable[str] = (),
) -> None:
    """Validate a channel -> base day rate table.

    Every key must be a known channel and every rate a valid day rate. Paid
    channels need a rate of at least one whole unit, so that no discounted
    estimate rounds down to zero; only channels in free_channels may be 0.

    Args:
        rates: Table to check; it may cover only some channels.
        param_name: Name used in error messages.
        channels: Known channel names.
        free_channels: Channels whose venues cost nothing.

    Raises:
        ValueError: If a channel is unknown or a rate is negative, None or a
            rate below 1 on a paid channel.
        TypeError: If rates is not a mapping or a rate is not a number.
    """
    if not isinstance(rates, Mapping):
        raise TypeError(f"{param_name} must be a mapping, got {type(rates).__name__}")

    known = set(channels)
    unknown = sorted(set(rates) - known)
    if unknown:
        raise ValueError(
            f"{param_name} has unknown sourcing channels {unknown}; "
            f"expected a subset of {sorted(known)}"
        )

    free = set(free_channels)
    for channel, rate in rates.items():
        validate_day_rate(rate, f"{param_name}[{channel}]")
        if rate < 1 and channel not in free:
            raise ValueError(
                f"{param_name}[{channel}] must be at least 1; only {sorted(free)} may be free"
            )
