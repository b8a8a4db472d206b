"""Location pricing - rule-based day-rate estimates for shoot locations.

A suggestion's day rate is estimated from its sourcing channel's base rate,
adjusted by the first venue-type rule whose keyword appears in the venue type.
Public venues are always free. Estimates are rounded half-up to whole units.
"""

import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import StrEnum

from story_forge.memory.locations import (
    BASE_DAY_RATES,
    FREE_CHANNELS,
    CostBreakdown,
    LocationSuggestion,
    SourcingChannel,
)
from story_forge.settings import Settings
from story_forge.utils.logging_config import log_performance
from story_forge.utils.validation import validate_day_rate, validate_day_rates

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VenueAdjustment:
    """Multiplier applied to the base rate when a keyword is in the venue type."""

    label: str
    keywords: tuple[str, ...]
    multiplier: float


# Ordered; the first row with a matching keyword wins
VENUE_ADJUSTMENTS: tuple[VenueAdjustment, ...] = (
    VenueAdjustment("residential", ("residential", "loft", "apartment"), 0.8),
    VenueAdjustment("commercial", ("commercial", "office"), 1.1),
    VenueAdjustment("industrial", ("industrial", "warehouse"), 1.3),
    VenueAdjustment("public", ("public", "park", "library", "street"), 0.0),
)

# Upper bounds (inclusive) of the paid tiers
LOW_COST_LIMIT = 150
MODERATE_LIMIT = 300


class PriceTier(StrEnum):
    """Display bucket for a day rate."""

    FREE = "free"
    LOW_COST = "low-cost"
    MODERATE = "moderate"
    HIGHER = "higher"


@dataclass(frozen=True)
class PriceEstimate:
    """Result of estimate_price().

    Attributes:
        day_rate: Estimated day rate in whole units.
        base_rate: Channel base rate the estimate started from.
        adjustment: Label of the venue rule applied, None if none matched.
        is_estimated: Always True; marks the value as derived.
    """

    day_rate: int
    base_rate: float
    adjustment: str | None = None
    is_estimated: bool = True


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def find_venue_adjustment(venue_type: str) -> VenueAdjustment | None:
    """Return the first VENUE_ADJUSTMENTS row matching venue_type (case-insensitive)."""
    normalized = (venue_type or "").lower()
    for adjustment in VENUE_ADJUSTMENTS:
        if any(keyword in normalized for keyword in adjustment.keywords):
            return adjustment
    return None


def is_free_public_entry(suggestion: LocationSuggestion) -> bool:
    """True for public-space sourcing or a venue type ruled as public (free)."""
    if suggestion.sourcing == SourcingChannel.PUBLIC_SPACE:
        return True
    adjustment = find_venue_adjustment(suggestion.venue_type)
    return adjustment is not None and adjustment.multiplier == 0


def estimate_price(
    suggestion: LocationSuggestion,
    base_rates: Mapping[str, float] | None = None,
) -> PriceEstimate:
    """Estimate the day rate of a location suggestion.

    Args:
        suggestion: Suggestion to price.
        base_rates: Channel -> base day rate; defaults to BASE_DAY_RATES.
            Channels missing from the table use its "other" rate.

    Returns:
        PriceEstimate with the rounded day rate.
    """
    rates = base_rates if base_rates is not None else BASE_DAY_RATES
    if suggestion.sourcing in rates:
        base_rate = rates[suggestion.sourcing]
    else:
        base_rate = rates.get(SourcingChannel.OTHER, BASE_DAY_RATES[SourcingChannel.OTHER])
        logger.debug(
            "Unknown sourcing channel '%s', using 'other' rate %s", suggestion.sourcing, base_rate
        )

    adjustment = find_venue_adjustment(suggestion.venue_type)
    multiplier = adjustment.multiplier if adjustment else 1.0
    day_rate = _round_half_up(base_rate * multiplier)
    logger.debug(
        "Estimated '%s' (%s, %s): base %s x %s = %d",
        suggestion.venue_name,
        suggestion.sourcing,
        suggestion.venue_type,
        base_rate,
        multiplier,
        day_rate,
    )
    return PriceEstimate(
        day_rate=day_rate,
        base_rate=base_rate,
        adjustment=adjustment.label if adjustment else None,
    )


def needs_estimation(suggestion: LocationSuggestion) -> bool:
    """Decide whether a suggestion's day rate should be estimated.

    True when the suggestion carries no cost information at all, or when its
    known rate is zero or absent and it is not a free public entry.
    """
    if suggestion.cost_breakdown is None and suggestion.estimated_cost is None:
        return True
    rate = suggestion.day_rate
    if rate is None or rate == 0:
        return not is_free_public_entry(suggestion)
    return False


def apply_price_estimation_if_needed(
    suggestion: LocationSuggestion,
    base_rates: Mapping[str, float] | None = None,
) -> LocationSuggestion:
    """Fill in an estimated day rate when the suggestion needs one.

    Args:
        suggestion: Suggestion to price.
        base_rates: Optional channel rate table (see estimate_price()).

    Returns:
        The same object when no estimate is needed; otherwise a copy with
        estimated_cost, cost_breakdown.day_rate and is_estimated set. Other
        cost breakdown fields are kept.
    """
    if not needs_estimation(suggestion):
        return suggestion

    estimate = estimate_price(suggestion, base_rates)
    breakdown = suggestion.cost_breakdown or CostBreakdown()
    return suggestion.model_copy(
        update={
            "estimated_cost": estimate.day_rate,
            "cost_breakdown": breakdown.model_copy(update={"day_rate": estimate.day_rate}),
            "is_estimated": estimate.is_estimated,
        }
    )


def price_tier(day_rate: float) -> PriceTier:
    """Bucket a day rate: free (0), low-cost (<=150), moderate (<=300), higher.

    Raises:
        ValueError: If day_rate is negative or None.
        TypeError: If day_rate is not a number.
    """
    validate_day_rate(day_rate, "day_rate")
    if day_rate == 0:
        return PriceTier.FREE
    if day_rate <= LOW_COST_LIMIT:
        return PriceTier.LOW_COST
    if day_rate <= MODERATE_LIMIT:
        return PriceTier.MODERATE
    return PriceTier.HIGHER


class LocationPricingService:
    """Prices location suggestions with the channel rates from settings."""

    def __init__(self, settings: Settings):
        """Initialize location pricing service.

        Args:
            settings: Application settings (location_base_rates overrides).
        """
        self.settings = settings

    @property
    def base_rates(self) -> dict[str, float]:
        """Built-in channel rates overlaid with the configured ones.

        Raises:
            ValueError: If the configured table names an unknown channel or
                gives a paid channel a rate below 1.
        """
        rates = {**BASE_DAY_RATES, **self.settings.location_base_rates}
        try:
            validate_day_rates(
                rates,
                "location_base_rates",
                channels=[channel.value for channel in SourcingChannel],
                free_channels=FREE_CHANNELS,
            )
        except TypeError as e:
            raise ValueError(str(e)) from e
        return rates

    def estimate(self, suggestion: LocationSuggestion) -> PriceEstimate:
        """Estimate one suggestion with the configured rates."""
        return estimate_price(suggestion, self.base_rates)

    def apply(self, suggestion: LocationSuggestion) -> LocationSuggestion:
        """Fill in one suggestion's day rate if it needs an estimate."""
        return apply_price_estimation_if_needed(suggestion, self.base_rates)

    def apply_to_all(self, suggestions: Iterable[LocationSuggestion]) -> list[LocationSuggestion]:
        """Price a batch of suggestions, preserving order.

        Args:
            suggestions: Suggestions to price.

        Returns:
            New list; suggestions that needed no estimate are the same objects.
        """
        originals = list(suggestions)
        rates = self.base_rates
        with log_performance(logger, "location pricing"):
            results = [apply_price_estimation_if_needed(s, rates) for s in originals]
        estimated = sum(1 for before, after in zip(originals, results) if before is not after)
        logger.info("Priced %d location suggestions (%d estimated)", len(results), estimated)
        return results
