"""Shoot location suggestion models.

Suggestions come from a location-scouting generator and often arrive without
a usable price. Pricing is filled in by services/location_pricing.py.
"""

import logging
import uuid
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class SourcingChannel(StrEnum):
    """Where a location can be booked."""

    AIRBNB = "airbnb"
    PEERSPACE = "peerspace"
    GIGGSTER = "giggster"
    PUBLIC_SPACE = "public-space"
    SPECIFIC_VENUE = "specific-venue"
    RENTAL = "rental"
    OTHER = "other"


# Typical day rates per channel, in whole currency units
BASE_DAY_RATES: dict[str, float] = {
    SourcingChannel.AIRBNB: 200,
    SourcingChannel.PEERSPACE: 275,
    SourcingChannel.GIGGSTER: 350,
    SourcingChannel.PUBLIC_SPACE: 0,
    SourcingChannel.SPECIFIC_VENUE: 550,
    SourcingChannel.RENTAL: 425,
    SourcingChannel.OTHER: 275,
}

# Channels whose base rate may be zero
FREE_CHANNELS: frozenset[str] = frozenset({SourcingChannel.PUBLIC_SPACE})


class CostBreakdown(BaseModel):
    """Itemized shoot-day costs for a location."""

    day_rate: float | None = Field(default=None, ge=0, description="Cost for one shoot day")
    permit_cost: float | None = Field(default=None, ge=0)
    deposit_amount: float | None = Field(default=None, ge=0)
    insurance_required: bool | None = None
    notes: str = ""

    model_config = ConfigDict(frozen=True)


def _new_location_id() -> str:
    return f"loc_{uuid.uuid4().hex[:12]}"


class LocationSuggestion(BaseModel):
    """A real-world filming option for a story location.

    sourcing is kept as a plain string: generators emit channels outside
    SourcingChannel and those must survive a round-trip (they are priced with
    the "other" rate).
    """

    id: str = Field(default_factory=_new_location_id)
    venue_name: str = ""
    venue_type: str = ""
    sourcing: str = SourcingChannel.OTHER
    address: str = ""
    cost_breakdown: CostBreakdown | None = None
    estimated_cost: float | None = Field(default=None, ge=0, description="Legacy day-rate field")
    is_estimated: bool = False
    pros: list[str] = Field(default_factory=list)
    cons: list[str] = Field(default_factory=list)
    search_guidance: str = ""
    specific_venue_url: str | None = None
    is_preferred: bool = False

    model_config = ConfigDict(frozen=True)

    @property
    def day_rate(self) -> float | None:
        """Best known day rate: cost breakdown first, then the legacy field."""
        if self.cost_breakdown is not None and self.cost_breakdown.day_rate is not None:
            return self.cost_breakdown.day_rate
        return self.estimated_cost
