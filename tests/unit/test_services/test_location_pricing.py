"""Tests for location price estimation."""

import logging

import pytest

from story_forge.memory.locations import CostBreakdown, LocationSuggestion, SourcingChannel
from story_forge.services.location_pricing import (
    BASE_DAY_RATES,
    LocationPricingService,
    PriceTier,
    apply_price_estimation_if_needed,
    estimate_price,
    find_venue_adjustment,
    is_free_public_entry,
    needs_estimation,
    price_tier,
)


def _suggestion(sourcing="airbnb", venue_type="House", **kwargs) -> LocationSuggestion:
    return LocationSuggestion(
        venue_name="Test venue", sourcing=sourcing, venue_type=venue_type, **kwargs
    )


class TestEstimatePrice:
    """Tests for estimate_price."""

    def test_industrial_peerspace(self):
        """275 x 1.3 = 357.5 rounds half-up to 358."""
        estimate = estimate_price(_suggestion("peerspace", "Industrial Warehouse"))
        assert estimate.day_rate == 358
        assert estimate.is_estimated is True
        assert estimate.adjustment == "industrial"

    def test_public_venue_is_free(self):
        """Public venue types are forced to zero regardless of channel."""
        assert estimate_price(_suggestion("airbnb", "Public Park")).day_rate == 0

    def test_residential_discount(self):
        """Residential venues get x0.8."""
        assert estimate_price(_suggestion("airbnb", "Downtown Loft")).day_rate == 160

    def test_commercial_markup(self):
        """Commercial venues get x1.1."""
        assert estimate_price(_suggestion("giggster", "Office Suite")).day_rate == 385

    def test_first_adjustment_wins(self):
        """Earlier rows win when several keywords appear."""
        assert find_venue_adjustment("Office Park").label == "commercial"

    def test_no_adjustment(self):
        """Unmatched venue types use the plain base rate."""
        estimate = estimate_price(_suggestion("rental", "Boat"))
        assert estimate.day_rate == 425
        assert estimate.adjustment is None

    def test_unknown_channel_uses_other_rate(self):
        """Unknown sourcing channels fall back to the "other" rate."""
        assert estimate_price(_suggestion("craigslist", "Boat")).day_rate == BASE_DAY_RATES["other"]

    def test_public_space_channel_is_free(self):
        """The public-space channel has a zero base rate."""
        assert estimate_price(_suggestion(SourcingChannel.PUBLIC_SPACE, "Plaza")).day_rate == 0

    def test_custom_base_rates(self):
        """A rate table can be supplied."""
        rates = {"airbnb": 99, "other": 1}
        estimate = estimate_price(_suggestion("airbnb", "Boat"), base_rates=rates)
        assert estimate.day_rate == 99

    @pytest.mark.parametrize("channel", list(SourcingChannel))
    def test_non_negative_whole_units(self, channel):
        """Estimates are whole, non-negative numbers."""
        estimate = estimate_price(_suggestion(channel, "Warehouse loft"))
        assert estimate.day_rate >= 0
        assert isinstance(estimate.day_rate, int)


class TestNeedsEstimation:
    """Tests for needs_estimation."""

    def test_no_cost_info(self):
        """Suggestions without any cost information need an estimate."""
        assert needs_estimation(_suggestion()) is True

    def test_existing_rate(self):
        """A known positive rate needs no estimate."""
        assert needs_estimation(_suggestion(cost_breakdown=CostBreakdown(day_rate=300))) is False

    def test_legacy_rate(self):
        """The legacy estimated_cost counts as a known rate."""
        assert needs_estimation(_suggestion(estimated_cost=120)) is False

    def test_zero_rate_non_public(self):
        """A zero rate on a paid venue needs an estimate."""
        assert needs_estimation(_suggestion(cost_breakdown=CostBreakdown(day_rate=0))) is True

    def test_breakdown_without_rate(self):
        """A cost breakdown lacking a day rate needs an estimate."""
        assert needs_estimation(_suggestion(cost_breakdown=CostBreakdown(permit_cost=50))) is True

    def test_zero_rate_public_venue(self):
        """Free public entries keep their zero rate."""
        suggestion = _suggestion("airbnb", "City Library", estimated_cost=0)
        assert is_free_public_entry(suggestion)
        assert needs_estimation(suggestion) is False

    def test_zero_rate_public_channel(self):
        """The public-space channel counts as free."""
        suggestion = _suggestion("public-space", "Plaza", cost_breakdown=CostBreakdown(day_rate=0))
        assert needs_estimation(suggestion) is False


class TestApplyPriceEstimation:
    """Tests for apply_price_estimation_if_needed."""

    def test_not_needed_returns_same_object(self):
        """Priced suggestions come back unchanged."""
        suggestion = _suggestion(cost_breakdown=CostBreakdown(day_rate=300))
        assert apply_price_estimation_if_needed(suggestion) is suggestion

    def test_fills_rate(self):
        """Estimated suggestions carry the rate in both places."""
        result = apply_price_estimation_if_needed(_suggestion("peerspace", "Industrial Warehouse"))
        assert result.estimated_cost == 358
        assert result.cost_breakdown.day_rate == 358
        assert result.is_estimated is True

    def test_keeps_other_cost_fields(self):
        """Permit, deposit, insurance and notes survive estimation."""
        breakdown = CostBreakdown(
            permit_cost=75, deposit_amount=200, insurance_required=True, notes="Call first"
        )
        suggestion = _suggestion("airbnb", "Loft", cost_breakdown=breakdown)
        result = apply_price_estimation_if_needed(suggestion)
        assert result.cost_breakdown.day_rate == 160
        assert result.cost_breakdown.permit_cost == 75
        assert result.cost_breakdown.deposit_amount == 200
        assert result.cost_breakdown.insurance_required is True
        assert result.cost_breakdown.notes == "Call first"

    def test_input_untouched(self):
        """The input suggestion is not modified."""
        suggestion = _suggestion()
        apply_price_estimation_if_needed(suggestion)
        assert suggestion.estimated_cost is None
        assert suggestion.is_estimated is False

    @pytest.mark.parametrize(
        "sourcing,venue_type",
        [("airbnb", "Public Park"), ("peerspace", "Warehouse"), ("rental", "Boat")],
    )
    def test_estimated_suggestions_need_no_second_pass(self, sourcing, venue_type):
        """Applying twice gives the same result as applying once."""
        once = apply_price_estimation_if_needed(_suggestion(sourcing, venue_type))
        assert needs_estimation(once) is False
        assert apply_price_estimation_if_needed(once) is once


class TestPriceTier:
    """Tests for price_tier."""

    @pytest.mark.parametrize(
        "day_rate,expected",
        [
            (0, PriceTier.FREE),
            (149, PriceTier.LOW_COST),
            (150, PriceTier.LOW_COST),
            (150.5, PriceTier.MODERATE),
            (300, PriceTier.MODERATE),
            (300.5, PriceTier.HIGHER),
        ],
    )
    def test_buckets(self, day_rate, expected):
        """Rates fall into the documented buckets."""
        assert price_tier(day_rate) == expected

    def test_negative_rejected(self):
        """Negative rates are invalid."""
        with pytest.raises(ValueError):
            price_tier(-1)


class TestLocationPricingService:
    """Tests for LocationPricingService."""

    def test_settings_override_rates(self, settings):
        """Configured rates replace the built-in ones."""
        settings.location_base_rates["airbnb"] = 500
        service = LocationPricingService(settings)
        assert service.estimate(_suggestion("airbnb", "Boat")).day_rate == 500

    def test_apply_to_all(self, settings, caplog):
        """Batches keep order and only estimate what needs it."""
        priced = _suggestion(cost_breakdown=CostBreakdown(day_rate=300))
        unpriced = _suggestion("peerspace", "Warehouse")
        service = LocationPricingService(settings)

        with caplog.at_level(logging.INFO):
            results = service.apply_to_all([priced, unpriced])

        assert results[0] is priced
        assert results[1].estimated_cost == 358
        assert "Priced 2 location suggestions (1 estimated)" in caplog.text

    def test_apply_single(self, settings):
        """apply() prices one suggestion."""
        service = LocationPricingService(settings)
        assert service.apply(_suggestion("rental", "Boat")).estimated_cost == 425

    def test_zero_rate_on_paid_channel_rejected(self, settings):
        """A zero configured rate on a paid channel is refused before pricing."""
        settings.location_base_rates["airbnb"] = 0
        service = LocationPricingService(settings)
        with pytest.raises(ValueError, match="must be at least 1"):
            service.apply(_suggestion("airbnb", "Loft"))

    @pytest.mark.parametrize("channel", list(SourcingChannel))
    def test_priced_suggestions_are_settled(self, settings, channel):
        """After apply(), no suggestion needs another estimate."""
        settings.location_base_rates["airbnb"] = 1
        service = LocationPricingService(settings)
        for venue_type in ("Loft", "Office", "Warehouse", "Public Park", "Boat"):
            priced = service.apply(_suggestion(channel, venue_type))
            assert needs_estimation(priced) is False
