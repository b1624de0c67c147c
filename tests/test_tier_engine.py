"""
Tests for tier derivation and progress.

Boundaries are inclusive at the lower end: $300.00 is silver, $299.99 is not.
"""
from decimal import Decimal

import pytest

from stylerewards.models.loyalty import LoyaltyTier
from stylerewards.services.tier_engine import (
    derive_tier,
    next_tier,
    tier_lower_bound,
    display_points_per_dollar,
    tier_progress,
)


class TestDeriveTier:
    """Tests for lifetime spend -> tier."""

    @pytest.mark.parametrize('spent,expected', [
        ('0', LoyaltyTier.BRONZE),
        ('299.99', LoyaltyTier.BRONZE),
        ('300', LoyaltyTier.SILVER),
        ('599.99', LoyaltyTier.SILVER),
        ('600.00', LoyaltyTier.GOLD),
        ('999.99', LoyaltyTier.GOLD),
        ('1000', LoyaltyTier.PLATINUM),
        ('25000.00', LoyaltyTier.PLATINUM),
    ])
    def test_boundaries(self, spent, expected):
        assert derive_tier(Decimal(spent)) == expected

    def test_same_spend_same_tier(self):
        """Deriving twice from the same spend gives the same answer."""
        assert derive_tier(Decimal('450')) == derive_tier(Decimal('450'))

    def test_negative_spend_rejected(self):
        with pytest.raises(ValueError):
            derive_tier(Decimal('-0.01'))

    def test_tier_value_is_lowercase_name(self):
        assert derive_tier(Decimal('700')).value == 'gold'


class TestTierLadder:
    """Tests for tier ordering helpers."""

    def test_next_tier(self):
        assert next_tier(LoyaltyTier.BRONZE) == LoyaltyTier.SILVER
        assert next_tier('gold') == LoyaltyTier.PLATINUM
        assert next_tier(LoyaltyTier.PLATINUM) is None

    def test_lower_bounds(self):
        assert tier_lower_bound('silver') == Decimal('300')
        assert tier_lower_bound(LoyaltyTier.PLATINUM) == Decimal('1000')

    def test_display_multipliers(self):
        assert display_points_per_dollar('bronze') == 10
        assert display_points_per_dollar('silver') == 12
        assert display_points_per_dollar('gold') == 15
        assert display_points_per_dollar('platinum') == 20

    def test_unknown_tier_displays_bronze_rate(self):
        assert display_points_per_dollar('diamond') == 10


class TestTierProgress:
    """Tests for the dashboard progress block."""

    def test_new_customer(self):
        progress = tier_progress(Decimal('0'))
        assert progress['tier'] == 'bronze'
        assert progress['nextTier'] == 'silver'
        assert Decimal(progress['amountToNextTier']) == Decimal('300')
        assert progress['progressPercent'] == 0.0

    def test_halfway_through_silver(self):
        progress = tier_progress(Decimal('450.00'))
        assert progress['tier'] == 'silver'
        assert progress['nextTier'] == 'gold'
        assert Decimal(progress['amountToNextTier']) == Decimal('150')
        assert progress['progressPercent'] == 50.0

    def test_platinum_is_complete(self):
        progress = tier_progress(Decimal('1200'))
        assert progress == {
            'tier': 'platinum',
            'nextTier': None,
            'amountToNextTier': None,
            'progressPercent': 100.0,
        }
