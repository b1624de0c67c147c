"""
Tier progression rules.

Tiers are derived fresh from lifetime spend every time; there is no tier
counter to advance. Lower bounds are inclusive, upper bounds exclusive.

    bronze    [0, 300)
    silver    [300, 600)
    gold      [600, 1000)
    platinum  [1000, inf)
"""
from decimal import Decimal
from typing import Dict, Any, Optional

from ..models.loyalty import LoyaltyTier
from .points_engine import to_decimal

# (tier, inclusive lower bound), highest first
TIER_THRESHOLDS = (
    (LoyaltyTier.PLATINUM, Decimal('1000')),
    (LoyaltyTier.GOLD, Decimal('600')),
    (LoyaltyTier.SILVER, Decimal('300')),
    (LoyaltyTier.BRONZE, Decimal('0')),
)

# Display-only earn rates shown to customers. The purchase workflow applies
# the governing program rate, not these.
TIER_EARN_MULTIPLIERS = {
    LoyaltyTier.BRONZE: 10,
    LoyaltyTier.SILVER: 12,
    LoyaltyTier.GOLD: 15,
    LoyaltyTier.PLATINUM: 20,
}

_TIER_ORDER = [tier for tier, _ in reversed(TIER_THRESHOLDS)]


def derive_tier(lifetime_spent) -> LoyaltyTier:
    """Map cumulative spend to its tier."""
    spent = to_decimal(lifetime_spent)
    if spent < 0:
        raise ValueError('lifetime_spent cannot be negative')

    for tier, lower_bound in TIER_THRESHOLDS:
        if spent >= lower_bound:
            return tier
    return LoyaltyTier.BRONZE


def tier_lower_bound(tier) -> Decimal:
    tier = LoyaltyTier(tier)
    for candidate, lower_bound in TIER_THRESHOLDS:
        if candidate == tier:
            return lower_bound
    raise ValueError(f'Unknown tier: {tier}')


def next_tier(tier) -> Optional[LoyaltyTier]:
    """The tier above this one, or None at the top."""
    index = _TIER_ORDER.index(LoyaltyTier(tier))
    if index + 1 < len(_TIER_ORDER):
        return _TIER_ORDER[index + 1]
    return None


def display_points_per_dollar(tier) -> int:
    try:
        return TIER_EARN_MULTIPLIERS[LoyaltyTier(tier)]
    except ValueError:
        return TIER_EARN_MULTIPLIERS[LoyaltyTier.BRONZE]


def tier_progress(lifetime_spent) -> Dict[str, Any]:
    """
    Progress toward the next tier for the loyalty dashboard.

    Returns:
        Dict with tier, nextTier, amountToNextTier (Decimal string, None at
        platinum) and progressPercent (0-100, one decimal place)
    """
    spent = to_decimal(lifetime_spent)
    tier = derive_tier(spent)
    upcoming = next_tier(tier)

    if upcoming is None:
        return {
            'tier': tier.value,
            'nextTier': None,
            'amountToNextTier': None,
            'progressPercent': 100.0,
        }

    floor = tier_lower_bound(tier)
    ceiling = tier_lower_bound(upcoming)
    progress = (spent - floor) / (ceiling - floor) * 100

    return {
        'tier': tier.value,
        'nextTier': upcoming.value,
        'amountToNextTier': str(ceiling - spent),
        'progressPercent': round(float(progress), 1),
    }
