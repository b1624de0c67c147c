"""
Database models for StyleRewards.
Loyalty accounts, points ledger, rewards catalog and program configuration.
"""
from .loyalty import LoyaltyTier, TransactionKind, CustomerLoyaltyAccount, PointTransaction
from .rewards import RewardType, RedemptionStatus, Reward, RewardRedemption
from .program import ProgramType, LoyaltyProgram

__all__ = [
    # Accounts & ledger
    'LoyaltyTier',
    'TransactionKind',
    'CustomerLoyaltyAccount',
    'PointTransaction',
    # Rewards
    'RewardType',
    'RedemptionStatus',
    'Reward',
    'RewardRedemption',
    # Programs
    'ProgramType',
    'LoyaltyProgram',
]
