"""
Rewards catalog and redemption models.
"""
from datetime import datetime
from enum import Enum
from typing import Dict, Any
from ..extensions import db


class RewardType(str, Enum):
    """Types of redeemable rewards."""
    DISCOUNT = 'discount'     # Money or percentage off
    SHIPPING = 'shipping'     # Free shipping
    ACCESS = 'access'         # Early / exclusive access
    PRODUCT = 'product'       # Free product


class RedemptionStatus(str, Enum):
    """Status of a claimed reward."""
    ACTIVE = 'active'
    USED = 'used'
    EXPIRED = 'expired'


class Reward(db.Model):
    """
    Catalog entry customers can claim with points.

    redemption_count only ever goes up, once per successful redemption.
    """
    __tablename__ = 'rewards'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    reward_type = db.Column(db.String(20), nullable=False)  # RewardType
    point_cost = db.Column(db.Integer, nullable=False)

    discount_amount = db.Column(db.Numeric(10, 2))
    discount_percent = db.Column(db.Numeric(5, 2))

    is_active = db.Column(db.Boolean, nullable=False, default=True)
    redemption_count = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        db.Index('ix_rewards_active_cost', 'is_active', 'point_cost'),
    )

    def __repr__(self):
        return f'<Reward {self.name} ({self.point_cost} pts)>'

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'type': self.reward_type,
            'pointCost': self.point_cost,
            'discountAmount': str(self.discount_amount) if self.discount_amount is not None else None,
            'discountPercent': str(self.discount_percent) if self.discount_percent is not None else None,
            'isActive': self.is_active,
            'redemptionCount': self.redemption_count or 0,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
        }


class RewardRedemption(db.Model):
    """
    A reward claimed by a customer.

    points_used is copied from the reward at claim time, so later catalog price
    changes never touch past redemptions. Always paired with a redeemed
    PointTransaction of the same magnitude.
    """
    __tablename__ = 'reward_redemptions'

    id = db.Column(db.Integer, primary_key=True)
    customer_id = db.Column(
        db.String(255),
        db.ForeignKey('customer_loyalty_accounts.customer_id'),
        nullable=False
    )
    reward_id = db.Column(db.Integer, db.ForeignKey('rewards.id'), nullable=False)

    points_used = db.Column(db.Integer, nullable=False)
    status = db.Column(db.String(20), nullable=False, default=RedemptionStatus.ACTIVE.value)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    reward = db.relationship('Reward', backref=db.backref('redemptions', lazy='dynamic'))

    __table_args__ = (
        db.Index('ix_reward_redemptions_customer_created', 'customer_id', 'created_at'),
    )

    def __repr__(self):
        return f'<RewardRedemption {self.id}: reward {self.reward_id} for {self.customer_id}>'

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'customerId': self.customer_id,
            'rewardId': self.reward_id,
            'rewardName': self.reward.name if self.reward else None,
            'pointsUsed': self.points_used,
            'status': self.status,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
        }
