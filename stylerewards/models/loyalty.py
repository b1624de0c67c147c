"""
Customer loyalty account and points ledger models.

The account row is a cached summary; the point_transactions table is the
authoritative history. total_points must always equal the sum of the
customer's transaction amounts, and current_tier must always be the tier
derived from lifetime_spent.
"""
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Dict, Any
from ..extensions import db


class LoyaltyTier(str, Enum):
    """Membership tiers, lowest first."""
    BRONZE = 'bronze'
    SILVER = 'silver'
    GOLD = 'gold'
    PLATINUM = 'platinum'


class TransactionKind(str, Enum):
    """Kinds of ledger entries."""
    EARNED = 'earned'         # Purchase points (positive)
    REDEEMED = 'redeemed'     # Reward redemption (negative)
    REFERRAL = 'referral'     # Referral bonus (positive)


class CustomerLoyaltyAccount(db.Model):
    """
    One loyalty account per customer.

    Mutated only by LoyaltyService. version_id is an optimistic lock: a flush
    that updates a row another session already changed raises StaleDataError.
    """
    __tablename__ = 'customer_loyalty_accounts'

    id = db.Column(db.Integer, primary_key=True)
    customer_id = db.Column(db.String(255), nullable=False, unique=True)  # From the auth provider

    total_points = db.Column(db.Integer, nullable=False, default=0)
    current_tier = db.Column(db.String(20), nullable=False, default=LoyaltyTier.BRONZE.value)
    lifetime_spent = db.Column(db.Numeric(12, 2), nullable=False, default=Decimal('0'))

    version_id = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __mapper_args__ = {'version_id_col': version_id}

    def __repr__(self):
        return f'<CustomerLoyaltyAccount {self.customer_id}: {self.total_points} pts ({self.current_tier})>'

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary for API responses."""
        from ..services.tier_engine import display_points_per_dollar, tier_progress

        lifetime_spent = self.lifetime_spent or Decimal('0')
        return {
            'id': self.id,
            'customerId': self.customer_id,
            'totalPoints': self.total_points or 0,
            'currentTier': self.current_tier,
            'lifetimeSpent': str(lifetime_spent),
            'displayPointsPerDollar': display_points_per_dollar(self.current_tier),
            'tierProgress': tier_progress(lifetime_spent),
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
        }


class PointTransaction(db.Model):
    """
    Immutable points ledger entry.

    Positive amounts are earned, negative amounts are redeemed. balance_after
    is the account balance right after this entry, so replaying a customer's
    entries in creation order reproduces every intermediate balance.
    """
    __tablename__ = 'point_transactions'

    id = db.Column(db.Integer, primary_key=True)
    customer_id = db.Column(
        db.String(255),
        db.ForeignKey('customer_loyalty_accounts.customer_id'),
        nullable=False
    )

    amount = db.Column(db.Integer, nullable=False)
    kind = db.Column(db.String(20), nullable=False)  # TransactionKind
    description = db.Column(db.String(500))
    order_id = db.Column(db.String(100))
    balance_after = db.Column(db.Integer)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    account = db.relationship('CustomerLoyaltyAccount', backref=db.backref('transactions', lazy='dynamic'))

    __table_args__ = (
        db.Index('ix_point_transactions_customer_created', 'customer_id', 'created_at'),
        db.Index('ix_point_transactions_kind', 'kind'),
    )

    def __repr__(self):
        return f'<PointTransaction {self.id}: {self.amount:+d} pts for {self.customer_id}>'

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'customerId': self.customer_id,
            'amount': self.amount,
            'type': self.kind,
            'description': self.description,
            'orderId': self.order_id,
            'balanceAfter': self.balance_after,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }
