"""
Loyalty program configuration model.
"""
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Dict, Any
from ..extensions import db


class ProgramType(str, Enum):
    """How a program rewards customers."""
    POINTS = 'points'   # points_per_dollar applies
    CASH = 'cash'       # cash_back_percent applies


class LoyaltyProgram(db.Model):
    """
    Rate-setting configuration. Not transactional.

    minimum_purchase is stored for admins but not enforced by the purchase
    workflow.
    """
    __tablename__ = 'loyalty_programs'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    program_type = db.Column(db.String(20), nullable=False)  # ProgramType
    points_per_dollar = db.Column(db.Integer, default=10)
    cash_back_percent = db.Column(db.Numeric(5, 2))
    minimum_purchase = db.Column(db.Numeric(10, 2), default=Decimal('0'))
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f'<LoyaltyProgram {self.name} ({self.program_type})>'

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'type': self.program_type,
            'pointsPerDollar': self.points_per_dollar,
            'cashBackPercent': str(self.cash_back_percent) if self.cash_back_percent is not None else None,
            'minimumPurchase': str(self.minimum_purchase) if self.minimum_purchase is not None else None,
            'isActive': self.is_active,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
        }
