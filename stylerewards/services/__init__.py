"""
Business logic services for StyleRewards.
"""
from .loyalty_service import LoyaltyService
from .catalog_service import CatalogService

__all__ = [
    'LoyaltyService',
    'CatalogService',
]
