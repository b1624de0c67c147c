"""
Middleware package for StyleRewards.
"""
from .customer_auth import require_customer_auth, get_customer_id_from_request
