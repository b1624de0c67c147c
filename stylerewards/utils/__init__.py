"""
Utility modules for StyleRewards.
"""
from .logging_config import setup_logging
from .errors import (
    ErrorCode,
    error_response,
    bad_request,
    unauthorized,
    not_found,
    conflict,
    internal_error,
    loyalty_error_response,
)
from .exceptions import (
    LoyaltyError,
    InvalidAmountError,
    NotFoundError,
    RewardNotFoundError,
    AccountNotFoundError,
    ProgramNotFoundError,
    ValidationError,
    InsufficientPointsError,
    ConcurrentModificationError,
    LedgerStoreError,
)
