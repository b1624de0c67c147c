"""
Points accounting arithmetic.

Stateless: nothing here reads or writes the database. Balances are never
mutated directly; a debit is simply a ledger entry with a negative amount.
"""
from decimal import Decimal, InvalidOperation, ROUND_FLOOR
from typing import Any

from ..utils.exceptions import InvalidAmountError, InsufficientPointsError, ValidationError


def to_decimal(value: Any) -> Decimal:
    """
    Coerce a request value (str, int, float, Decimal) to Decimal.

    Floats go through str() so 19.99 stays 19.99 instead of its binary
    approximation.

    Raises:
        InvalidAmountError: value is missing, non-numeric, or not finite
    """
    if value is None or isinstance(value, bool):
        raise InvalidAmountError('Valid purchase amount is required')
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise InvalidAmountError('Valid purchase amount is required')
    if not amount.is_finite():
        raise InvalidAmountError('Valid purchase amount is required')
    return amount


def compute_earned_points(purchase_amount: Decimal, points_per_dollar: int) -> int:
    """
    Points earned for a purchase: floor(purchase_amount * points_per_dollar).

    Always truncates, never rounds up ($19.99 at 10/$ is 199 points).

    Raises:
        InvalidAmountError: purchase_amount <= 0
        ValidationError: points_per_dollar is not a positive integer
    """
    amount = to_decimal(purchase_amount)
    if amount <= 0:
        raise InvalidAmountError()

    if isinstance(points_per_dollar, bool) or not isinstance(points_per_dollar, int) or points_per_dollar <= 0:
        raise ValidationError('points_per_dollar must be a positive integer', 'points_per_dollar')

    return int((amount * points_per_dollar).to_integral_value(rounding=ROUND_FLOOR))


def validate_redemption(current_balance: int, point_cost: int) -> None:
    """
    Check that a balance covers a reward's cost.

    Callers must run this check and the debit that follows as one atomic
    step for the account.

    Raises:
        ValidationError: point_cost is not positive
        InsufficientPointsError: current_balance < point_cost
    """
    if point_cost is None or point_cost <= 0:
        raise ValidationError('point_cost must be positive', 'point_cost')

    balance = current_balance or 0
    if balance < point_cost:
        raise InsufficientPointsError(balance, point_cost)
