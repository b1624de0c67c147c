"""
Custom exceptions for StyleRewards business logic.

Every recoverable loyalty failure is raised as a subclass of LoyaltyError so the
HTTP layer can turn it into a specific rejection instead of a generic 500.
"""


class LoyaltyError(Exception):
    """Base exception for all loyalty business logic errors."""

    def __init__(self, message: str, code: str = "LOYALTY_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class InvalidAmountError(LoyaltyError):
    """Purchase amount is missing, non-numeric, or not positive."""

    def __init__(self, message: str = "Purchase amount must be positive"):
        super().__init__(message, "INVALID_AMOUNT")


class NotFoundError(LoyaltyError):
    """Resource not found."""

    def __init__(self, resource: str, identifier=None):
        message = f"{resource} not found"
        if identifier is not None:
            message = f"{resource} with ID {identifier} not found"
        super().__init__(message, f"{resource.upper()}_NOT_FOUND")


class RewardNotFoundError(NotFoundError):
    """Reward missing or inactive."""

    def __init__(self, identifier=None):
        super().__init__("Reward", identifier)


class AccountNotFoundError(NotFoundError):
    """No loyalty account exists for the customer."""

    def __init__(self, customer_id=None):
        super().__init__("Account", customer_id)


class ProgramNotFoundError(NotFoundError):
    """Loyalty program not found."""

    def __init__(self, identifier=None):
        super().__init__("Program", identifier)


class ValidationError(LoyaltyError):
    """Invalid input data."""

    def __init__(self, message: str, field: str = None):
        self.field = field
        code = f"INVALID_{field.upper()}" if field else "VALIDATION_ERROR"
        super().__init__(message, code)


class InsufficientPointsError(LoyaltyError):
    """Not enough points for the redemption."""

    def __init__(self, current: int, required: int):
        self.current = current
        self.required = required
        message = f"Insufficient points. Current: {current}, Required: {required}"
        super().__init__(message, "INSUFFICIENT_POINTS")


class ConcurrentModificationError(LoyaltyError):
    """The account changed underneath us and retries were exhausted."""

    def __init__(self, message: str = "Account was modified concurrently, please retry"):
        super().__init__(message, "CONCURRENT_MODIFICATION")


class LedgerStoreError(LoyaltyError):
    """Storage fault. The message never carries database details."""

    def __init__(self, message: str = "An unexpected error occurred", original_error: Exception = None):
        self.original_error = original_error
        super().__init__(message, "INTERNAL_ERROR")
