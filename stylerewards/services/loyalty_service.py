"""
Loyalty Service for StyleRewards.

Coordinates the points and tier engines against the database for the two
mutating workflows, recording a purchase and redeeming a reward, plus the
read-side queries the storefront and admin dashboard need.

INVARIANTS:
- account.total_points == sum of the customer's PointTransaction amounts
- account.current_tier == derive_tier(account.lifetime_spent)
- lifetime_spent only grows (redemptions never touch it)

Every mutation of an account happens in one commit together with the ledger
rows it implies. Conflicting concurrent updates of the same account are
detected through the optimistic version column and retried from scratch.
"""

import time
from decimal import Decimal, InvalidOperation, ROUND_FLOOR
from typing import Optional, List, Dict, Any

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..extensions import db
from ..models.loyalty import CustomerLoyaltyAccount, PointTransaction, LoyaltyTier, TransactionKind
from ..models.rewards import Reward, RewardRedemption, RedemptionStatus
from ..utils.cache import cache, cache_key
from ..utils.exceptions import (
    LoyaltyError,
    InvalidAmountError,
    RewardNotFoundError,
    AccountNotFoundError,
    ValidationError,
    LedgerStoreError,
)
from .concurrency import lock_for_update, run_with_retry
from .points_engine import to_decimal, compute_earned_points, validate_redemption
from .tier_engine import derive_tier

CENT = Decimal('0.01')

STATS_CACHE_KEY = cache_key('loyalty_stats')


class LoyaltyService:
    """
    Central service for loyalty account operations.

    Usage:
        service = LoyaltyService()

        account = service.get_or_create_account(customer_id)
        result = service.record_purchase(customer_id, Decimal('49.99'), points_per_dollar=10)
        redemption = service.redeem_reward(customer_id, reward_id)

    Failures are raised as LoyaltyError subclasses.
    """

    def __init__(self, retry_attempts: int = None, retry_backoff: float = None):
        config = current_app.config
        self.retry_attempts = (
            retry_attempts if retry_attempts is not None
            else config.get('LOYALTY_RETRY_ATTEMPTS', 3)
        )
        self.retry_backoff = (
            retry_backoff if retry_backoff is not None
            else config.get('LOYALTY_RETRY_BACKOFF', 0.05)
        )

    # ==================== Accounts ====================

    def get_account(self, customer_id: str) -> Optional[CustomerLoyaltyAccount]:
        """Read-only lookup. Returns None when the customer has no account."""
        if not customer_id:
            return None
        return CustomerLoyaltyAccount.query.filter_by(customer_id=customer_id).first()

    def get_or_create_account(self, customer_id: str) -> CustomerLoyaltyAccount:
        """
        Return the customer's account, creating an empty bronze one if needed.

        Idempotent. If two requests race to create the same account, the
        loser's insert hits the unique constraint and it re-reads the winner's
        row.
        """
        if not customer_id:
            raise ValidationError('customer_id is required', 'customer_id')

        account = self.get_account(customer_id)
        if account:
            return account

        account = CustomerLoyaltyAccount(
            customer_id=customer_id,
            total_points=0,
            current_tier=LoyaltyTier.BRONZE.value,
            lifetime_spent=Decimal('0'),
        )
        db.session.add(account)

        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            account = self.get_account(customer_id)
            if account is None:
                raise LedgerStoreError()
            return account
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Loyalty account creation failed for {customer_id}: {e}")
            raise LedgerStoreError(original_error=e)

        current_app.logger.info(f"Loyalty account created for customer {customer_id}")
        self._invalidate_stats()
        return account

    # ==================== Purchases ====================

    def record_purchase(
        self,
        customer_id: str,
        purchase_amount,
        points_per_dollar: int,
        order_id: str = None
    ) -> Dict[str, Any]:
        """
        Award points for a purchase and re-derive the customer's tier.

        The earned transaction, the new balance, the new lifetime spend and
        the new tier are committed together.

        Args:
            customer_id: Authenticated customer
            purchase_amount: Purchase total in dollars (positive)
            points_per_dollar: Rate of the governing loyalty program
            order_id: Storefront order reference (generated if omitted)

        Returns:
            Dict with transaction, points_earned, account, previous_tier, tier_changed

        Raises:
            InvalidAmountError: amount missing, non-numeric or not positive
        """
        amount = to_decimal(purchase_amount)
        if amount <= 0:
            raise InvalidAmountError()

        points_earned = compute_earned_points(amount, points_per_dollar)

        # lifetime_spent is kept in whole cents; sub-cent remainders are dropped
        try:
            spend = amount.quantize(CENT, rounding=ROUND_FLOOR)
        except InvalidOperation:
            raise InvalidAmountError('Purchase amount is out of range')

        order_id = order_id or f'order_{int(time.time() * 1000)}'

        self.get_or_create_account(customer_id)

        def apply_purchase():
            account = self._load_account_for_update(customer_id)
            if account is None:
                raise AccountNotFoundError(customer_id)

            previous_tier = account.current_tier
            new_total = (account.total_points or 0) + points_earned
            new_lifetime_spent = (account.lifetime_spent or Decimal('0')) + spend
            new_tier = derive_tier(new_lifetime_spent)

            transaction = PointTransaction(
                customer_id=customer_id,
                amount=points_earned,
                kind=TransactionKind.EARNED.value,
                description=f'Purchase of ${amount}',
                order_id=order_id,
                balance_after=new_total,
            )
            db.session.add(transaction)

            account.total_points = new_total
            account.lifetime_spent = new_lifetime_spent
            account.current_tier = new_tier.value

            db.session.commit()
            return account, transaction, previous_tier

        account, transaction, previous_tier = self._run_unit_of_work(apply_purchase, customer_id)

        current_app.logger.info(
            f"Points earned: customer {customer_id} +{points_earned} pts "
            f"(${amount} at {points_per_dollar}/$, order {order_id}). Balance: {account.total_points}"
        )

        tier_changed = previous_tier != account.current_tier
        if tier_changed:
            current_app.logger.info(
                f"Tier change: customer {customer_id} {previous_tier} -> {account.current_tier} "
                f"(lifetime spend ${account.lifetime_spent})"
            )

        self._invalidate_stats()

        return {
            'transaction': transaction,
            'points_earned': points_earned,
            'account': account,
            'previous_tier': previous_tier,
            'tier_changed': tier_changed,
        }

    # ==================== Redemptions ====================

    def redeem_reward(self, customer_id: str, reward_id) -> RewardRedemption:
        """
        Claim a reward with points.

        The redemption row, the negative transaction, the reward's counter and
        the account balance are written in one commit; any failure rolls back
        all four. The balance check is repeated on every retry, so two
        racing redemptions can never both spend the same points.

        Raises:
            RewardNotFoundError: reward missing or inactive
            AccountNotFoundError: customer has no loyalty account
            InsufficientPointsError: balance below the reward's cost
            ConcurrentModificationError: retries exhausted
        """
        reward_id = _reward_id(reward_id)

        def apply_redemption():
            reward = Reward.query.filter_by(id=reward_id).first()
            if not reward or not reward.is_active:
                raise RewardNotFoundError(reward_id)

            account = self._load_account_for_update(customer_id)
            if account is None:
                raise AccountNotFoundError(customer_id)

            point_cost = reward.point_cost
            validate_redemption(account.total_points, point_cost)

            new_total = account.total_points - point_cost

            redemption = RewardRedemption(
                customer_id=customer_id,
                reward_id=reward.id,
                points_used=point_cost,
                status=RedemptionStatus.ACTIVE.value,
            )
            transaction = PointTransaction(
                customer_id=customer_id,
                amount=-point_cost,
                kind=TransactionKind.REDEEMED.value,
                description=f'Redeemed {reward.name}',
                balance_after=new_total,
            )
            db.session.add(redemption)
            db.session.add(transaction)

            # Incremented in SQL so concurrent claims by other customers never lose a count
            reward.redemption_count = Reward.redemption_count + 1
            account.total_points = new_total

            db.session.commit()
            return redemption, account, reward

        redemption, account, reward = self._run_unit_of_work(apply_redemption, customer_id)

        current_app.logger.info(
            f"Reward redeemed: customer {customer_id} -{redemption.points_used} pts "
            f"for '{reward.name}'. Balance: {account.total_points}"
        )

        self._invalidate_stats()
        return redemption

    # ==================== History ====================

    def list_transactions(self, customer_id: str) -> List[PointTransaction]:
        """Customer's ledger, most recent first."""
        return PointTransaction.query.filter_by(
            customer_id=customer_id
        ).order_by(
            PointTransaction.created_at.desc(),
            PointTransaction.id.desc()
        ).all()

    def list_redemptions(self, customer_id: str) -> List[RewardRedemption]:
        """Customer's claimed rewards, most recent first."""
        return RewardRedemption.query.filter_by(
            customer_id=customer_id
        ).order_by(
            RewardRedemption.created_at.desc(),
            RewardRedemption.id.desc()
        ).all()

    # ==================== Analytics ====================

    def get_stats(self) -> Dict[str, Any]:
        """
        Program-wide totals for the admin dashboard.

        Cached for STATS_CACHE_TIMEOUT seconds; every successful mutation
        drops the cached copy.
        """
        cached = cache.get(STATS_CACHE_KEY)
        if cached is not None:
            return cached

        total_members = db.session.query(
            func.count(CustomerLoyaltyAccount.id)
        ).scalar()

        total_points_issued = db.session.query(
            func.coalesce(func.sum(PointTransaction.amount), 0)
        ).filter(
            PointTransaction.kind == TransactionKind.EARNED.value
        ).scalar()

        total_redemptions = db.session.query(
            func.count(RewardRedemption.id)
        ).scalar()

        revenue_impact = db.session.query(
            func.coalesce(func.sum(CustomerLoyaltyAccount.lifetime_spent), 0)
        ).scalar()

        stats = {
            'totalMembers': int(total_members or 0),
            'totalPointsIssued': int(total_points_issued or 0),
            'totalRedemptions': int(total_redemptions or 0),
            'revenueImpact': float(Decimal(str(revenue_impact or 0)).quantize(CENT)),
        }

        cache.set(STATS_CACHE_KEY, stats, timeout=current_app.config.get('STATS_CACHE_TIMEOUT', 60))
        return stats

    # ==================== Integrity ====================

    def ledger_balance(self, customer_id: str) -> int:
        """Balance recomputed from the transaction log."""
        result = db.session.query(
            func.coalesce(func.sum(PointTransaction.amount), 0)
        ).filter(
            PointTransaction.customer_id == customer_id
        ).scalar()
        return int(result or 0)

    def reconcile_account(self, customer_id: str, fix: bool = False) -> Dict[str, Any]:
        """
        Compare the cached balance and tier against the ledger.

        Args:
            customer_id: Account to check
            fix: Overwrite the cached balance/tier with the derived values

        Returns:
            Report dict; 'consistent' is True when nothing has drifted
        """
        account = self.get_account(customer_id)
        if account is None:
            raise AccountNotFoundError(customer_id)

        ledger_points = self.ledger_balance(customer_id)
        expected_tier = derive_tier(account.lifetime_spent or Decimal('0')).value

        report = {
            'customer_id': customer_id,
            'stored_points': account.total_points,
            'ledger_points': ledger_points,
            'drift': (account.total_points or 0) - ledger_points,
            'stored_tier': account.current_tier,
            'expected_tier': expected_tier,
            'fixed': False,
        }
        report['consistent'] = report['drift'] == 0 and account.current_tier == expected_tier

        if fix and not report['consistent']:
            def apply_fix():
                locked = self._load_account_for_update(customer_id)
                locked.total_points = self.ledger_balance(customer_id)
                locked.current_tier = derive_tier(locked.lifetime_spent or Decimal('0')).value
                db.session.commit()
                return locked

            self._run_unit_of_work(apply_fix, customer_id)
            report['fixed'] = True
            current_app.logger.warning(
                f"Reconciled account {customer_id}: points {report['stored_points']} -> {ledger_points}, "
                f"tier {report['stored_tier']} -> {expected_tier}"
            )
            self._invalidate_stats()

        return report

    def reconcile_all(self, fix: bool = False) -> List[Dict[str, Any]]:
        """Reconcile every account. Returns one report per account."""
        customer_ids = [
            row.customer_id for row in
            db.session.query(CustomerLoyaltyAccount.customer_id).order_by(CustomerLoyaltyAccount.id).all()
        ]
        return [self.reconcile_account(customer_id, fix=fix) for customer_id in customer_ids]

    # ==================== Helpers ====================

    def _load_account_for_update(self, customer_id: str) -> Optional[CustomerLoyaltyAccount]:
        query = CustomerLoyaltyAccount.query.filter_by(customer_id=customer_id).populate_existing()
        return lock_for_update(query).first()

    def _run_unit_of_work(self, unit_of_work, customer_id: str):
        """
        Run a mutating closure with conflict retries.

        Business rejections propagate unchanged. Any other database failure
        is rolled back and surfaced as an opaque LedgerStoreError.
        """
        try:
            return run_with_retry(
                unit_of_work,
                attempts=self.retry_attempts,
                backoff_base=self.retry_backoff
            )
        except LoyaltyError:
            db.session.rollback()
            raise
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Ledger write failed for customer {customer_id}: {e}")
            raise LedgerStoreError(original_error=e)

    def _invalidate_stats(self) -> None:
        cache.delete(STATS_CACHE_KEY)


def _reward_id(value) -> int:
    """Parse a reward id from a request; anything that is not an integer is unknown."""
    if isinstance(value, bool):
        raise RewardNotFoundError(value)
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise RewardNotFoundError(value)
    if isinstance(value, float) and value != number:
        raise RewardNotFoundError(value)
    return number
