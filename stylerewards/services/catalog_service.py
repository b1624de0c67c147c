"""
Catalog Service for StyleRewards.

Thin CRUD over the rewards catalog and loyalty program configuration, plus the
explicit "which rate applies to a purchase" lookup. Request payloads use the
same camelCase keys the storefront and admin dashboard send.
"""

from decimal import Decimal
from typing import Optional, List, Dict, Any

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models.rewards import Reward, RewardType
from ..models.program import LoyaltyProgram, ProgramType
from ..utils.exceptions import (
    ValidationError,
    RewardNotFoundError,
    ProgramNotFoundError,
    LedgerStoreError,
    InvalidAmountError,
)
from .points_engine import to_decimal

REWARD_TYPES = [t.value for t in RewardType]
PROGRAM_TYPES = [t.value for t in ProgramType]

# Admin-editable reward fields -> model attribute
REWARD_FIELDS = {
    'name': 'name',
    'description': 'description',
    'type': 'reward_type',
    'pointCost': 'point_cost',
    'discountAmount': 'discount_amount',
    'discountPercent': 'discount_percent',
    'isActive': 'is_active',
}

PROGRAM_FIELDS = {
    'name': 'name',
    'type': 'program_type',
    'pointsPerDollar': 'points_per_dollar',
    'cashBackPercent': 'cash_back_percent',
    'minimumPurchase': 'minimum_purchase',
    'isActive': 'is_active',
}


class CatalogService:
    """
    Rewards catalog and loyalty program registry.

    Usage:
        service = CatalogService()
        reward = service.create_reward({'name': 'Free Shipping', 'type': 'shipping', 'pointCost': 500})
        rate = service.resolve_points_per_dollar()
    """

    # ==================== Rewards ====================

    def list_rewards(self, include_inactive: bool = False) -> List[Reward]:
        """
        Active rewards cheapest first (storefront), or the full catalog
        newest first (admin).
        """
        if include_inactive:
            return Reward.query.order_by(Reward.created_at.desc(), Reward.id.desc()).all()

        return Reward.query.filter(
            Reward.is_active.is_(True)
        ).order_by(Reward.point_cost.asc(), Reward.id.asc()).all()

    def get_reward(self, reward_id) -> Reward:
        reward = Reward.query.filter_by(id=_as_id(reward_id, RewardNotFoundError)).first()
        if not reward:
            raise RewardNotFoundError(reward_id)
        return reward

    def create_reward(self, data: Dict[str, Any]) -> Reward:
        """Create a catalog entry. name, type and pointCost are required."""
        data = data or {}
        for field in ('name', 'type', 'pointCost'):
            if data.get(field) in (None, ''):
                raise ValidationError(f'{field} is required', field)

        reward = Reward(is_active=True, redemption_count=0)
        self._apply_reward_fields(reward, data)
        return self._save(reward, f"Reward created: '{reward.name}' ({reward.point_cost} pts)")

    def update_reward(self, reward_id, data: Dict[str, Any]) -> Reward:
        """Partial update. redemptionCount is not editable."""
        reward = self.get_reward(reward_id)
        data = data or {}
        if 'redemptionCount' in data:
            raise ValidationError('redemptionCount cannot be changed', 'redemptionCount')

        try:
            self._apply_reward_fields(reward, data)
        except ValidationError:
            db.session.rollback()
            raise
        return self._save(reward, f"Reward updated: {reward.id} '{reward.name}'")

    def _apply_reward_fields(self, reward: Reward, data: Dict[str, Any]) -> None:
        for key, attr in REWARD_FIELDS.items():
            if key not in data:
                continue
            value = data[key]

            if key == 'name':
                value = _clean_name(value)
            elif key == 'type':
                if value not in REWARD_TYPES:
                    raise ValidationError(f'type must be one of: {REWARD_TYPES}', 'type')
            elif key == 'pointCost':
                value = _positive_int(value, 'pointCost')
            elif key in ('discountAmount', 'discountPercent'):
                value = _optional_decimal(value, key)
                if key == 'discountPercent' and value is not None and value > 100:
                    raise ValidationError('discountPercent cannot exceed 100', key)
            elif key == 'isActive':
                value = _boolean(value, key)

            setattr(reward, attr, value)

    # ==================== Programs ====================

    def list_programs(self, active_only: bool = False) -> List[LoyaltyProgram]:
        """Programs newest first."""
        query = LoyaltyProgram.query
        if active_only:
            query = query.filter(LoyaltyProgram.is_active.is_(True))
        return query.order_by(LoyaltyProgram.created_at.desc(), LoyaltyProgram.id.desc()).all()

    def get_program(self, program_id) -> LoyaltyProgram:
        program = LoyaltyProgram.query.filter_by(id=_as_id(program_id, ProgramNotFoundError)).first()
        if not program:
            raise ProgramNotFoundError(program_id)
        return program

    def create_program(self, data: Dict[str, Any]) -> LoyaltyProgram:
        """Create a program. name and type are required."""
        data = data or {}
        for field in ('name', 'type'):
            if data.get(field) in (None, ''):
                raise ValidationError(f'{field} is required', field)

        program = LoyaltyProgram(
            is_active=True,
            points_per_dollar=current_app.config.get('DEFAULT_POINTS_PER_DOLLAR', 10),
            minimum_purchase=Decimal('0'),
        )
        self._apply_program_fields(program, data)
        return self._save(program, f"Loyalty program created: '{program.name}' ({program.program_type})")

    def update_program(self, program_id, data: Dict[str, Any]) -> LoyaltyProgram:
        program = self.get_program(program_id)
        try:
            self._apply_program_fields(program, data or {})
        except ValidationError:
            db.session.rollback()
            raise
        return self._save(program, f"Loyalty program updated: {program.id} '{program.name}'")

    def _apply_program_fields(self, program: LoyaltyProgram, data: Dict[str, Any]) -> None:
        for key, attr in PROGRAM_FIELDS.items():
            if key not in data:
                continue
            value = data[key]

            if key == 'name':
                value = _clean_name(value)
            elif key == 'type':
                if value not in PROGRAM_TYPES:
                    raise ValidationError(f'type must be one of: {PROGRAM_TYPES}', 'type')
            elif key == 'pointsPerDollar':
                value = _positive_int(value, 'pointsPerDollar')
            elif key in ('cashBackPercent', 'minimumPurchase'):
                value = _optional_decimal(value, key)
                if key == 'minimumPurchase' and value is None:
                    value = Decimal('0')
            elif key == 'isActive':
                value = _boolean(value, key)

            setattr(program, attr, value)

    def resolve_active_program(self) -> Optional[LoyaltyProgram]:
        """Newest active points program, if any."""
        return LoyaltyProgram.query.filter(
            LoyaltyProgram.is_active.is_(True),
            LoyaltyProgram.program_type == ProgramType.POINTS.value,
            LoyaltyProgram.points_per_dollar.isnot(None),
            LoyaltyProgram.points_per_dollar > 0,
        ).order_by(LoyaltyProgram.created_at.desc(), LoyaltyProgram.id.desc()).first()

    def resolve_points_per_dollar(self) -> int:
        """
        Rate to pass into LoyaltyService.record_purchase.

        Falls back to DEFAULT_POINTS_PER_DOLLAR when no active points program
        exists.
        """
        program = self.resolve_active_program()
        if program:
            return program.points_per_dollar
        return current_app.config.get('DEFAULT_POINTS_PER_DOLLAR', 10)

    # ==================== Helpers ====================

    def _save(self, instance, log_message: str):
        db.session.add(instance)
        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Catalog write failed: {e}")
            raise LedgerStoreError(original_error=e)

        current_app.logger.info(log_message)
        return instance


def _as_id(value, not_found_error):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise not_found_error(value)


def _clean_name(value) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError('name must be a non-empty string', 'name')
    return value.strip()


def _positive_int(value, field: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f'{field} must be an integer', field)
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{field} must be an integer', field)
    if isinstance(value, float) and value != number:
        raise ValidationError(f'{field} must be an integer', field)
    if number <= 0:
        raise ValidationError(f'{field} must be positive', field)
    return number


def _optional_decimal(value, field: str) -> Optional[Decimal]:
    if value is None or value == '':
        return None
    try:
        number = to_decimal(value)
    except InvalidAmountError:
        raise ValidationError(f'{field} must be a number', field)
    if number < 0:
        raise ValidationError(f'{field} cannot be negative', field)
    return number


def _boolean(value, field: str) -> bool:
    if not isinstance(value, bool):
        raise ValidationError(f'{field} must be true or false', field)
    return value
