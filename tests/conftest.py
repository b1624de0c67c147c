"""
Pytest fixtures for StyleRewards tests.

Provides the test app with a fresh in-memory database per test, a test
client, authenticated customer headers and catalog fixtures.
"""
from decimal import Decimal

import pytest

from stylerewards import create_app
from stylerewards.extensions import db
from stylerewards.models import (
    CustomerLoyaltyAccount,
    PointTransaction,
    Reward,
    LoyaltyProgram,
    TransactionKind,
)
from stylerewards.services.tier_engine import derive_tier

CUSTOMER_ID = 'cust_test_001'


@pytest.fixture
def app():
    """Create test application."""
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def customer_id():
    return CUSTOMER_ID


@pytest.fixture
def customer_headers(customer_id):
    """Headers the auth gateway forwards for a signed-in customer."""
    return {
        'X-Customer-ID': customer_id,
        'Content-Type': 'application/json'
    }


def make_account(customer_id, points=0, lifetime_spent='0'):
    """
    Create an account whose ledger backs its balance.

    A single earned entry of `points` is written so the account reconciles.
    """
    spent = Decimal(lifetime_spent)
    account = CustomerLoyaltyAccount(
        customer_id=customer_id,
        total_points=points,
        current_tier=derive_tier(spent).value,
        lifetime_spent=spent,
    )
    db.session.add(account)
    if points:
        db.session.add(PointTransaction(
            customer_id=customer_id,
            amount=points,
            kind=TransactionKind.EARNED.value,
            description='Opening balance',
            balance_after=points,
        ))
    db.session.commit()
    return account


@pytest.fixture
def funded_account(app, customer_id):
    """Bronze account holding 1500 points."""
    return make_account(customer_id, points=1500, lifetime_spent='150.00')


@pytest.fixture
def sample_reward(app):
    """Active 1000 point discount reward."""
    reward = Reward(
        name='$10 Off',
        description='$10 off your next order',
        reward_type='discount',
        point_cost=1000,
        discount_amount=Decimal('10.00'),
        is_active=True,
        redemption_count=0,
    )
    db.session.add(reward)
    db.session.commit()
    return reward


@pytest.fixture
def inactive_reward(app):
    """Retired reward that can no longer be claimed."""
    reward = Reward(
        name='Holiday Gift',
        reward_type='product',
        point_cost=200,
        is_active=False,
        redemption_count=0,
    )
    db.session.add(reward)
    db.session.commit()
    return reward


@pytest.fixture
def points_program(app):
    """Active points program earning 15 points per dollar."""
    program = LoyaltyProgram(
        name='Spring Double-Up',
        program_type='points',
        points_per_dollar=15,
        minimum_purchase=Decimal('0'),
        is_active=True,
    )
    db.session.add(program)
    db.session.commit()
    return program
