"""
Tests for the Rewards API endpoints.

Tests cover:
- Public rewards listing (GET /api/rewards)
- Redemption (POST /api/rewards/redeem) and its rejections
"""
import json
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from stylerewards.models import RewardRedemption

from conftest import make_account


class TestRewardsList:
    """Tests for GET /api/rewards."""

    def test_no_auth_required(self, client):
        response = client.get('/api/rewards')
        assert response.status_code == 200
        assert response.get_json() == {'rewards': [], 'count': 0}

    def test_only_active_rewards(self, client, sample_reward, inactive_reward):
        data = client.get('/api/rewards').get_json()
        assert data['count'] == 1
        assert data['rewards'][0]['id'] == sample_reward.id
        assert data['rewards'][0]['pointCost'] == 1000
        assert data['rewards'][0]['discountAmount'] == '10.00'


class TestRedeem:
    """Tests for POST /api/rewards/redeem."""

    def test_redeem_success(self, client, customer_headers, funded_account, sample_reward):
        response = client.post(
            '/api/rewards/redeem',
            data=json.dumps({'rewardId': sample_reward.id}),
            headers=customer_headers
        )
        assert response.status_code == 200

        data = response.get_json()
        assert data['totalPoints'] == 500
        assert data['redemption']['status'] == 'active'
        assert data['redemption']['pointsUsed'] == 1000

    def test_missing_reward_id(self, client, customer_headers, funded_account):
        response = client.post('/api/rewards/redeem', data=json.dumps({}), headers=customer_headers)
        assert response.status_code == 400
        assert response.get_json()['error']['code'] == 'MISSING_FIELD'

    def test_insufficient_points(self, client, customer_headers, customer_id, sample_reward):
        make_account(customer_id, points=500)

        response = client.post(
            '/api/rewards/redeem',
            data=json.dumps({'rewardId': sample_reward.id}),
            headers=customer_headers
        )
        assert response.status_code == 400
        error = response.get_json()['error']
        assert error['code'] == 'INSUFFICIENT_POINTS'
        assert 'Current: 500' in error['message']
        assert RewardRedemption.query.count() == 0

    @pytest.mark.parametrize('reward_id', [99999, 'not-a-number', True, 1.9])
    def test_unknown_reward(self, client, customer_headers, funded_account, sample_reward, reward_id):
        response = client.post(
            '/api/rewards/redeem',
            data=json.dumps({'rewardId': reward_id}),
            headers=customer_headers
        )
        assert response.status_code == 404
        assert response.get_json()['error']['code'] == 'REWARD_NOT_FOUND'

    def test_inactive_reward(self, client, customer_headers, funded_account, inactive_reward):
        response = client.post(
            '/api/rewards/redeem',
            data=json.dumps({'rewardId': inactive_reward.id}),
            headers=customer_headers
        )
        assert response.status_code == 404

    def test_no_account(self, client, customer_headers, sample_reward):
        response = client.post(
            '/api/rewards/redeem',
            data=json.dumps({'rewardId': sample_reward.id}),
            headers=customer_headers
        )
        assert response.status_code == 404
        assert response.get_json()['error']['code'] == 'ACCOUNT_NOT_FOUND'

    def test_connection_loss_returns_500(self, client, customer_headers, funded_account, sample_reward):
        """Storage faults are opaque internal errors, not retryable conflicts."""
        lost = OperationalError('SELECT 1', {}, Exception('server closed the connection unexpectedly'))

        with patch('stylerewards.services.loyalty_service.validate_redemption', side_effect=lost):
            response = client.post(
                '/api/rewards/redeem',
                data=json.dumps({'rewardId': sample_reward.id}),
                headers=customer_headers
            )

        assert response.status_code == 500
        error = response.get_json()['error']
        assert error['code'] == 'INTERNAL_ERROR'
        assert 'server closed' not in error['message']
        assert RewardRedemption.query.count() == 0
