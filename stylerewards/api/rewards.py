"""
Rewards API endpoints.

Handles:
- Available rewards listing (public)
- Reward redemption
"""
from flask import Blueprint, request, jsonify, g

from ..middleware.customer_auth import require_customer_auth
from ..services.loyalty_service import LoyaltyService
from ..services.catalog_service import CatalogService
from ..utils.errors import bad_request, ErrorCode

rewards_bp = Blueprint('rewards', __name__)


@rewards_bp.route('', methods=['GET'])
def list_rewards():
    """Active rewards, cheapest first."""
    rewards = CatalogService().list_rewards()
    return jsonify({
        'rewards': [r.to_dict() for r in rewards],
        'count': len(rewards)
    })


@rewards_bp.route('/redeem', methods=['POST'])
@require_customer_auth
def redeem_reward():
    """
    Redeem a reward with points.

    JSON body:
        rewardId: Reward to claim (required)

    Returns:
        The redemption record and the customer's new balance
    """
    data = request.get_json(silent=True) or {}
    reward_id = data.get('rewardId') if isinstance(data, dict) else None
    if reward_id in (None, ''):
        return bad_request('Reward ID is required', ErrorCode.MISSING_FIELD)

    service = LoyaltyService()
    redemption = service.redeem_reward(g.customer_id, reward_id)
    account = service.get_account(g.customer_id)

    return jsonify({
        'redemption': redemption.to_dict(),
        'totalPoints': account.total_points if account else None,
    })
