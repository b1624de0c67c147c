"""
Admin API endpoints.

Handles:
- Program-wide statistics
- Loyalty program configuration
- Rewards catalog management
"""
from flask import Blueprint, request, jsonify

from ..middleware.customer_auth import require_customer_auth
from ..services.loyalty_service import LoyaltyService
from ..services.catalog_service import CatalogService
from ..utils.errors import bad_request

admin_bp = Blueprint('admin', __name__)


def _json_body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else None


# ==============================================================================
# STATS
# ==============================================================================

@admin_bp.route('/stats', methods=['GET'])
@require_customer_auth
def get_stats():
    """Total members, points issued, redemptions and revenue impact."""
    return jsonify(LoyaltyService().get_stats())


# ==============================================================================
# PROGRAMS
# ==============================================================================

@admin_bp.route('/programs', methods=['GET'])
@require_customer_auth
def list_programs():
    """
    List loyalty programs, newest first.

    Query params:
        active_only: Only active programs (default false)
    """
    active_only = request.args.get('active_only', 'false').lower() == 'true'
    service = CatalogService()
    programs = service.list_programs(active_only=active_only)
    active = service.resolve_active_program()

    return jsonify({
        'programs': [p.to_dict() for p in programs],
        'count': len(programs),
        'activeProgramId': active.id if active else None,
        'pointsPerDollar': service.resolve_points_per_dollar(),
    })


@admin_bp.route('/programs', methods=['POST'])
@require_customer_auth
def create_program():
    """
    Create a loyalty program.

    JSON body:
        name: Program name (required)
        type: 'points' or 'cash' (required)
        pointsPerDollar: Points per $1 (points programs)
        cashBackPercent: Cash back percentage (cash programs)
        minimumPurchase: Minimum purchase amount
        isActive: Whether the program is active (default true)
    """
    data = _json_body()
    if data is None:
        return bad_request('JSON body is required')

    program = CatalogService().create_program(data)
    return jsonify(program.to_dict()), 201


@admin_bp.route('/programs/<int:program_id>', methods=['PUT'])
@require_customer_auth
def update_program(program_id):
    """Update a loyalty program. Any create field may be sent."""
    data = _json_body()
    if data is None:
        return bad_request('JSON body is required')

    program = CatalogService().update_program(program_id, data)
    return jsonify(program.to_dict())


# ==============================================================================
# REWARDS CATALOG
# ==============================================================================

@admin_bp.route('/rewards', methods=['GET'])
@require_customer_auth
def list_rewards():
    """Full rewards catalog including inactive rewards, newest first."""
    rewards = CatalogService().list_rewards(include_inactive=True)
    return jsonify({
        'rewards': [r.to_dict() for r in rewards],
        'count': len(rewards)
    })


@admin_bp.route('/rewards', methods=['POST'])
@require_customer_auth
def create_reward():
    """
    Create a reward.

    JSON body:
        name: Reward name (required)
        description: Reward description
        type: 'discount', 'shipping', 'access' or 'product' (required)
        pointCost: Points required to redeem (required, positive)
        discountAmount: Fixed discount value
        discountPercent: Percentage discount
        isActive: Whether the reward can be claimed (default true)
    """
    data = _json_body()
    if data is None:
        return bad_request('JSON body is required')

    reward = CatalogService().create_reward(data)
    return jsonify(reward.to_dict()), 201


@admin_bp.route('/rewards/<int:reward_id>', methods=['PUT'])
@require_customer_auth
def update_reward(reward_id):
    """Update a reward. redemptionCount is read-only."""
    data = _json_body()
    if data is None:
        return bad_request('JSON body is required')

    reward = CatalogService().update_reward(reward_id, data)
    return jsonify(reward.to_dict())
