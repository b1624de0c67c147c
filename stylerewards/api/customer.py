"""
Customer-facing loyalty endpoints.

Handles:
- Loyalty account (created on first access)
- Points transaction history
- Reward redemption history
- Purchases that earn points
"""
from flask import Blueprint, request, jsonify, g

from ..middleware.customer_auth import require_customer_auth
from ..services.loyalty_service import LoyaltyService
from ..services.catalog_service import CatalogService
from ..utils.errors import bad_request

customer_bp = Blueprint('customer', __name__)
purchases_bp = Blueprint('purchases', __name__)


@customer_bp.route('/loyalty', methods=['GET'])
@require_customer_auth
def get_loyalty():
    """
    Get the customer's loyalty account, creating it on first access.

    Returns:
        Balance, tier, lifetime spend and progress to the next tier
    """
    account = LoyaltyService().get_or_create_account(g.customer_id)
    return jsonify(account.to_dict())


@customer_bp.route('/transactions', methods=['GET'])
@require_customer_auth
def get_transactions():
    """Points history, most recent first."""
    transactions = LoyaltyService().list_transactions(g.customer_id)
    return jsonify({
        'transactions': [t.to_dict() for t in transactions],
        'count': len(transactions)
    })


@customer_bp.route('/redemptions', methods=['GET'])
@require_customer_auth
def get_redemptions():
    """Claimed rewards, most recent first."""
    redemptions = LoyaltyService().list_redemptions(g.customer_id)
    return jsonify({
        'redemptions': [r.to_dict() for r in redemptions],
        'count': len(redemptions)
    })


@purchases_bp.route('', methods=['POST'])
@require_customer_auth
def record_purchase():
    """
    Record a purchase and award points.

    JSON body:
        amount: Purchase total in dollars (required, positive)
        orderId: Storefront order reference (optional)

    The earn rate comes from the newest active points program, or the
    configured default when there is none.

    Returns:
        Earned transaction, points earned and the updated account
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return bad_request('JSON body is required')

    points_per_dollar = CatalogService().resolve_points_per_dollar()
    result = LoyaltyService().record_purchase(
        customer_id=g.customer_id,
        purchase_amount=data.get('amount'),
        points_per_dollar=points_per_dollar,
        order_id=data.get('orderId')
    )

    return jsonify({
        'transaction': result['transaction'].to_dict(),
        'pointsEarned': result['points_earned'],
        'pointsPerDollar': points_per_dollar,
        'account': result['account'].to_dict(),
        'tierChanged': result['tier_changed'],
    })
