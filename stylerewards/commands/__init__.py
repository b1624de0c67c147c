"""
CLI Commands for StyleRewards.

Usage:
    flask loyalty stats                          # Program-wide totals
    flask loyalty reconcile                      # Check every account against its ledger
    flask loyalty reconcile --customer-id abc    # Check one account
    flask loyalty reconcile --fix                # Repair drifted balances/tiers
"""
from .loyalty import init_app as init_loyalty_commands


def init_app(app):
    """Register all CLI commands with the Flask app."""
    init_loyalty_commands(app)
