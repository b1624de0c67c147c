"""
CLI commands for loyalty ledger maintenance.

# Nightly drift check (report only)
0 3 * * * cd /app && flask loyalty reconcile
"""

import click
from flask.cli import with_appcontext

from ..services.loyalty_service import LoyaltyService
from ..utils.exceptions import AccountNotFoundError


@click.group('loyalty')
def loyalty_cli():
    """Loyalty ledger commands."""
    pass


@loyalty_cli.command('stats')
@with_appcontext
def show_stats():
    """Show program-wide totals."""
    stats = LoyaltyService().get_stats()

    click.echo(f"Members:          {stats['totalMembers']}")
    click.echo(f"Points issued:    {stats['totalPointsIssued']}")
    click.echo(f"Redemptions:      {stats['totalRedemptions']}")
    click.echo(f"Revenue impact:   ${stats['revenueImpact']:.2f}")


@loyalty_cli.command('reconcile')
@click.option('--customer-id', help='Check a single customer (or all if not specified)')
@click.option('--fix', is_flag=True, help='Rewrite drifted balances and tiers from the ledger')
@with_appcontext
def reconcile(customer_id, fix):
    """
    Compare cached balances and tiers against the transaction ledger.

    Exits with status 1 when drift is found and --fix was not given.
    """
    service = LoyaltyService()

    if customer_id:
        try:
            reports = [service.reconcile_account(customer_id, fix=fix)]
        except AccountNotFoundError:
            click.echo(f"Account {customer_id} not found")
            raise SystemExit(1)
    else:
        reports = service.reconcile_all(fix=fix)

    drifted = [r for r in reports if not r['consistent']]

    click.echo(f"{'[FIX] ' if fix else ''}Checked {len(reports)} accounts, {len(drifted)} drifted")
    for report in drifted:
        click.echo(
            f"  - {report['customer_id']}: points {report['stored_points']} vs ledger {report['ledger_points']}"
            f" (drift {report['drift']:+d}), tier {report['stored_tier']} vs {report['expected_tier']}"
            f"{' -> fixed' if report['fixed'] else ''}"
        )

    if drifted and not fix:
        raise SystemExit(1)


def init_app(app):
    app.cli.add_command(loyalty_cli)
