# Overview: Flask CLI command groups for bootstrap, data import/export, and inspection.

# backend/threadlog/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create missing tables (idempotent).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - python -m flask system wipe --yes
#   Delete every transaction, customer and activity row; keep the schema.
#
# Transaction log:
# - python -m flask transactions import backup.json
#   Load a JSON array of transaction objects in one commit.
# - python -m flask transactions export [backup.json]
#   Write the full log as JSON (stdout when no file is given).
#
# Inspection:
# - python -m flask inventory show
#   Print current stock per SKU.
# - python -m flask orders list [--status pending]
#   Print orders with status and total.

import json

import click
from flask.cli import with_appcontext

from .errors import StoreError
from .extensions import db
from .models import ActivityLog, Customer
from .services import inventory_service, order_service, transaction_store
from .validation import ValidationError


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create any missing tables."""
    db.create_all()
    click.echo("PASS Tables ready.")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete.")


@system_group.command('wipe')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def wipe_data(yes):
    """Clear the transaction log, customers and activity; keep the schema."""
    if not yes:
        click.confirm("WARN This will DELETE every transaction. Are you sure?", abort=True)

    click.echo("WIPE  Clearing data...")
    tx_count = transaction_store.delete_all()
    customer_count = db.session.query(Customer).delete()
    activity_count = db.session.query(ActivityLog).delete()
    db.session.commit()
    click.echo(f"PASS Removed {tx_count} transactions, {customer_count} customers, {activity_count} activity rows.")


@click.group('transactions')
def transactions_group():
    """Transaction log import/export."""


@transactions_group.command('import')
@click.argument('source', type=click.File('r'))
@with_appcontext
def import_transactions(source):
    """Load a JSON array of transactions (all-or-nothing)."""
    try:
        rows = json.load(source)
    except json.JSONDecodeError as e:
        raise click.ClickException(f"Invalid JSON: {e}")
    if not isinstance(rows, list):
        raise click.ClickException("Expected a JSON array of transactions")

    try:
        created = transaction_store.bulk_insert(rows)
    except (ValidationError, StoreError) as e:
        raise click.ClickException(f"Import failed: {e}")
    click.echo(f"PASS Imported {len(created)} transactions.")


@transactions_group.command('export')
@click.argument('target', type=click.File('w'), default='-')
@with_appcontext
def export_transactions(target):
    """Dump the full log, newest first."""
    rows = [tx.to_dict() for tx in transaction_store.list_all()]
    json.dump(rows, target, indent=2)
    target.write("\n")


@click.group('inventory')
def inventory_group():
    """Stock inspection."""


@inventory_group.command('show')
@with_appcontext
def show_inventory():
    summary = inventory_service.inventory_summary(transaction_store.list_all())
    if not summary:
        click.echo("No stock movements recorded.")
        return
    for row in summary:
        click.echo(f"{row['key']:<32} {row['quantity']:>6}")


@click.group('orders')
def orders_group():
    """Order inspection."""


@orders_group.command('list')
@click.option('--status', default='all', help='Fulfillment status filter')
@with_appcontext
def list_orders(status):
    orders = order_service.filter_orders(order_service.load_orders(), status)
    for order in orders:
        click.echo(
            f"{order.id:<40} {order.customer_name:<24} "
            f"{order.fulfillment_status:<12} {order.payment_status:<7} {order.total_amount:>10.2f}"
        )
    click.echo(f"{len(orders)} order(s)")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(transactions_group)
    app.cli.add_command(inventory_group)
    app.cli.add_command(orders_group)
