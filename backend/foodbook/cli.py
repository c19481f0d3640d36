# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/foodbook/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP (PowerShell: $env:FLASK_APP="foodbook:create_app").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create all tables that do not exist yet.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Owner (tenant) management:
# - python -m flask owners list
#   List all owners with product and open order counts.
# - python -m flask owners create --email owner@example.com --company "Cafe Blue"
#   Create an owner account (login by OTP afterwards).
#
# Menu bootstrap:
# - python -m flask products seed --email owner@example.com
#   Give the owner the starter menu (no-op when they already have products).
#
# Billing inspection:
# - python -m flask bills show --email owner@example.com --seat A1
#   Print the running bill for a seat.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Owner, Order, Product
from .models.orders import PENDING, COMPLETED
from .services import auth_service, billing_service, products_service
from .services.auth_service import AccountError
from .services.tenant_service import TenantContext


def _tenant_for_email(email: str) -> TenantContext | None:
    try:
        owner = auth_service.get_owner_by_email(email)
    except AccountError as e:
        click.echo(f"FAIL {e}")
        return None
    if owner is None:
        click.echo(f"FAIL No owner with email '{email}'")
        return None
    return TenantContext.for_owner(owner)


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create missing tables. Existing data is left alone."""
    db.create_all()
    click.echo("PASS Database tables created.")


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


@click.group('owners')
def owners_group():
    """Owner (tenant) management commands."""


@owners_group.command('list')
@with_appcontext
def list_owners():
    """List all owners."""
    owners = db.session.query(Owner).order_by(Owner.id).all()

    if not owners:
        click.echo("No owners found.")
        return

    click.echo("\n" + "="*80)
    click.echo(f"{'ID':<5} {'Email':<32} {'Company':<20} {'Products':<9} {'Open orders'}")
    click.echo("="*80)

    for owner in owners:
        product_count = db.session.query(Product).filter_by(owner_id=owner.id).count()
        open_count = db.session.query(Order).filter(
            Order.owner_id == owner.id,
            Order.status.in_([PENDING, COMPLETED]),
        ).count()
        click.echo(
            f"{owner.id:<5} {owner.email:<32} {owner.company_name or '-':<20} {product_count:<9} {open_count}"
        )

    click.echo("="*80 + "\n")


@owners_group.command('create')
@click.option('--email', required=True, help='Owner email (tenant key)')
@click.option('--company', default=None, help='Company name printed on bills')
@with_appcontext
def create_owner_cli(email, company):
    """Create an owner account."""
    try:
        owner = auth_service.create_owner(email, company)
    except AccountError as e:
        click.echo(f"FAIL {e}")
        return
    click.echo(f"PASS Created owner: {owner.email} (ID: {owner.id})")


@click.group('products')
def products_group():
    """Menu bootstrap commands."""


@products_group.command('seed')
@click.option('--email', required=True, help='Owner email')
@with_appcontext
def seed_products(email):
    """Seed the starter menu for an owner."""
    tenant = _tenant_for_email(email)
    if tenant is None:
        return
    created = products_service.seed_default_products(tenant)
    if created:
        click.echo(f"PASS Seeded {created} products for {tenant.owner_email}")
    else:
        click.echo(f"WARN {tenant.owner_email} already has products, skipping...")


@click.group('bills')
def bills_group():
    """Billing inspection commands."""


@bills_group.command('show')
@click.option('--email', required=True, help='Owner email')
@click.option('--seat', required=True, help='Seat or table number')
@with_appcontext
def show_bill(email, seat):
    """Print the running bill for a seat."""
    tenant = _tenant_for_email(email)
    if tenant is None:
        return

    bill = billing_service.get_bill(tenant, seat)
    if bill is None:
        click.echo(f"No completed orders for seat {seat}.")
        return

    click.echo("\n" + "="*60)
    click.echo(f"{bill['company_name']:^60}")
    click.echo(f"Seat: {bill['seat_number']}   Orders: {bill['orders_count']}")
    click.echo("="*60)
    for item in bill["items"]:
        click.echo(f"{item['name']:<30} {item['quantity']:>4} x {item['price']:>7} = {item['total']:>8}")
    click.echo("-"*60)
    click.echo(f"{'Subtotal':<46} {bill['subtotal']:>13}")
    click.echo(f"{'Tax':<46} {bill['tax_total']:>13}")
    click.echo(f"{'Total':<46} {bill['grand_total']:>13}")
    if bill["note"]:
        click.echo(f"Note: {bill['note']}")
    click.echo("="*60 + "\n")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(owners_group)
    app.cli.add_command(products_group)
    app.cli.add_command(bills_group)
