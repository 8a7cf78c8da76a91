# Overview: Flask CLI command groups for bootstrap and stock inspection.

# backend/stockroom/cli.py
# Commands Legend (run from the backend directory):
# - python -m flask --app stockroom system init-db
#   Create all tables (idempotent).
# - python -m flask --app stockroom system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - python -m flask --app stockroom inventory low-stock --store-id 1
#   List out-of-stock and low-stock products for a store.
# - python -m flask --app stockroom inventory adjust --store-id 1 --product-id 5 --change -3 --type damage
#   Apply a single stock adjustment.

import click
from flask.cli import with_appcontext

from .errors import StockroomError
from .extensions import db
from .services.filter_pipeline import FilterSpec, visible
from .services.products_service import list_active_products
from .services.stock_ledger import apply_adjustment
from .models import ADJUSTMENT_TYPES


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables."""
    db.create_all()
    click.echo("Database tables created.")


@system_group.command('reset-db')
@with_appcontext
@click.option('--yes', is_flag=True, help='Skip confirmation')
def reset_db(yes):
    """Drop and recreate all tables. Deletes all data."""
    if not yes:
        click.confirm('This will DELETE ALL DATA. Continue?', abort=True)
    db.drop_all()
    db.create_all()
    click.echo("Database reset complete.")


@click.group('inventory')
def inventory_group():
    """Stock inspection and adjustment commands."""


@inventory_group.command('low-stock')
@with_appcontext
@click.option('--store-id', type=int, required=True, help='Store ID')
def low_stock(store_id):
    """List out-of-stock and low-stock products, lowest stock first."""
    try:
        products = list_active_products(store_id)
    except StockroomError as e:
        raise click.ClickException(str(e))

    rows = []
    for level in ("out", "low"):
        spec = FilterSpec(stock_level=level, sort_by="stock", sort_order="asc")
        rows.extend((level, p) for p in visible(products, spec))

    if not rows:
        click.echo("No low-stock products.")
        return

    for level, p in rows:
        click.echo(
            f"{level.upper():<4} id={p.id} sku={p.sku or '-'} name={p.name} "
            f"qty={p.stock_quantity} threshold={p.low_stock_threshold}"
        )


@inventory_group.command('adjust')
@with_appcontext
@click.option('--store-id', type=int, required=True, help='Store ID')
@click.option('--product-id', type=int, required=True, help='Product ID')
@click.option('--change', 'quantity_change', type=int, required=True, help='Signed quantity change')
@click.option('--type', 'adjustment_type', type=click.Choice(ADJUSTMENT_TYPES), default='manual', show_default=True)
@click.option('--reason', help='Optional free-text reason')
def adjust(store_id, product_id, quantity_change, adjustment_type, reason):
    """Apply one stock adjustment."""
    try:
        result = apply_adjustment(
            store_id=store_id,
            product_id=product_id,
            quantity_change=quantity_change,
            adjustment_type=adjustment_type,
            reason=reason,
        )
    except StockroomError as e:
        raise click.ClickException(str(e))

    click.echo(f"Product {product_id}: {result.previous_quantity} -> {result.new_quantity}")


def register_commands(app):
    app.cli.add_command(system_group)
    app.cli.add_command(inventory_group)
