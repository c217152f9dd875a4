# Overview: Flask CLI command groups for database setup, catalog inspection and reports.

# backend/tillbook/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System:
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - python -m flask system wipe --yes
#   Clear sales, expenses and held carts; keep products, suppliers and customers.
#
# Catalog:
# - python -m flask catalog list [--search cake]
#   List products with prices and stock.
# - python -m flask catalog add-product --name "Butter Cake" --category sweets --supplier "Golden Flour Co." \
#       --purchase-price 300 --bulk-price 400 --individual-price 500 --stock 10
#   Add a product.
# - python -m flask catalog low-stock [--threshold 5]
#   List products at or below the threshold.
#
# Reports:
# - python -m flask reports show daily [--date 2026-10-18]
#   Print a report (daily, monthly, product, profit).
# - python -m flask reports export monthly [--date 2026-10-18]
#   Write the report to REPORT_EXPORT_DIR.

import click
from flask import current_app
from flask.cli import with_appcontext

from .errors import PosError
from .extensions import db
from .money import format_mmk
from .services import catalog_service, reporting_service
from .services.session_service import TerminalSession


def _store():
    return current_app.extensions["tillbook"]["store"]


def _cli_session() -> TerminalSession:
    """An admin session for writes made from the command line."""
    store = _store()
    products = {p["id"]: p for p in store.list_all("products")}
    customers = {c["id"]: c for c in store.list_all("customers")}
    return TerminalSession("cli", True, products, customers)


@click.group('system')
def system_group():
    """Database setup and repair commands."""


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """Rebuild an empty till database. Catalog and ledgers are both lost."""
    if not yes:
        click.confirm("WARN Products, customers, sales and expenses will all be lost. Continue?", abort=True)

    db.drop_all()
    db.create_all()
    tables = ", ".join(sorted(db.metadata.tables))
    click.echo(f"PASS Till database rebuilt ({tables}).")


@system_group.command('wipe')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def wipe_data(yes):
    """
    Clear the ledgers while keeping master data.

    Keeps: products (stock and sales counts as they are), suppliers, customers.
    Removes: sales, expenses, held carts.
    """
    if not yes:
        click.confirm("WARN This will DELETE all sales, expenses and held carts. Are you sure?", abort=True)

    from .models import Sale, Expense, HeldCart

    # Expenses reference sales
    counts = {}
    for model in (Expense, HeldCart, Sale):
        counts[model.__tablename__] = db.session.query(model).delete()
    db.session.commit()

    for table, count in counts.items():
        click.echo(f"  {table}: {count} deleted")
    click.echo("PASS Wipe complete.")


@click.group('catalog')
def catalog_group():
    """Catalog inspection and maintenance."""


@catalog_group.command('list')
@click.option('--search', default=None, help='Filter by name or category')
@with_appcontext
def list_products(search):
    """List products."""
    products = catalog_service.search_products(_store(), search)
    if not products:
        click.echo("No products found.")
        return

    for p in products:
        click.echo(
            f"  [{p['id']}] {p['name']} ({p['category']}) "
            f"retail={format_mmk(p['individual_price'])} wholesale={format_mmk(p['bulk_price'])} "
            f"stock={p['stock']} sold={p['sales_count']}"
        )


@catalog_group.command('add-product')
@click.option('--name', prompt=True)
@click.option('--category', default='snacks', show_default=True)
@click.option('--supplier', prompt=True)
@click.option('--purchase-price', prompt=True)
@click.option('--bulk-price', prompt=True)
@click.option('--individual-price', prompt=True)
@click.option('--stock', prompt=True)
@with_appcontext
def add_product(name, category, supplier, purchase_price, bulk_price, individual_price, stock):
    """Add a product."""
    try:
        product = catalog_service.add_product(_cli_session(), _store(), {
            "name": name,
            "category": category,
            "supplier": supplier,
            "purchase_price": purchase_price,
            "bulk_price": bulk_price,
            "individual_price": individual_price,
            "stock": stock,
        })
    except PosError as e:
        raise click.ClickException(e.message)

    click.echo(f"PASS Created product: {product['name']} (id={product['id']})")


@catalog_group.command('low-stock')
@click.option('--threshold', type=int, default=None, help='Defaults to LOW_STOCK_THRESHOLD')
@with_appcontext
def low_stock(threshold):
    """List products at or below the stock threshold."""
    if threshold is None:
        threshold = current_app.config["LOW_STOCK_THRESHOLD"]
    products = reporting_service.low_stock(_store(), threshold)
    if not products:
        click.echo(f"No products at or below {threshold}.")
        return
    for p in products:
        click.echo(f"  [{p['id']}] {p['name']}: {p['stock']} left")


@click.group('reports')
def reports_group():
    """Text reports."""


@reports_group.command('show')
@click.argument('report_type', type=click.Choice(reporting_service.REPORT_TYPES))
@click.option('--date', 'target_date', default=None, help='YYYY-MM-DD (daily/monthly)')
@with_appcontext
def show_report(report_type, target_date):
    """Print a report."""
    try:
        click.echo(reporting_service.render_report(_store(), report_type, target_date), nl=False)
    except PosError as e:
        raise click.ClickException(e.message)


@reports_group.command('export')
@click.argument('report_type', type=click.Choice(reporting_service.REPORT_TYPES))
@click.option('--date', 'target_date', default=None, help='YYYY-MM-DD (daily/monthly)')
@with_appcontext
def export_report(report_type, target_date):
    """Write a report to REPORT_EXPORT_DIR."""
    try:
        path = reporting_service.export_report(
            _store(), report_type, current_app.config["REPORT_EXPORT_DIR"], target_date=target_date,
        )
    except PosError as e:
        raise click.ClickException(e.message)
    click.echo(f"PASS Report exported: {path}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(catalog_group)
    app.cli.add_command(reports_group)
