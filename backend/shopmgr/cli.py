# Overview: click command groups for day-to-day shop operations.

# backend/shopmgr/cli.py
# Commands Legend:
# Credentials come from --user/--password, SHOPMGR_USER/SHOPMGR_PASSWORD, or a prompt.
# The data directory comes from --data-dir or SHOPMGR_DATA_DIR (default: current directory).
#
# System:
# - shopmgr system init
#   Create users.csv with the default admin/admin account if it is missing.
# - shopmgr system backup
#   Copy every store file into backups/backup_YYYYmmdd_HHMMSS/.
# - shopmgr system passwd
#   Change the logged-in user's password.
#
# Products (MANAGE_PRODUCTS):
# - shopmgr products add --name Mouse --category Peripherals --brand Logi --cost-price 5 --sell-price 10 --stock 20 --min-stock 5
# - shopmgr products list [--json]
# - shopmgr products search TERM [--json]
# - shopmgr products restock PRODUCT_ID QUANTITY
# - shopmgr products adjust PRODUCT_ID --delta=-3
#
# Customers (MANAGE_CUSTOMERS):
# - shopmgr customers add --name ... --phone ... --email ... --address ...
# - shopmgr customers list [--json]
# - shopmgr customers search TERM [--json]
#
# Sales (MANAGE_SALES):
# - shopmgr sales make --product-id 1 --customer-id 2 --quantity 3
#   Without --product-id the product list is shown before the prompt.
#   --customer-id 0 registers a new customer from --customer-name/--customer-phone/... (prompted if omitted).
# - shopmgr sales list [--json]
#
# Reports (VIEW_REPORTS):
# - shopmgr reports low-stock [--threshold 5]
# - shopmgr reports summary [--json]
# - shopmgr reports profit [--json]
#
# Users (MANAGE_USERS):
# - shopmgr users add --username bob --role cashier
# - shopmgr users list [--json]
# - shopmgr users edit USER_ID [--role manager | --perm MANAGE_SALES ...] [--active/--inactive]
# - shopmgr users delete USER_ID [--yes]
# - shopmgr users perms [--category SALES]
#   List grantable permissions and role presets (no login needed).

import json
from functools import wraps
from pathlib import Path

import click

from . import create_app
from .config import Config
from .permissions import (
    DEFAULT_ROLE_PERMISSIONS,
    PERMISSION_COLUMNS,
    PermissionCategory,
    get_all_permission_codes,
    get_permission_definition,
    get_permissions_by_category,
    get_role_permissions,
    normalize_permission_codes,
)
from .services import (
    auth_service,
    customers_service,
    maintenance_service,
    products_service,
    reporting_service,
    sales_service,
)
from .services.permission_service import PermissionDeniedError
from .storage import StorageError
from .validation import AuthenticationError, NotFoundError, ValidationError

HANDLED_ERRORS = (
    ValidationError,
    NotFoundError,
    PermissionDeniedError,
    AuthenticationError,
    StorageError,
)


class CliState:
    """Lazily built app and session for one invocation."""

    def __init__(self, config: Config, username=None, password=None):
        self.config = config
        self.username = username
        self.password = password
        self._app = None
        self._session = None

    @property
    def app(self):
        if self._app is None:
            self._app = create_app(self.config)
        return self._app

    @property
    def stores(self):
        return self.app.stores

    def session(self):
        if self._session is None:
            stores = self.stores
            username = self.username or click.prompt('Username')
            password = self.password or click.prompt('Password', hide_input=True)
            self._session = auth_service.login(stores, username, password)
        return self._session


def handle_errors(f):
    """Print typed failures as ``FAIL <message>`` on stderr and exit 1."""
    @wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except HANDLED_ERRORS as e:
            click.echo(f"FAIL {e}", err=True)
            click.get_current_context().exit(1)

    return wrapper


def _echo_json(items):
    click.echo(json.dumps([i.to_dict() for i in items], indent=2))


def _permissions_from_options(role, perms):
    if role and perms:
        raise click.UsageError('Use either --role or --perm, not both')
    if role:
        return get_role_permissions(role)
    try:
        return normalize_permission_codes(perms)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint='--perm')


def _print_products(products):
    if not products:
        click.echo("No products found.")
        return
    click.echo(f"{'ID':<5} {'Name':<20} {'Category':<15} {'Brand':<12} {'Cost':>9} {'Price':>9} {'Stock':>6} {'Min':>5}")
    click.echo("=" * 86)
    for p in products:
        flag = " LOW" if p.is_low_stock else ""
        click.echo(
            f"{p.id:<5} {p.name:<20} {p.category:<15} {p.brand:<12} "
            f"{p.cost_price:>9.2f} {p.sell_price:>9.2f} {p.stock:>6} {p.min_stock_level:>5}{flag}"
        )


def _print_sale_catalogue(products):
    if not products:
        click.echo("No products found.")
        return
    click.echo(f"{'ID':<5} {'Name':<20} {'Brand':<12} {'Price':>9} {'Stock':>6}")
    click.echo("=" * 56)
    for p in products:
        click.echo(f"{p.id:<5} {p.name:<20} {p.brand:<12} {p.sell_price:>9.2f} {p.stock:>6}")


def _print_customers(customers):
    if not customers:
        click.echo("No customers found.")
        return
    click.echo(f"{'ID':<5} {'Name':<20} {'Phone':<15} {'Email':<25} {'Address'}")
    click.echo("=" * 86)
    for c in customers:
        click.echo(f"{c.id:<5} {c.name:<20} {c.phone:<15} {c.email:<25} {c.address}")


# =============================================================================
# ROOT GROUP
# =============================================================================

@click.group('shopmgr')
@click.option('--data-dir', type=click.Path(file_okay=False, path_type=Path), help='Directory holding the store files')
@click.option('--user', 'username', envvar='SHOPMGR_USER', help='Login username')
@click.option('--password', envvar='SHOPMGR_PASSWORD', help='Login password')
@click.option('--verbose', '-v', is_flag=True, help='Log INFO events to stderr')
@click.pass_context
def cli(ctx, data_dir, username, password, verbose):
    """Shop inventory, customers, sales and reports over flat files."""
    try:
        config = Config.from_env(data_dir=data_dir, log_level='INFO' if verbose else None)
    except ValueError as e:
        raise click.ClickException(f"Invalid configuration: {e}")
    ctx.obj = CliState(config, username=username, password=password)


# =============================================================================
# SYSTEM COMMANDS
# =============================================================================

@click.group('system')
def system_group():
    """Bootstrap and maintenance commands."""


@system_group.command('init')
@click.pass_obj
@handle_errors
def init_system(state):
    """Create the default administrator if users.csv is missing."""
    created = auth_service.ensure_default_user(state.stores)
    if created is None:
        click.echo(f"WARN  {state.config.users_path.name} already exists, skipping")
        return
    click.echo(f"PASS Created default administrator: {created.username} (ID: {created.id})")
    click.echo("\nSECURITY WARNING:")
    click.echo(f"   - Default credentials are {created.username} / {state.config.default_admin_password}")
    click.echo("   - Change the password immediately: shopmgr system passwd")


@system_group.command('backup')
@click.pass_obj
@handle_errors
def backup_cli(state):
    """Copy all store files into a timestamped backup directory."""
    state.session()
    target = maintenance_service.create_backup(state.config)
    click.echo(f"PASS Backup created: {target}")


@system_group.command('passwd')
@click.option('--old-password', prompt='Current password', hide_input=True)
@click.option('--new-password', prompt='New password', hide_input=True, confirmation_prompt=True)
@click.pass_obj
@handle_errors
def passwd_cli(state, old_password, new_password):
    """Change your own password."""
    session = state.session()
    auth_service.change_password(state.stores, session, old_password, new_password)
    click.echo(f"PASS Password changed for {session.username}")


# =============================================================================
# PRODUCT COMMANDS
# =============================================================================

@click.group('products')
def products_group():
    """Product catalogue and stock commands."""


@products_group.command('add')
@click.option('--name', prompt=True)
@click.option('--category', prompt=True)
@click.option('--brand', prompt=True)
@click.option('--cost-price', prompt=True, help='Unit cost, e.g. 5.00')
@click.option('--sell-price', prompt=True, help='Unit price, e.g. 10.00')
@click.option('--stock', type=click.IntRange(min=0), prompt=True)
@click.option('--min-stock', 'min_stock_level', type=click.IntRange(min=0), prompt='Minimum stock level')
@click.pass_obj
@handle_errors
def add_product_cli(state, name, category, brand, cost_price, sell_price, stock, min_stock_level):
    """Add a product."""
    product = products_service.create_product(
        state.stores,
        state.session(),
        name=name,
        category=category,
        brand=brand,
        cost_price=cost_price,
        sell_price=sell_price,
        stock=stock,
        min_stock_level=min_stock_level,
    )
    click.echo(f"PASS Created product: {product.name} (ID: {product.id})")


@products_group.command('list')
@click.option('--json', 'as_json', is_flag=True)
@click.pass_obj
@handle_errors
def list_products_cli(state, as_json):
    """List all products."""
    products = products_service.list_products(state.stores, state.session())
    if as_json:
        _echo_json(products)
    else:
        _print_products(products)


@products_group.command('search')
@click.argument('term')
@click.option('--json', 'as_json', is_flag=True)
@click.pass_obj
@handle_errors
def search_products_cli(state, term, as_json):
    """Find products whose name, category or brand contains TERM."""
    products = products_service.search_products(state.stores, state.session(), term)
    if as_json:
        _echo_json(products)
    else:
        _print_products(products)


@products_group.command('restock')
@click.argument('product_id', type=int)
@click.argument('quantity', type=int)
@click.pass_obj
@handle_errors
def restock_cli(state, product_id, quantity):
    """Receive QUANTITY units of a product."""
    product = products_service.restock_product(state.stores, state.session(), product_id, quantity)
    click.echo(f"PASS {product.name} stock is now {product.stock}")


@products_group.command('adjust')
@click.argument('product_id', type=int)
@click.option('--delta', type=int, required=True, help='Signed change, e.g. --delta=-2')
@click.pass_obj
@handle_errors
def adjust_cli(state, product_id, delta):
    """Apply a signed stock correction (clamped at zero)."""
    product = products_service.adjust_stock(state.stores, state.session(), product_id, delta)
    click.echo(f"PASS {product.name} stock is now {product.stock}")


# =============================================================================
# CUSTOMER COMMANDS
# =============================================================================

@click.group('customers')
def customers_group():
    """Customer directory commands."""


@customers_group.command('add')
@click.option('--name', prompt=True)
@click.option('--phone', prompt=True)
@click.option('--email', prompt=True)
@click.option('--address', prompt=True)
@click.pass_obj
@handle_errors
def add_customer_cli(state, name, phone, email, address):
    """Add a customer."""
    customer = customers_service.create_customer(
        state.stores, state.session(), name=name, phone=phone, email=email, address=address
    )
    click.echo(f"PASS Created customer: {customer.name} (ID: {customer.id})")


@customers_group.command('list')
@click.option('--json', 'as_json', is_flag=True)
@click.pass_obj
@handle_errors
def list_customers_cli(state, as_json):
    """List all customers."""
    customers = customers_service.list_customers(state.stores, state.session())
    if as_json:
        _echo_json(customers)
    else:
        _print_customers(customers)


@customers_group.command('search')
@click.argument('term')
@click.option('--json', 'as_json', is_flag=True)
@click.pass_obj
@handle_errors
def search_customers_cli(state, term, as_json):
    """Find customers whose name, phone or email contains TERM."""
    customers = customers_service.search_customers(state.stores, state.session(), term)
    if as_json:
        _echo_json(customers)
    else:
        _print_customers(customers)


# =============================================================================
# SALES COMMANDS
# =============================================================================

@click.group('sales')
def sales_group():
    """Sales recording commands."""


@sales_group.command('make')
@click.option('--product-id', type=int, default=None, help='Prompted after the product list if omitted')
@click.option('--customer-id', type=int, default=None)
@click.option('--quantity', type=int, default=None)
@click.option('--cashier', default=None, help='Defaults to the logged-in username')
@click.option('--customer-name')
@click.option('--customer-phone')
@click.option('--customer-email')
@click.option('--customer-address')
@click.pass_obj
@handle_errors
def make_sale_cli(state, product_id, customer_id, quantity, cashier,
                  customer_name, customer_phone, customer_email, customer_address):
    """Record a sale and decrement stock."""
    session = state.session()
    if product_id is None:
        _print_sale_catalogue(products_service.products_for_sale(state.stores, session))
        product_id = click.prompt('Product ID', type=int)
    if customer_id is None:
        customer_id = click.prompt('Customer ID (0 for new customer)', type=int)
    if quantity is None:
        quantity = click.prompt('Quantity', type=int)

    new_customer = None
    if customer_id == sales_service.NEW_CUSTOMER_ID:
        new_customer = {
            "name": customer_name or click.prompt('Customer name'),
            "phone": customer_phone or click.prompt('Customer phone'),
            "email": customer_email or click.prompt('Customer email'),
            "address": customer_address or click.prompt('Customer address'),
        }

    sale = sales_service.create_sale(
        state.stores,
        session,
        product_id,
        customer_id,
        quantity,
        cashier=cashier,
        new_customer=new_customer,
    )
    click.echo(
        f"PASS Sale {sale.id}: {sale.quantity} x product {sale.product_id} "
        f"for customer {sale.customer_id}, total {sale.total_price:.2f}"
    )


@sales_group.command('list')
@click.option('--json', 'as_json', is_flag=True)
@click.pass_obj
@handle_errors
def list_sales_cli(state, as_json):
    """List all sales."""
    sales = sales_service.list_sales(state.stores, state.session())
    if as_json:
        _echo_json(sales)
        return
    if not sales:
        click.echo("No sales found.")
        return
    click.echo(f"{'ID':<5} {'Product':<8} {'Customer':<9} {'Qty':>5} {'Total':>10}  {'Timestamp':<20} {'Cashier'}")
    click.echo("=" * 80)
    for s in sales:
        click.echo(
            f"{s.id:<5} {s.product_id:<8} {s.customer_id:<9} {s.quantity:>5} "
            f"{s.total_price:>10.2f}  {s.timestamp:<20} {s.cashier}"
        )


# =============================================================================
# REPORT COMMANDS
# =============================================================================

@click.group('reports')
def reports_group():
    """Stock and sales reports."""


@reports_group.command('low-stock')
@click.option('--threshold', type=click.IntRange(min=0), default=None,
              help="Report stock <= THRESHOLD (default: each product's minimum level)")
@click.option('--json', 'as_json', is_flag=True)
@click.pass_obj
@handle_errors
def low_stock_cli(state, threshold, as_json):
    """Products at or below their stock threshold."""
    products = reporting_service.low_stock_report(state.stores, state.session(), threshold=threshold)
    if as_json:
        _echo_json(products)
    else:
        _print_products(products)


@reports_group.command('summary')
@click.option('--json', 'as_json', is_flag=True)
@click.pass_obj
@handle_errors
def summary_cli(state, as_json):
    """Transactions, units sold, revenue and average sale value."""
    summary = reporting_service.sales_summary(state.stores, state.session())
    if as_json:
        click.echo(json.dumps(summary.to_dict(), indent=2))
        return
    click.echo(f"Total Transactions: {summary.transactions}")
    click.echo(f"Total Items Sold:   {summary.units_sold}")
    click.echo(f"Total Revenue:      {summary.revenue:.2f}")
    click.echo(f"Average Sale Value: {summary.average_sale:.2f}")


@reports_group.command('profit')
@click.option('--json', 'as_json', is_flag=True)
@click.pass_obj
@handle_errors
def profit_cli(state, as_json):
    """Revenue, cost of goods, profit and margin."""
    analysis = reporting_service.profit_analysis(state.stores, state.session())
    if as_json:
        click.echo(json.dumps(analysis.to_dict(), indent=2))
        return
    click.echo(f"Total Revenue: {analysis.revenue:.2f}")
    click.echo(f"Total Cost:    {analysis.cost:.2f}")
    click.echo(f"Total Profit:  {analysis.profit:.2f}")
    click.echo(f"Profit Margin: {analysis.margin_percent:.2f}%")


# =============================================================================
# USER MANAGEMENT COMMANDS
# =============================================================================

@click.group('users')
def users_group():
    """User account commands."""


@users_group.command('add')
@click.option('--username', prompt=True)
@click.option('--new-password', prompt='Password for the new user', hide_input=True, confirmation_prompt=True)
@click.option('--role', type=click.Choice(sorted(DEFAULT_ROLE_PERMISSIONS)), help='Permission preset')
@click.option('--perm', 'perms', multiple=True, type=click.Choice(PERMISSION_COLUMNS, case_sensitive=False),
              help='Grant one permission (repeatable)')
@click.option('--inactive', is_flag=True, help='Create the account disabled')
@click.pass_obj
@handle_errors
def add_user_cli(state, username, new_password, role, perms, inactive):
    """
    Create a user.

    Passwords need at least 4 characters and cannot contain commas, quotes or
    line breaks.
    """
    permissions = _permissions_from_options(role, perms)
    user = auth_service.create_user(
        state.stores,
        state.session(),
        username=username,
        password=new_password,
        permissions=permissions,
        is_active=not inactive,
    )
    click.echo(f"PASS Created user: {user.username} (ID: {user.id}) with {', '.join(sorted(user.permissions)) or 'no permissions'}")


@users_group.command('list')
@click.option('--json', 'as_json', is_flag=True)
@click.pass_obj
@handle_errors
def list_users_cli(state, as_json):
    """List all users with permissions and active status."""
    users = auth_service.list_users(state.stores, state.session())
    if as_json:
        _echo_json(users)
        return
    if not users:
        click.echo("No users found.")
        return
    click.echo(f"{'ID':<5} {'Username':<20} {'Active':<8} {'Permissions'}")
    click.echo("=" * 80)
    for u in users:
        active_str = "Yes" if u.is_active else "No"
        click.echo(f"{u.id:<5} {u.username:<20} {active_str:<8} {', '.join(sorted(u.permissions)) or '-'}")


@users_group.command('edit')
@click.argument('user_id', type=int)
@click.option('--role', type=click.Choice(sorted(DEFAULT_ROLE_PERMISSIONS)), help='Replace permissions with a preset')
@click.option('--perm', 'perms', multiple=True, type=click.Choice(PERMISSION_COLUMNS, case_sensitive=False),
              help='Replace permissions with these (repeatable)')
@click.option('--active/--inactive', default=None, help='Enable or disable the account')
@click.pass_obj
@handle_errors
def edit_user_cli(state, user_id, role, perms, active):
    """Change a user's permissions and/or active flag."""
    session = state.session()
    current = auth_service.get_user(state.stores, session, user_id)
    permissions = _permissions_from_options(role, perms) if (role or perms) else current.permissions
    is_active = current.is_active if active is None else active
    user = auth_service.update_user_permissions(
        state.stores, session, user_id, permissions=permissions, is_active=is_active
    )
    click.echo(
        f"PASS Updated user: {user.username} (ID: {user.id}) "
        f"active={'Yes' if user.is_active else 'No'} permissions={', '.join(sorted(user.permissions)) or '-'}"
    )


@users_group.command('delete')
@click.argument('user_id', type=int)
@click.option('--yes', is_flag=True, help='Skip the confirmation prompt')
@click.pass_obj
@handle_errors
def delete_user_cli(state, user_id, yes):
    """Delete a user account."""
    confirm = None if yes else (lambda u: click.confirm(f"Delete user '{u.username}' (ID: {u.id})?"))
    deleted = auth_service.delete_user(state.stores, state.session(), user_id, confirm=confirm)
    if deleted:
        click.echo(f"PASS Deleted user ID {user_id}")
    else:
        click.echo("WARN  Deletion cancelled")


@users_group.command('perms')
@click.option('--category', type=click.Choice([
    PermissionCategory.INVENTORY,
    PermissionCategory.CUSTOMERS,
    PermissionCategory.SALES,
    PermissionCategory.REPORTS,
    PermissionCategory.USERS,
], case_sensitive=False), help='Only show one category')
def list_perms_cli(category):
    """List the permission codes that can be granted to users."""
    if category:
        codes = [perm[0] for perm in get_permissions_by_category(category)]
    else:
        codes = get_all_permission_codes()

    click.echo(f"{'Code':<18} {'Category':<10} {'Description'}")
    click.echo("=" * 80)
    for code in codes:
        perm = get_permission_definition(code)
        click.echo(f"{perm['code']:<18} {perm['category']:<10} {perm['description']}")

    click.echo("\nRole presets:")
    for role, role_codes in sorted(DEFAULT_ROLE_PERMISSIONS.items()):
        click.echo(f"   {role:<8} -> {', '.join(role_codes)}")


cli.add_command(system_group)
cli.add_command(products_group)
cli.add_command(customers_group)
cli.add_command(sales_group)
cli.add_command(reports_group)
cli.add_command(users_group)


def main():
    cli()
