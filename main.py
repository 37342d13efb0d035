"""
Command line entry point for the shop ledger client.

Every command opens its page through the route guard, runs one action on the
page handler and prints the resulting message. Destructive actions ask for
confirmation unless ``--yes`` is given.
"""

import sys
from datetime import datetime
from typing import Optional

import click

from authorizer import open_route
from handlers import AuthHandler
from handlers.base import BaseHandler
from services.api_client import ShopAPIClient
from services.config import config
from services.invoices import local_time
from services.session import SessionManager
from services.token_store import FileTokenStore
from utils.logging import configure_logging
from utils.messages import format_amount, set_locale, translate


class App:
    """Objects shared by the commands of one invocation."""

    def __init__(self, assume_yes: bool = False):
        self.assume_yes = assume_yes
        self.sessions = SessionManager(ShopAPIClient(), FileTokenStore(config.token_file))
        self.sessions.restore()

    def confirm(self, message: str) -> bool:
        return self.assume_yes or click.confirm(message, default=False)

    def page(self, path: str) -> BaseHandler:
        decision, handler = open_route(self.sessions, path, self.confirm)
        if handler is None:
            key = "login_required" if self.sessions.session is None else "not_permitted"
            click.secho(translate(key), fg="red", err=True)
            sys.exit(1)
        return handler


pass_app = click.make_pass_decorator(App)


def report(handler: BaseHandler) -> None:
    """Print the handler's message; exit with status 1 on error."""
    if handler.state.error:
        click.secho(handler.state.error, fg="red", err=True)
        sys.exit(1)
    if handler.state.success:
        click.secho(handler.state.success, fg="green")


@click.group()
@click.option("--yes", "-y", is_flag=True, help="Answer yes to every confirmation")
@click.option("--locale", default=None, help="Message language (en or vi)")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, yes: bool, locale: Optional[str], verbose: bool):
    """Shop ledger client: products, transactions and customer debts."""
    configure_logging(
        "DEBUG" if verbose else config.log_level, structured=config.structured_logging
    )
    set_locale(locale or config.locale)
    ctx.obj = App(assume_yes=yes)


# Session


@cli.command()
@click.option("--email", prompt=True)
@click.option("--password", prompt=True, hide_input=True)
@pass_app
def login(app: App, email: str, password: str):
    """Log in and store the token."""
    handler = AuthHandler(app.sessions)
    session = handler.login(email, password)
    report(handler)
    click.secho(f"Logged in as {session.username} ({session.role.value})", fg="green")


@cli.command()
@click.option("--username", prompt=True)
@click.option("--email", prompt=True)
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
@pass_app
def register(app: App, username: str, email: str, password: str):
    """Create an account."""
    handler = AuthHandler(app.sessions)
    handler.register(username, email, password)
    report(handler)
    click.secho(f"Account {username} created, you can now log in", fg="green")


@cli.command()
@pass_app
def logout(app: App):
    """Forget the stored token."""
    open_route(app.sessions, "/logout")
    click.echo("Logged out")


@cli.command()
@pass_app
def whoami(app: App):
    """Show the logged-in user."""
    session = app.sessions.session
    if session is None:
        click.secho(translate("login_required"), fg="red", err=True)
        sys.exit(1)
    click.echo(f"{session.username} <{session.email or '-'}> role={session.role.value}")


# Catalog


@cli.group()
def products():
    """Browse and maintain products."""


@products.command("list")
@click.option("--search", default="")
@click.option("--category", default="")
@click.option("--status", type=click.Choice(["", "in_stock", "out_of_stock"]), default="")
@click.option("--min-price", default=None)
@click.option("--max-price", default=None)
@click.option("--sort-by", default="createdAt", show_default=True)
@click.option("--order", type=click.Choice(["asc", "desc"]), default="desc", show_default=True)
@click.option("--page", default=1, show_default=True)
@pass_app
def products_list(app: App, search, category, status, min_price, max_price, sort_by, order, page):
    """List products matching the filters."""
    handler = app.page("/products")
    handler.apply_filters(
        search=search,
        category=category,
        status=status,
        min_price=min_price,
        max_price=max_price,
        sort_by=sort_by,
        order=order,
    )
    if page > 1 and not handler.state.error:
        handler.go_to_page(page)
    report(handler)

    for product in handler.products:
        click.echo(
            f"{product.id}  {product.sku:<10} {product.name:<30} "
            f"{format_amount(product.price):>12}  qty={product.quantity}  {product.status.value}"
        )
    click.echo(f"Page {handler.query.page}/{handler.total_pages}")


@products.command("add")
@click.option("--sku", prompt=True)
@click.option("--name", prompt=True)
@click.option("--price", prompt=True)
@click.option("--quantity", prompt=True)
@click.option("--category", default=None)
@pass_app
def products_add(app: App, sku, name, price, quantity, category):
    """Add a product (admin)."""
    handler = app.page("/products")
    handler.add_product(
        {"sku": sku, "name": name, "price": price, "quantity": quantity, "category": category}
    )
    report(handler)


@products.command("delete")
@click.argument("product_id")
@pass_app
def products_delete(app: App, product_id: str):
    """Delete a product (admin)."""
    handler = app.page("/products")
    handler.delete_product(product_id)
    report(handler)


@products.command("buy")
@click.argument("lines", nargs=-1, required=True)
@click.option("--user", "cart_user", default="", help="Buyer when not logged in as one")
@pass_app
def products_buy(app: App, lines, cart_user: str):
    """
    Check out a cart given as PRODUCT_ID:QUANTITY pairs.
    """
    handler = app.page("/products")
    handler.load()
    report(handler)

    for line in lines:
        product_id, _, quantity = line.partition(":")
        product = handler.product(product_id)
        if product is None:
            click.secho(f"Unknown product {product_id}", fg="red", err=True)
            sys.exit(1)
        handler.add_to_cart(product)
        handler.update_cart_quantity(product, quantity or 1)
        report(handler)

    click.echo(f"Total: {format_amount(handler.cart.total())}")
    handler.checkout(cart_user)
    report(handler)


@cli.group()
def categories():
    """Browse and maintain categories."""


@categories.command("list")
@pass_app
def categories_list(app: App):
    handler = app.page("/categories")
    handler.load()
    report(handler)
    for category in handler.categories:
        click.echo(f"{category.id}  {category.name}")


@categories.command("add")
@click.argument("name")
@pass_app
def categories_add(app: App, name: str):
    handler = app.page("/categories")
    handler.add_category(name)
    report(handler)


@categories.command("delete")
@click.argument("category_id")
@pass_app
def categories_delete(app: App, category_id: str):
    handler = app.page("/categories")
    handler.delete_category(category_id)
    report(handler)


# Transactions


@cli.group()
def transactions():
    """List and create transactions."""


@transactions.command("list")
@pass_app
def transactions_list(app: App):
    """List transactions grouped into daily invoices, newest first."""
    handler = app.page("/transactions")
    handler.load()
    report(handler)
    for invoice in handler.invoices:
        click.echo(
            f"{local_time(invoice.date):%d/%m/%Y}  {invoice.user:<20} "
            f"{format_amount(invoice.total_amount):>12}  {invoice.status.value}"
        )


@transactions.command("create")
@click.option("--user", prompt=True)
@click.option("--item", "items", multiple=True, help="PRODUCT_ID:QUANTITY")
@click.option("--total", default=None, help="Manual total when no items are given")
@pass_app
def transactions_create(app: App, user: str, items, total):
    """Create a transaction (admin)."""
    handler = app.page("/transactions")
    lines = []
    for item in items:
        product_id, _, quantity = item.partition(":")
        lines.append({"product_id": product_id, "quantity": quantity or 1})
    handler.create(user, items=lines, total_amount=total)
    report(handler)


# Debts


@cli.group()
def debts():
    """Debt dashboard (admin)."""


@debts.command("summary")
@click.option("--user", "search", default="", help="Only debts of this username")
@pass_app
def debts_summary(app: App, search: str):
    """Show outstanding debt per user."""
    handler = app.page("/debts")
    handler.search = search
    handler.load()
    report(handler)
    for row in handler.summary:
        last = f"{row.last_transaction:%d/%m/%Y}" if row.last_transaction else "-"
        click.echo(
            f"{row.user:<20} {format_amount(row.total_debt):>12}  "
            f"{row.transaction_count:>4} transactions  last {last}"
        )
    click.echo(f"Total: {format_amount(handler.total_debt)}")


@debts.command("invoices")
@click.argument("username")
@pass_app
def debts_invoices(app: App, username: str):
    """Show the daily invoices of one user."""
    handler = app.page("/debts")
    handler.load()
    details = handler.view_debt_details(username)
    report(handler)
    for invoice in details.invoices:
        click.echo(f"{local_time(invoice.date):%d/%m/%Y}  {format_amount(invoice.total_amount):>12}")
        for item in invoice.items:
            name = getattr(item.product, "name", item.product or "-")
            click.echo(f"    {name:<30} x{item.quantity}  {format_amount(item.line_total):>12}")


@debts.command("set")
@click.argument("user_id")
@click.argument("amount")
@pass_app
def debts_set(app: App, user_id: str, amount: str):
    """Replace a user's debt with AMOUNT."""
    handler = app.page("/debts")
    handler.set_debt(user_id, amount)
    report(handler)


@debts.command("mark-paid")
@click.argument("transaction_id")
@pass_app
def debts_mark_paid(app: App, transaction_id: str):
    handler = app.page("/debts")
    handler.mark_paid(transaction_id)
    report(handler)


@debts.command("add-entry")
@click.argument("username")
@click.argument("amount")
@click.option("--date", "when", type=click.DateTime(), default=None)
@click.option("--note", default="")
@pass_app
def debts_add_entry(app: App, username: str, amount: str, when: Optional[datetime], note: str):
    """Record a manual debt for USERNAME."""
    handler = app.page("/debts")
    handler.record_debt_entry(username, amount, when, note)
    report(handler)


@cli.group("debt-list")
def debt_list():
    """Debt balances per user (admin)."""


@debt_list.command("show")
@click.option("--search", default="")
@pass_app
def debt_list_show(app: App, search: str):
    handler = app.page("/debt-list")
    handler.load()
    report(handler)
    for user in handler.filtered_users(search):
        updated = f"{user.last_debt_update:%d/%m/%Y %H:%M}" if user.last_debt_update else "-"
        click.echo(f"{user.id}  {user.username:<20} {format_amount(user.debt_amount):>12}  {updated}")


def _debt_list_user(handler, user_id: str):
    handler.load()
    report(handler)
    user = next((u for u in handler.users if u.id == user_id), None)
    if user is None:
        click.secho(translate("user_not_found"), fg="red", err=True)
        sys.exit(1)
    return user


@debt_list.command("add")
@click.argument("user_id")
@click.argument("amount")
@click.option("--note", default=None)
@pass_app
def debt_list_add(app: App, user_id: str, amount: str, note: Optional[str]):
    """Increase a user's debt by AMOUNT."""
    handler = app.page("/debt-list")
    user = _debt_list_user(handler, user_id)
    handler.add_debt(user, amount, note)
    report(handler)


@debt_list.command("delete")
@click.argument("user_id")
@pass_app
def debt_list_delete(app: App, user_id: str):
    handler = app.page("/debt-list")
    handler.delete_debt(user_id)
    report(handler)


@debt_list.command("history")
@click.argument("user_id")
@pass_app
def debt_list_history(app: App, user_id: str):
    handler = app.page("/debt-list")
    user = _debt_list_user(handler, user_id)
    handler.view_history(user)
    report(handler)
    for entry in handler.history:
        sign = "+" if entry.type.value == "increase" else "-"
        click.echo(
            f"{entry.date:%d/%m/%Y %H:%M}  {sign}{format_amount(entry.change_amount):>12}  "
            f"= {format_amount(entry.amount):>12}  {entry.note}"
        )


# Users


@cli.group()
def users():
    """Manage accounts (admin)."""


@users.command("list")
@pass_app
def users_list(app: App):
    handler = app.page("/users")
    handler.load()
    report(handler)
    for user in handler.users:
        click.echo(f"{user.id}  {user.username:<20} {user.email or '-':<30} {user.role.value}")


@users.command("add")
@click.option("--username", prompt=True)
@click.option("--email", prompt=True)
@click.option("--password", prompt=True, hide_input=True)
@click.option("--role", type=click.Choice(["user", "admin"]), default="user", show_default=True)
@pass_app
def users_add(app: App, username: str, email: str, password: str, role: str):
    handler = app.page("/users")
    handler.add_user(username, email, password, role)
    report(handler)


@users.command("delete")
@click.argument("user_id")
@pass_app
def users_delete(app: App, user_id: str):
    handler = app.page("/users")
    handler.delete_user(user_id)
    report(handler)


if __name__ == "__main__":
    cli()
