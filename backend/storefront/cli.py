# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/storefront/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init-db
#   Create all tables on the default (superuser) connection. Prefer `flask db upgrade`
#   against PostgreSQL, which also creates the role logins and row-level security.
# - python -m flask system seed
#   Idempotent demo data: categories, providers, apps, positions and staff accounts.
#
# Staff accounts:
# - python -m flask employees list
# - python -m flask employees create --username mod --password "secret1" --position Moderator
#
# Orders:
# - python -m flask orders advance
#   Run one order status pass (CREATED -> PROCESSING -> COMPLETED).
# - python -m flask orders run-updater
#   Run the status poll loop in the foreground (Ctrl+C to stop).

from datetime import date
from decimal import Decimal

import click
from flask import current_app
from flask.cli import with_appcontext

from .extensions import db
from .models import App, Category, Employee, Provider
from .services import admin_service, order_service
from .services.admin_service import AdminError
from .services.auth_service import hash_password, resolve_employee_role
from .services.order_status_updater import OrderStatusUpdater
from .time_utils import utcnow


DEFAULT_STAFF_PASSWORD = "Password123!"

SEED_CATEGORIES = [
    ("Games", "Video games for every taste"),
    ("Productivity", "Office, notes and planning tools"),
    ("Utilities", "System and maintenance tools"),
    ("Education", "Courses and learning apps"),
]

SEED_PROVIDERS = [
    ("Northwind Studios", "Developer", "Canada", date(2011, 5, 3), "https://northwind.example"),
    ("Bluepeak Publishing", "Publisher", "Germany", date(2004, 9, 14), "https://bluepeak.example"),
]

# (title, description, cost_price, price, release_date, category, provider)
SEED_APPS = [
    ("Star Drift", "Arcade space shooter with online leaderboards",
     "4.00", "9.99", date(2024, 3, 12), "Games", "Northwind Studios"),
    ("Focus Board", "Kanban board for personal projects",
     "2.50", "4.99", date(2023, 11, 2), "Productivity", "Northwind Studios"),
    ("Disk Sweeper", "Find and remove large unused files",
     "1.00", "2.99", date(2022, 6, 21), "Utilities", "Bluepeak Publishing"),
    ("Word Trainer", "Spaced repetition vocabulary course",
     "3.00", "7.49", date(2024, 8, 30), "Education", "Bluepeak Publishing"),
]

SEED_STAFF = [
    ("admin", "Administrator"),
    ("moderator", "Moderator"),
    ("support", "Support specialist"),
    ("analyst", "Analyst"),
]


@click.group('system')
def system_group():
    """System bootstrap commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables on the default database connection."""
    db.create_all()
    click.echo("PASS Tables created")


@system_group.command('seed')
@with_appcontext
def seed():
    """
    Load demo catalog data and one staff account per role.

    Safe to run repeatedly: existing rows (matched by title or username)
    are left untouched.
    """
    click.echo("START Seeding storefront data...")

    categories = {}
    for title, description in SEED_CATEGORIES:
        category = db.session.query(Category).filter_by(title=title).first()
        if category is None:
            category = Category(title=title, description=description)
            db.session.add(category)
            db.session.flush()
            click.echo(f"PASS Created category: {title}")
        categories[title] = category

    providers = {}
    for name, provider_type, country, founded, web in SEED_PROVIDERS:
        provider = db.session.query(Provider).filter_by(name=name).first()
        if provider is None:
            provider = Provider(
                name=name,
                provider_type=provider_type,
                country=country,
                founded_date=founded,
                web=web,
            )
            db.session.add(provider)
            db.session.flush()
            click.echo(f"PASS Created provider: {name}")
        providers[name] = provider

    for title, description, cost, price, released, category, provider in SEED_APPS:
        if db.session.query(App).filter_by(title=title).first():
            continue
        db.session.add(App(
            title=title,
            description=description,
            cost_price=Decimal(cost),
            price=Decimal(price),
            release_date=released,
            category_id=categories[category].id,
            provider_id=providers[provider].id,
        ))
        click.echo(f"PASS Created app: {title}")

    for username, position_title in SEED_STAFF:
        if db.session.query(Employee).filter_by(username=username).first():
            click.echo(f"WARN  Employee '{username}' already exists, skipping...")
            continue
        position = admin_service.get_or_create_position(db.session, position_title)
        db.session.add(Employee(
            username=username,
            password_hash=hash_password(DEFAULT_STAFF_PASSWORD),
            position_id=position.id,
            hire_date=utcnow().date(),
        ))
        click.echo(f"PASS Created employee: {username} ({position_title})")

    db.session.commit()

    click.echo("\nDefault staff credentials (CHANGE IN PRODUCTION!):")
    for username, _ in SEED_STAFF:
        click.echo(f"   {username:<10} / {DEFAULT_STAFF_PASSWORD}")


@click.group('employees')
def employees_group():
    """Staff account commands."""


@employees_group.command('list')
@with_appcontext
def list_employees():
    """List staff accounts with their position and resolved role."""
    employees = db.session.query(Employee).order_by(Employee.id).all()
    if not employees:
        click.echo("No employees found.")
        return

    click.echo(f"{'ID':<5} {'Username':<20} {'Position':<25} {'Role':<10}")
    click.echo("-" * 62)
    for employee in employees:
        title = employee.position.title if employee.position else ""
        role = resolve_employee_role(title, employee.username)
        click.echo(f"{employee.id:<5} {employee.username:<20} {title:<25} {role:<10}")


@employees_group.command('create')
@click.option('--username', prompt=True)
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
@click.option('--position', prompt=True, help='Position title, e.g. "Moderator"')
@with_appcontext
def create_employee(username, password, position):
    """Create a staff account."""
    if len(password) < 6:
        raise click.ClickException("Password must be at least 6 characters")
    try:
        employee = admin_service.create_employee(username, password, position)
    except AdminError as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Created employee {employee['username']} (ID: {employee['id']}, role: {employee['role']})")


@click.group('orders')
def orders_group():
    """Order status commands."""


@orders_group.command('advance')
@with_appcontext
def advance_orders():
    """Run one order status pass."""
    moved = order_service.advance_order_statuses()
    click.echo(f"PASS {moved['processing']} to PROCESSING, {moved['completed']} to COMPLETED")


@orders_group.command('run-updater')
@click.option('--interval', type=float, default=None, help='Seconds between passes')
@with_appcontext
def run_updater(interval):
    """Advance order statuses forever (foreground)."""
    updater = OrderStatusUpdater(current_app._get_current_object(), interval=interval)
    click.echo(f"START Order status updater, every {updater.interval}s (Ctrl+C to stop)")
    updater.run_forever()


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(employees_group)
    app.cli.add_command(orders_group)
