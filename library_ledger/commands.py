import click
from flask import current_app
from flask.cli import with_appcontext

from library_ledger.errors import LedgerError
from library_ledger.extensions import db
from library_ledger.models.user import ROLE_ADMIN
from library_ledger.services.auth_service import AuthService


@click.command("init-db")
@with_appcontext
def init_db_command():
    """Create all tables."""
    db.create_all()
    click.echo("Database tables created.")


@click.command("create-admin")
@click.argument("name")
@click.argument("email")
@click.argument("password")
@with_appcontext
def create_admin_command(name, email, password):
    """Create a librarian account."""
    try:
        user = AuthService.register(name=name, email=email, password=password, role=ROLE_ADMIN)
    except LedgerError as e:
        raise click.ClickException(str(e))
    current_app.logger.info(f"[auth] admin created user={user.id}")
    click.echo(f"Admin {user.email} created (id={user.id}).")


def register_commands(app):
    app.cli.add_command(init_db_command)
    app.cli.add_command(create_admin_command)
