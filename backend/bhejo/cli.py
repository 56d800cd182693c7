# Overview: Flask CLI command groups for bootstrap, accounts, and maintenance.

# backend/bhejo/cli.py
# Commands Legend (run from the backend directory):
# - Set FLASK_APP to wsgi.py.
# - Use: python -m flask <group> <command> [options]
#
# System:
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Accounts:
# - python -m flask users list
#   List all users with admin flag and active status.
# - python -m flask users create --username admin --password "Password123!" --admin
#   Create a user (prompts if options are omitted).
# - python -m flask users promote admin [--revoke]
#   Grant (or with --revoke, drop) the admin capability.
#
# Maintenance:
# - python -m flask maintenance cleanup-sessions --retention-days 30
#   Delete expired/revoked session tokens older than the retention window.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import User
from .services import auth_service, session_service
from .services.auth_service import AccountExistsError, PasswordValidationError


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Confirm destructive reset')
@with_appcontext
def reset_db_command(yes):
    """Drop and recreate all tables."""
    if not yes:
        click.echo("Refusing to reset without --yes")
        return
    db.drop_all()
    db.create_all()
    click.echo("Database reset complete")


@click.group('users')
def users_group():
    """Account inspection and bootstrap commands."""


@users_group.command('list')
@with_appcontext
def list_users_command():
    users = db.session.query(User).order_by(User.id.asc()).all()
    if not users:
        click.echo("No users")
        return
    for user in users:
        flags = []
        if user.admin:
            flags.append("admin")
        if not user.is_active:
            flags.append("inactive")
        suffix = f" [{', '.join(flags)}]" if flags else ""
        click.echo(f"{user.id}\t{user.username}{suffix}")


@users_group.command('create')
@click.option('--username', prompt=True)
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
@click.option('--firstname', default=None)
@click.option('--lastname', default=None)
@click.option('--admin', is_flag=True, help='Grant the admin capability')
@with_appcontext
def create_user_command(username, password, firstname, lastname, admin):
    try:
        user = auth_service.create_user(
            username=username,
            password=password,
            firstname=firstname,
            lastname=lastname,
            admin=admin,
        )
    except (AccountExistsError, PasswordValidationError) as e:
        raise click.ClickException(str(e))
    click.echo(f"Created user {user.username} (id={user.id}, admin={user.admin})")


@users_group.command('promote')
@click.argument('username')
@click.option('--revoke', is_flag=True, help='Drop the admin capability instead')
@with_appcontext
def promote_user_command(username, revoke):
    try:
        user = auth_service.set_admin(username, admin=not revoke)
    except ValueError as e:
        raise click.ClickException(str(e))
    click.echo(f"{user.username}: admin={user.admin}")


@click.group('maintenance')
def maintenance_group():
    """Periodic housekeeping."""


@maintenance_group.command('cleanup-sessions')
@click.option('--retention-days', default=30, show_default=True, type=int)
@with_appcontext
def cleanup_sessions_command(retention_days):
    deleted = session_service.cleanup_expired_sessions(retention_days=retention_days)
    click.echo(f"Deleted {deleted} session(s)")


def register_commands(app):
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(maintenance_group)
