# Overview: Flask CLI command groups for bootstrap, user and permission administration, and maintenance.

# backend/bitumen/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init [--username admin --email admin@bitumen.local --password "Password123!"]
#   Create all tables and an ADMIN user if no administrator exists yet.
#
# Users:
# - python -m flask users list [--all]
#   List users with role and active status.
# - python -m flask users create --username asha --email asha@bitumen.local --password "Password123!" \
#       --first-name Asha --last-name Rao --role SALES_EXECUTIVE [--with-defaults]
#   Create a user; --with-defaults seeds the role's default grants.
# - python -m flask users deactivate asha
#   Deactivate a user and delete their sessions.
#
# Permissions:
# - python -m flask perms list asha
#   Show a user's grants.
# - python -m flask perms grant asha CLIENT_MANAGEMENT VIEW
# - python -m flask perms revoke asha CLIENT_MANAGEMENT VIEW
#
# Sessions:
# - python -m flask sessions purge-expired
#   Delete expired session rows.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import User
from .permissions import DEFAULT_ROLE_GRANTS, MODULE_LABELS, Module, Role, parse_role
from .services import permission_service, session_service
from .services.auth_service import PasswordValidationError, create_user
from .validation import ConflictError


DEFAULT_ADMIN_PASSWORD = "Password123!"


def _get_user(username: str) -> User:
    user = db.session.query(User).filter_by(username=username).first()
    if not user:
        raise click.ClickException(f"User '{username}' not found")
    return user


@click.group('system')
def system_group():
    """System bootstrap commands."""


@system_group.command('init')
@click.option('--username', default='admin', help='Administrator username')
@click.option('--email', default='admin@bitumen.local', help='Administrator email')
@click.option('--password', default=DEFAULT_ADMIN_PASSWORD, help='Administrator password')
@with_appcontext
def init_system(username, email, password):
    """
    Create tables and bootstrap the first administrator.

    Idempotent: an existing ADMIN user means nothing is created.
    """
    click.echo("START Initializing database...")
    db.create_all()
    click.echo("PASS Tables created")

    admin = db.session.query(User).filter_by(role=Role.ADMIN.value).first()
    if admin:
        click.echo(f"WARN  Administrator '{admin.username}' already exists, skipping...")
        return

    try:
        user = create_user(
            username=username,
            email=email,
            password=password,
            first_name="System",
            last_name="Administrator",
            role=Role.ADMIN,
        )
    except (PasswordValidationError, ConflictError) as e:
        raise click.ClickException(str(e))

    click.echo(f"PASS Created administrator: {user.username} ({user.email})")
    if password == DEFAULT_ADMIN_PASSWORD:
        click.echo("WARN  Default password in use. Change it immediately in production!")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('list')
@click.option('--all', 'show_all', is_flag=True, help='Include inactive users')
@with_appcontext
def list_users(show_all):
    query = db.session.query(User)
    if not show_all:
        query = query.filter(User.is_active.is_(True))
    users = query.order_by(User.username).all()
    if not users:
        click.echo("No users found")
        return
    for user in users:
        status = "active" if user.is_active else "inactive"
        click.echo(f"{user.id:>4}  {user.username:<20} {user.role:<16} {status}")


@users_group.command('create')
@click.option('--username', prompt=True)
@click.option('--email', prompt=True)
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
@click.option('--first-name', prompt=True)
@click.option('--last-name', prompt=True)
@click.option('--role', default=Role.SALES_EXECUTIVE.value, show_default=True,
              type=click.Choice([r.value for r in Role], case_sensitive=False))
@click.option('--with-defaults', is_flag=True, help="Grant the role's default module permissions")
@with_appcontext
def create_user_command(username, email, password, first_name, last_name, role, with_defaults):
    """Create a user."""
    role = parse_role(role)
    try:
        user = create_user(
            username=username,
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            role=role,
        )
    except (PasswordValidationError, ConflictError) as e:
        raise click.ClickException(str(e))

    click.echo(f"PASS Created user: {user.username} ({user.email}) with role '{user.role}'")

    if with_defaults and role in DEFAULT_ROLE_GRANTS:
        grants = [
            {"module": module.value, "action": action.value}
            for module, actions in DEFAULT_ROLE_GRANTS[role].items()
            for action in actions
        ]
        permission_service.set_grants(user, grants)
        click.echo(f"PASS Granted {len(grants)} default permissions")


@users_group.command('deactivate')
@click.argument('username')
@with_appcontext
def deactivate_user_command(username):
    """Deactivate a user and sign them out everywhere."""
    user = _get_user(username)
    user.is_active = False
    db.session.commit()
    removed = session_service.revoke_user_sessions(user.id)
    click.echo(f"PASS Deactivated {user.username} ({removed} sessions removed)")


@click.group('perms')
def perms_group():
    """Permission inspection and repair commands."""


@perms_group.command('list')
@click.argument('username')
@with_appcontext
def list_perms(username):
    user = _get_user(username)
    if user.is_admin:
        click.echo(f"{user.username} is an administrator (all permissions)")
        return
    grants = permission_service.list_grants(user)
    if not grants:
        click.echo(f"{user.username} has no grants")
        return
    for grant in grants:
        mark = "+" if grant["granted"] else "-"
        label = MODULE_LABELS[Module(grant['module'])]
        click.echo(f"{mark} {grant['module']:<20} {grant['action']:<7} {label}")


@perms_group.command('grant')
@click.argument('username')
@click.argument('module')
@click.argument('action')
@with_appcontext
def grant_perm(username, module, action):
    user = _get_user(username)
    try:
        row = permission_service.grant(user, module, action)
    except ValueError as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Granted {row.module}/{row.action} to {user.username}")


@perms_group.command('revoke')
@click.argument('username')
@click.argument('module')
@click.argument('action')
@with_appcontext
def revoke_perm(username, module, action):
    user = _get_user(username)
    try:
        removed = permission_service.revoke(user, module, action)
    except ValueError as e:
        raise click.ClickException(str(e))
    if removed:
        click.echo(f"PASS Revoked {module.upper()}/{action.upper()} from {user.username}")
    else:
        click.echo(f"WARN  {user.username} had no {module.upper()}/{action.upper()} grant")


@click.group('sessions')
def sessions_group():
    """Session maintenance commands."""


@sessions_group.command('purge-expired')
@with_appcontext
def purge_expired_sessions():
    count = session_service.cleanup_expired_sessions()
    click.echo(f"PASS Deleted {count} expired sessions")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(perms_group)
    app.cli.add_command(sessions_group)
