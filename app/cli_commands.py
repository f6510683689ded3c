"""
Flask CLI commands for platform management.

Commands:
- flask init-db: Create all tables
- flask seed-plans: Insert the default plan catalogue
- flask create-admin: Create a new super admin user
"""

import click
import re
from app.database import get_session, create_all
from app.models import AdminUser
from app.services.plan_service import seed_default_plans


def init_cli_commands(app):
    """Register CLI commands with Flask app."""

    @app.cli.command('init-db')
    def init_db_command():
        """Create all database tables."""
        create_all()
        click.echo(click.style('Tables created.', fg='green'))

    @app.cli.command('seed-plans')
    @click.option('--overwrite', is_flag=True, help='Reset existing plans to the defaults')
    def seed_plans(overwrite):
        """Insert the default plans (Trial, Starter, Standard, Premium)."""
        db_session = get_session()
        try:
            touched = seed_default_plans(db_session, overwrite=overwrite)
            db_session.commit()
        except Exception as e:
            db_session.rollback()
            click.echo(click.style(f'Error seeding plans: {e}', fg='red'))
            raise SystemExit(1)

        if touched:
            click.echo(click.style(f"Seeded plans: {', '.join(touched)}", fg='green'))
        else:
            click.echo('All default plans already exist.')

    @app.cli.command('create-admin')
    @click.option('--email', prompt=True, help='Admin email address')
    @click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Admin password')
    def create_admin(email, password):
        """Create a new super admin for the console."""
        email = email.strip().lower()
        email_pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
        if not re.match(email_pattern, email):
            click.echo(click.style('Invalid email. Use user@example.com', fg='red'))
            raise SystemExit(1)

        if len(password) < 6:
            click.echo(click.style('Password must be at least 6 characters.', fg='red'))
            raise SystemExit(1)

        db_session = get_session()
        if db_session.query(AdminUser).filter_by(email=email).first():
            click.echo(click.style(f'An admin with email {email} already exists', fg='red'))
            raise SystemExit(1)

        try:
            admin = AdminUser(email=email)
            admin.set_password(password)
            db_session.add(admin)
            db_session.commit()
        except Exception as e:
            db_session.rollback()
            click.echo(click.style(f'Error creating admin: {e}', fg='red'))
            raise SystemExit(1)

        click.echo(click.style('Admin created.', fg='green', bold=True))
        click.echo(f'   Email: {email}')
        click.echo(f'   ID: {admin.id}')
