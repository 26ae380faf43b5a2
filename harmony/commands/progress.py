"""
CLI Commands for the progress engine.

# Install the default milestone catalog into a fresh database
flask progress seed-milestones

# Recompute one user's stats and milestones (e.g. after a data repair)
flask progress recompute --user-id=abc123

# Wipe a user's progress data
flask progress hard-reset --user-id=abc123 --yes
"""

import click
from flask.cli import with_appcontext

from ..models.milestones import seed_milestone_catalog
from ..services.hard_reset import purge_user_data
from ..services.progress_orchestrator import ProgressOrchestrator
from ..utils.exceptions import HarmonyError


@click.group('progress')
def progress_cli():
    """Progress engine commands."""
    pass


@progress_cli.command('seed-milestones')
@with_appcontext
def seed_milestones():
    """Install missing milestone definitions."""
    result = seed_milestone_catalog()
    click.echo(f"Created: {result['created']}")
    click.echo(f"Skipped: {result['skipped']} (already present)")


@progress_cli.command('recompute')
@click.option('--user-id', required=True, help='User to recompute')
@with_appcontext
def recompute(user_id):
    """Run the full progress recompute for one user."""
    try:
        result = ProgressOrchestrator().run(user_id)
    except HarmonyError as e:
        raise click.ClickException(e.message)

    stats = result.stats
    click.echo(f"User: {stats.user_id}")
    click.echo(f"  Harmony streak: {stats.current_streak} (longest {stats.longest_streak})")
    click.echo(f"  Harmony score: {stats.harmony_score}")
    click.echo(f"  Completions: {stats.total_completions}")
    click.echo(f"  Stats changed: {'yes' if result.stats_changed else 'no'}")

    awarded = result.milestones.awarded
    click.echo(f"  New milestones: {len(awarded)}")
    for milestone in awarded:
        click.echo(f"    - {milestone.milestone_id}")

    for error in result.milestones.skipped:
        click.echo(f"  Skipped rule {error.milestone_id}: {error.reason}")


@progress_cli.command('hard-reset')
@click.option('--user-id', required=True, help='User whose data will be deleted')
@click.option('--yes', is_flag=True, help='Skip the confirmation prompt')
@with_appcontext
def hard_reset(user_id, yes):
    """Delete all progress data for a user."""
    if not yes:
        click.confirm(f"Delete all progress data for user {user_id}?", abort=True)

    try:
        deleted = purge_user_data(user_id)
    except HarmonyError as e:
        raise click.ClickException(e.message)

    for table, count in deleted.items():
        if table != 'total':
            click.echo(f"  {table}: {count}")
    click.echo(f"Deleted {deleted['total']} rows")


def init_app(app):
    """Register progress commands with the Flask app."""
    app.cli.add_command(progress_cli)
