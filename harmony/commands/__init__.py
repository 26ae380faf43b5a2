"""
CLI Commands for Harmony.

Usage:
    flask progress seed-milestones              # Install the default milestone catalog
    flask progress recompute --user-id abc123   # Recompute stats and milestones
    flask progress hard-reset --user-id abc123  # Delete a user's progress data
"""
from .progress import init_app as init_progress_commands


def init_app(app):
    """Register all CLI commands with the Flask app."""
    init_progress_commands(app)
