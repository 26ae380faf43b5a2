"""
Shared pytest fixtures.

Each test gets a fresh app on in-memory SQLite. Tests open their own
app context (`with app.app_context():`) the same way service code runs
inside a request.
"""
import pytest
from datetime import date, datetime

from harmony import create_app
from harmony.extensions import db
from harmony.models import Category, CompletionEvent, seed_milestone_catalog

# Fixed "today" for deterministic streak and window math
TODAY = date(2026, 3, 15)


@pytest.fixture
def app():
    """Application configured for testing with all tables created."""
    app = create_app('testing')

    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture
def catalog(app):
    """Default milestone catalog installed."""
    with app.app_context():
        seed_milestone_catalog()


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def log_completion():
    """
    Factory that writes a completion event. Needs an active app context.

    Usage:
        log_completion('user-1', 'Mind', date(2026, 3, 15))
    """
    def _log(user_id, category, day, routine_id=None, hour=12):
        category = Category.parse(category)
        event = CompletionEvent(
            user_id=user_id,
            category=category,
            routine_id=routine_id or f'{category.field_prefix}-routine',
            completed_at=datetime(day.year, day.month, day.day, hour),
        )
        db.session.add(event)
        db.session.commit()
        return event

    return _log
