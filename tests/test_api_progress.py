"""
Tests for the Progress API endpoints.

Endpoints run against the real clock, so events are logged relative to
today's UTC date.
"""
import json
import pytest
from datetime import timedelta

from harmony.models import UserMilestone
from harmony.utils.dates import utc_today
from harmony.utils.errors import harmony_error_response
from harmony.utils.exceptions import InvalidInputError


@pytest.fixture
def balanced_user(app, catalog, log_completion):
    """User with Mind/Body/Soul done today and yesterday."""
    today = utc_today()
    with app.app_context():
        for n in range(2):
            for category in ('Mind', 'Body', 'Soul'):
                log_completion('user-1', category, today - timedelta(days=n))
    return 'user-1'


class TestStatsEndpoints:

    def test_stats_new_user(self, client, catalog):
        response = client.get('/api/progress/new-user/stats')
        assert response.status_code == 200

        data = json.loads(response.data)
        assert data['success'] is True
        assert data['stats']['current_streak'] == 0
        assert data['stats']['harmony_score'] == 0

    def test_stats_recomputes(self, client, balanced_user):
        response = client.get(f'/api/progress/{balanced_user}/stats')
        data = response.get_json()

        assert response.status_code == 200
        assert data['stats']['current_streak'] == 2
        assert data['stats']['total_completions'] == 6

    def test_refresh_returns_new_milestones(self, client, balanced_user):
        response = client.post(f'/api/progress/{balanced_user}/refresh', json={'category': 'Soul'})
        data = response.get_json()

        assert response.status_code == 200
        ids = {m['milestone_id'] for m in data['new_milestones']}
        assert {'routine_1', 'streak_1', 'balance_all_categories'} <= ids
        assert data['harmony']['all_active_points'] == 30

        # Nothing new the second time
        data = client.post(f'/api/progress/{balanced_user}/refresh').get_json()
        assert data['new_milestones'] == []

    def test_refresh_invalid_category(self, client, balanced_user):
        response = client.post(f'/api/progress/{balanced_user}/refresh', json={'category': 'Spirit'})
        assert response.status_code == 400
        assert response.get_json()['error']['code'] == 'INVALID_CATEGORY'

    def test_user_id_too_long(self, client):
        response = client.get(f"/api/progress/{'x' * 65}/stats")
        assert response.status_code == 400
        assert response.get_json()['error']['code'] == 'INVALID_USER_ID'


class TestAvatarEndpoint:

    def test_radiant_after_balanced_day(self, client, balanced_user):
        client.post(f'/api/progress/{balanced_user}/refresh')

        data = client.get(f'/api/progress/{balanced_user}/avatar?executing=Mind').get_json()
        assert [a['light_state'] for a in data['avatar']] == ['Radiant'] * 3
        assert [a['category'] for a in data['avatar']] == ['Mind', 'Body', 'Soul']

    def test_new_user_dormant(self, client):
        data = client.get('/api/progress/new-user/avatar').get_json()
        assert [a['light_state'] for a in data['avatar']] == ['Dormant'] * 3

    def test_invalid_executing(self, client):
        response = client.get('/api/progress/new-user/avatar?executing=Spirit')
        assert response.status_code == 400


class TestMilestoneEndpoints:

    def test_list_and_filter(self, client, balanced_user):
        client.post(f'/api/progress/{balanced_user}/refresh')

        data = client.get(f'/api/progress/{balanced_user}/milestones?category=streak').get_json()
        assert [m['milestone']['id'] for m in data['milestones']] == [
            'streak_1', 'streak_7', 'streak_30', 'streak_100', 'streak_365',
        ]
        assert data['milestones'][0]['is_achieved'] is True

        data = client.get(f'/api/progress/{balanced_user}/milestones?sort=display').get_json()
        assert data['milestones'][0]['is_achieved'] is True

    def test_summary(self, client, balanced_user):
        client.post(f'/api/progress/{balanced_user}/refresh')

        summary = client.get(f'/api/progress/{balanced_user}/milestones/summary').get_json()['summary']
        assert summary['achieved'] > 0
        assert summary['next_milestone'] is not None

    def test_celebration_flow(self, app, client, balanced_user):
        client.post(f'/api/progress/{balanced_user}/refresh')

        queue = client.get(f'/api/progress/{balanced_user}/milestones/uncelebrated').get_json()['milestones']
        assert len(queue) > 0
        first = queue[0]['milestone_id']

        response = client.post(f'/api/progress/{balanced_user}/milestones/{first}/celebrate')
        assert response.status_code == 200

        queue_after = client.get(f'/api/progress/{balanced_user}/milestones/uncelebrated').get_json()['milestones']
        assert first not in [m['milestone_id'] for m in queue_after]
        assert len(queue_after) == len(queue) - 1

        response = client.post(f'/api/progress/{balanced_user}/milestones/{first}/share')
        assert response.status_code == 200

        with app.app_context():
            award = UserMilestone.query.filter_by(user_id=balanced_user, milestone_id=first).one()
            assert award.shown_celebration is True
            assert award.shared_to_activity is True

    def test_celebrate_unachieved(self, client, catalog):
        response = client.post('/api/progress/user-1/milestones/streak_365/celebrate')
        assert response.status_code == 404
        assert response.get_json()['error']['code'] == 'MILESTONE_NOT_FOUND'

    def test_share_unachieved(self, client, catalog):
        response = client.post('/api/progress/user-1/milestones/streak_365/share')
        assert response.status_code == 404


class TestHardResetEndpoint:

    def test_delete_resets_progress(self, client, balanced_user):
        client.post(f'/api/progress/{balanced_user}/refresh')

        response = client.delete(f'/api/progress/{balanced_user}')
        data = response.get_json()
        assert response.status_code == 200
        assert data['deleted']['completion_events'] == 6
        assert data['deleted']['user_stats'] == 1

        stats = client.get(f'/api/progress/{balanced_user}/stats').get_json()['stats']
        assert stats['total_completions'] == 0
        assert stats['current_streak'] == 0

        queue = client.get(f'/api/progress/{balanced_user}/milestones/uncelebrated').get_json()
        assert queue['milestones'] == []


class TestErrorHandling:

    def test_unknown_route_envelope(self, client):
        response = client.get('/api/progress/user-1/unknown/path/here')
        assert response.status_code == 404
        assert response.get_json()['error']['code'] == 'NOT_FOUND'

    def test_health(self, client):
        assert client.get('/health').get_json()['status'] == 'healthy'

    def test_invalid_input_codes(self, app):
        """Field-less input errors map to VALIDATION_ERROR, field errors to INVALID_<FIELD>."""
        with app.test_request_context():
            response, status = harmony_error_response(InvalidInputError('Malformed request'))
            assert status == 400
            assert response.get_json()['error']['code'] == 'VALIDATION_ERROR'

            response, status = harmony_error_response(InvalidInputError('Bad date', field='date'))
            assert response.get_json()['error']['code'] == 'INVALID_DATE'
