"""
Progress API Endpoints

Stats, avatar light states, milestones and the celebration queue for the
mobile client. Authentication happens upstream; the user id in the path
has already been checked against the session.
"""

from flask import Blueprint, jsonify, request

from ..services.avatar_state import get_avatar_states
from ..services.hard_reset import purge_user_data
from ..services.milestone_engine import MilestoneEngine, sort_for_display
from ..services.progress_orchestrator import ProgressOrchestrator
from ..utils.exceptions import MilestoneNotFoundError

progress_bp = Blueprint('progress', __name__)


def get_orchestrator():
    return ProgressOrchestrator()


def get_milestone_engine():
    return MilestoneEngine()


# Stats
@progress_bp.route('/<user_id>/stats', methods=['GET'])
def get_stats(user_id):
    """Recompute, then return the stats snapshot."""
    stats = get_orchestrator().get_stats(user_id)

    return jsonify({
        'success': True,
        'stats': stats.to_dict(),
    })


@progress_bp.route('/<user_id>/refresh', methods=['POST'])
def refresh(user_id):
    """Called by the completion logger after each write."""
    data = request.get_json(silent=True) or {}
    result = get_orchestrator().on_completion_logged(user_id, category=data.get('category'))

    return jsonify({
        'success': True,
        'stats': result.stats.to_dict(),
        'harmony': result.harmony.to_dict(),
        'new_milestones': [m.to_dict() for m in result.milestones.awarded],
    })


@progress_bp.route('/<user_id>/avatar', methods=['GET'])
def get_avatar(user_id):
    """Light state per category. ?executing=<Category> while a routine runs."""
    states = get_avatar_states(user_id, executing_category=request.args.get('executing') or None)

    return jsonify({
        'success': True,
        'avatar': [state.to_dict() for state in states],
    })


# Milestones
@progress_bp.route('/<user_id>/milestones', methods=['GET'])
def list_milestones(user_id):
    """Every milestone with the user's progress. ?sort=display puts achieved and closest first."""
    milestones = get_milestone_engine().get_milestones(user_id)

    category = request.args.get('category')
    if category:
        milestones = [m for m in milestones if m['milestone']['category'] == category]

    if request.args.get('sort') == 'display':
        milestones = sort_for_display(milestones)

    return jsonify({
        'success': True,
        'milestones': milestones,
    })


@progress_bp.route('/<user_id>/milestones/summary', methods=['GET'])
def milestone_summary(user_id):
    return jsonify({
        'success': True,
        'summary': get_milestone_engine().get_milestone_summary(user_id),
    })


@progress_bp.route('/<user_id>/milestones/uncelebrated', methods=['GET'])
def uncelebrated_milestones(user_id):
    """Celebration queue, oldest first."""
    pending = get_milestone_engine().get_uncelebrated(user_id)

    return jsonify({
        'success': True,
        'milestones': [m.to_dict() for m in pending],
    })


@progress_bp.route('/<user_id>/milestones/<milestone_id>/celebrate', methods=['POST'])
def celebrate_milestone(user_id, milestone_id):
    """Mark the celebration modal as shown."""
    if not get_milestone_engine().mark_celebrated(user_id, milestone_id):
        raise MilestoneNotFoundError(milestone_id)

    return jsonify({
        'success': True,
        'milestone_id': milestone_id,
    })


@progress_bp.route('/<user_id>/milestones/<milestone_id>/share', methods=['POST'])
def share_milestone(user_id, milestone_id):
    """Mark the milestone as posted to the activity feed."""
    if not get_milestone_engine().mark_shared(user_id, milestone_id):
        raise MilestoneNotFoundError(milestone_id)

    return jsonify({
        'success': True,
        'milestone_id': milestone_id,
    })


# Hard reset
@progress_bp.route('/<user_id>', methods=['DELETE'])
def hard_reset(user_id):
    """Delete all of the user's progress data. Catalog entries are kept."""
    deleted = purge_user_data(user_id)

    return jsonify({
        'success': True,
        'deleted': deleted,
    })
