# nutriapp/api/goals.py
# (Goal routes. Listing and statistics are owner-only by URL; the
# id-based routes check ownership in the service after loading the goal.)

from flask import Blueprint, g
from nutriapp.jwt_auth import require_jwt, owner_required
from nutriapp.utils import _handle_service_result, get_json_body
from nutriapp.services.goals import (
    get_goals,
    create_goal,
    update_goal_progress,
    update_goal,
    delete_goal,
    get_goal_statistics
)

bp = Blueprint('goals', __name__)


@bp.route('/<string:user_id>', methods=['GET'])
@require_jwt
@owner_required('user_id')
def list_goals_route(user_id):
    result = get_goals(user_id)
    return _handle_service_result(result)


@bp.route('', methods=['POST'])
@bp.route('/', methods=['POST'])
@require_jwt
def create_goal_route():
    data = get_json_body()
    result = create_goal(g.current_user.id, data)
    return _handle_service_result(result)


@bp.route('/<string:goal_id>/progresso', methods=['PUT'])
@require_jwt
def update_progress_route(goal_id):
    """Sets valor_atual and recomputes 'concluida'."""
    data = get_json_body()
    result = update_goal_progress(g.current_user.id, goal_id, data.get('valor_atual'))
    return _handle_service_result(result)


@bp.route('/<string:goal_id>', methods=['PUT'])
@require_jwt
def update_goal_route(goal_id):
    data = get_json_body()
    result = update_goal(g.current_user.id, goal_id, data)
    return _handle_service_result(result)


@bp.route('/<string:goal_id>', methods=['DELETE'])
@require_jwt
def delete_goal_route(goal_id):
    result = delete_goal(g.current_user.id, goal_id)
    return _handle_service_result(result)


@bp.route('/<string:user_id>/estatisticas', methods=['GET'])
@require_jwt
@owner_required('user_id')
def goal_statistics_route(user_id):
    result = get_goal_statistics(user_id)
    return _handle_service_result(result)
