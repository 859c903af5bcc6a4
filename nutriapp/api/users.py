# nutriapp/api/users.py
# (Profile and health metric routes. All of them are owner-only.)

from flask import Blueprint
from nutriapp.jwt_auth import require_jwt, owner_required
from nutriapp.utils import _handle_service_result, get_json_body
from nutriapp.services.users import (
    get_user,
    update_user,
    get_health_metrics,
    record_health_metric
)

bp = Blueprint('users', __name__)


@bp.route('/<string:user_id>', methods=['GET'])
@require_jwt
@owner_required('user_id')
def get_user_route(user_id):
    result = get_user(user_id)
    return _handle_service_result(result)


@bp.route('/<string:user_id>', methods=['PUT'])
@require_jwt
@owner_required('user_id')
def update_user_route(user_id):
    """Updates the caller's profile (allow-listed fields only)."""
    data = get_json_body()
    result = update_user(user_id, data)
    return _handle_service_result(result)


@bp.route('/<string:user_id>/metricas', methods=['GET'])
@require_jwt
@owner_required('user_id')
def get_metrics_route(user_id):
    """Returns the last 30 health metric records, newest first."""
    result = get_health_metrics(user_id)
    return _handle_service_result(result)


@bp.route('/<string:user_id>/metricas', methods=['POST'])
@require_jwt
@owner_required('user_id')
def record_metric_route(user_id):
    data = get_json_body()
    result = record_health_metric(user_id, data)
    return _handle_service_result(result)
