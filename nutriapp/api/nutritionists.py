# nutriapp/api/nutritionists.py
# (Nutritionist directory, public registration and nutritionist-only routes.)

from flask import Blueprint, jsonify, g
from nutriapp.jwt_auth import require_jwt, nutritionist_required
from nutriapp.utils import _handle_service_result, get_json_body
from nutriapp.services.nutritionists import (
    get_active_nutritionists,
    register_nutritionist,
    get_nutritionist_profile,
    update_nutritionist_profile,
    get_patients
)

bp = Blueprint('nutritionists', __name__)


@bp.route('', methods=['GET'])
@bp.route('/', methods=['GET'])
@require_jwt
def list_nutritionists_route():
    """Lists approved nutritionists."""
    result = get_active_nutritionists()
    return _handle_service_result(result)


@bp.route('', methods=['POST'])
@bp.route('/', methods=['POST'])
def register_nutritionist_route():
    """
    Public registration. The profile stays inactive until an administrator
    approves it.
    """
    data = get_json_body()
    required = ('email', 'password', 'nome', 'crn')
    missing = [name for name in required if not data.get(name)]

    if missing:
        return jsonify({"success": False, "error": f"Campos obrigatórios ausentes: {', '.join(missing)}"}), 400

    result = register_nutritionist(
        email=data['email'],
        password=data['password'],
        nome=data['nome'],
        crn=data['crn'],
        telefone=data.get('telefone'),
        especialidade=data.get('especialidade')
    )
    return _handle_service_result(result, default_error_status=400)


@bp.route('/me', methods=['GET'])
@require_jwt
@nutritionist_required
def get_own_profile_route():
    result = get_nutritionist_profile(g.current_user.id)
    return _handle_service_result(result)


@bp.route('/me', methods=['PUT'])
@require_jwt
@nutritionist_required
def update_own_profile_route():
    data = get_json_body()
    result = update_nutritionist_profile(g.current_user.id, data)
    return _handle_service_result(result)


@bp.route('/pacientes', methods=['GET'])
@require_jwt
@nutritionist_required
def list_patients_route():
    result = get_patients(g.nutritionist['id'])
    return _handle_service_result(result)
