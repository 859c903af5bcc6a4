# nutriapp/api/auth.py
# (Account routes: signup, login, logout and the caller's own profile.)

from flask import Blueprint, jsonify, g
from nutriapp.jwt_auth import require_jwt, extract_token_from_header, JWTAuthError
from nutriapp.utils import _handle_service_result, get_json_body
from nutriapp.services.auth import signup_user, login_user, logout_user, get_own_profile

bp = Blueprint('auth', __name__)


@bp.route('/signup', methods=['POST'])
def signup_route():
    """Creates the Supabase account and the 'usuarios' profile."""
    data = get_json_body()
    email = data.get('email')
    password = data.get('password')

    if not email or not password:
        return jsonify({"success": False, "error": "Email e senha são obrigatórios."}), 400

    result = signup_user(email, password, data.get('userData'))
    return _handle_service_result(result, default_error_status=400)


@bp.route('/login', methods=['POST'])
def login_route():
    data = get_json_body()
    email = data.get('email')
    password = data.get('password')

    if not email or not password:
        return jsonify({"success": False, "error": "Email e senha são obrigatórios."}), 400

    result = login_user(email, password)
    return _handle_service_result(result, default_error_status=401)


@bp.route('/logout', methods=['POST'])
def logout_route():
    """
    Revokes the session of the bearer token sent with the request.

    Response:
        200: Session revoked
        401: Missing or malformed Authorization header
        500: Supabase could not revoke the session
    """
    try:
        access_token = extract_token_from_header()
    except JWTAuthError as e:
        return jsonify({"success": False, "error": e.message, "error_code": e.status_code}), e.status_code

    result = logout_user(access_token)
    return _handle_service_result(result)


@bp.route('/me', methods=['GET'])
@require_jwt
def me_route():
    """
    Returns the authenticated identity and its profile row.

    Response:
        200: {user, profile}
        401: Missing token
        403: Invalid or expired token
        404: No profile row for this account
    """
    result = get_own_profile(g.current_user)
    return _handle_service_result(result)
