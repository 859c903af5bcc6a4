"""
JWT Authentication Middleware for Supabase Integration

This module provides bearer token verification, user context management
and the authorization decorators used by the blueprints.

Status codes:
    401: Authorization header missing or malformed
    403: Token invalid/expired, or authenticated user lacks access
"""

import jwt
from functools import wraps
from dataclasses import dataclass, field
from flask import request, jsonify, g, current_app
from nutriapp.supabase_client import get_supabase


class JWTAuthError(Exception):
    """Custom exception for JWT authentication errors"""
    def __init__(self, message, status_code=401):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


@dataclass
class UserContext:
    """
    Lightweight user context extracted from the verified token.

    'tipo' comes from user_metadata and is either 'usuario' or
    'nutricionista' (set at signup).
    """
    id: str
    email: str
    tipo: str = None
    user_metadata: dict = field(default_factory=dict)

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "tipo": self.tipo,
            "user_metadata": self.user_metadata,
        }


def extract_token_from_header():
    """
    Extracts the JWT token from the Authorization header.

    Expected format: "Authorization: Bearer <token>"

    Raises:
        JWTAuthError: If Authorization header is missing or malformed
    """
    auth_header = request.headers.get('Authorization')

    if not auth_header:
        raise JWTAuthError("Token de autenticação não fornecido", 401)

    parts = auth_header.split()

    if len(parts) != 2 or parts[0].lower() != 'bearer':
        raise JWTAuthError("Formato do header Authorization inválido. Esperado 'Bearer <token>'", 401)

    return parts[1]


def _decode_local_token(token, jwt_secret):
    try:
        return jwt.decode(
            token,
            jwt_secret,
            algorithms=['HS256'],
            audience='authenticated',  # Supabase default audience
            options={
                'verify_exp': True,
                'verify_aud': True,
            }
        )
    except jwt.ExpiredSignatureError:
        raise JWTAuthError("Token inválido ou expirado", 403)
    except jwt.InvalidTokenError as e:
        current_app.logger.warning(f"Rejected token: {str(e)}")
        raise JWTAuthError("Token inválido ou expirado", 403)


def _fetch_remote_user(token):
    supabase = get_supabase()

    try:
        response = supabase.auth.get_user(token)
    except Exception as e:
        current_app.logger.warning(f"Supabase rejected token: {str(e)}")
        raise JWTAuthError("Token inválido ou expirado", 403)

    user = getattr(response, 'user', None)
    if user is None:
        raise JWTAuthError("Token inválido ou expirado", 403)
    return user


def verify_token(token):
    """
    Verifies a Supabase access token and returns the caller's UserContext.

    With SUPABASE_JWT_SECRET configured the signature is checked locally
    (no network). Otherwise Supabase Auth is asked to resolve the token.

    Raises:
        JWTAuthError: 403 if the token is invalid or expired
    """
    jwt_secret = current_app.config.get('SUPABASE_JWT_SECRET')

    if jwt_secret:
        payload = _decode_local_token(token, jwt_secret)
        user_id = payload.get('sub')
        if not user_id:
            raise JWTAuthError("Token inválido ou expirado", 403)
        metadata = payload.get('user_metadata') or {}
        return UserContext(
            id=user_id,
            email=payload.get('email'),
            tipo=metadata.get('tipo'),
            user_metadata=metadata
        )

    user = _fetch_remote_user(token)
    metadata = getattr(user, 'user_metadata', None) or {}
    return UserContext(
        id=str(user.id),
        email=getattr(user, 'email', None),
        tipo=metadata.get('tipo'),
        user_metadata=metadata
    )


def require_jwt(f):
    """
    Decorator to protect routes with bearer token authentication.

    Usage:
        @bp.route('/protected')
        @require_jwt
        def protected_route():
            user = g.current_user  # UserContext
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            token = extract_token_from_header()
            g.current_user = verify_token(token)
        except JWTAuthError as e:
            return jsonify({"success": False, "error": e.message, "error_code": e.status_code}), e.status_code
        except Exception as e:
            current_app.logger.error(f"Unexpected error in require_jwt: {str(e)}")
            return jsonify({"success": False, "error": "Falha na autenticação", "error_code": 500}), 500

        return f(*args, **kwargs)

    return decorated_function


def owner_required(param):
    """
    Decorator factory restricting a route to the user named in the URL.

    The check runs before the view, so nothing about the resource is read
    when the ids differ. Must be used AFTER @require_jwt.

    Usage:
        @bp.route('/user/<user_id>')
        @require_jwt
        @owner_required('user_id')
        def own_profile(user_id): ...
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            user = getattr(g, 'current_user', None)

            if not user:
                return jsonify({"success": False, "error": "Autenticação necessária", "error_code": 401}), 401

            if user.id != kwargs.get(param):
                return jsonify({"success": False, "error": "Não autorizado", "error_code": 403}), 403

            return f(*args, **kwargs)

        return decorated_function
    return decorator


def nutritionist_required(f):
    """
    Decorator to require a nutritionist profile for route access.

    Looks the caller up in the 'nutricionistas' table and exposes the row
    as g.nutritionist. Must be used AFTER @require_jwt.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        user = getattr(g, 'current_user', None)

        if not user:
            return jsonify({"success": False, "error": "Autenticação necessária", "error_code": 401}), 401

        try:
            response = get_supabase().table('nutricionistas') \
                .select('*') \
                .eq('user_id', user.id) \
                .limit(1) \
                .execute()
        except Exception as e:
            current_app.logger.error(f"Error checking nutritionist role for {user.id}: {str(e)}")
            return jsonify({"success": False, "error": "Erro ao verificar permissões", "error_code": 500}), 500

        if not response.data:
            return jsonify({
                "success": False,
                "error": "Acesso negado: usuário não é um nutricionista",
                "error_code": 403
            }), 403

        g.nutritionist = response.data[0]
        return f(*args, **kwargs)

    return decorated_function
