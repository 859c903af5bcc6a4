# nutriapp/services/auth.py
# Account creation, login and logout against Supabase Auth.

from flask import current_app
from nutriapp.supabase_client import get_supabase, create_auth_client
from nutriapp.utils import error_result, to_json_safe


def signup_user(email, password, user_data):
    """
    Creates the Supabase Auth account and its 'usuarios' profile row.

    The metadata stored in Auth carries tipo='usuario' so tokens identify
    regular users apart from nutritionists.
    """
    user_data = user_data or {}

    try:
        # 1. Create the Auth account
        auth_response = create_auth_client().auth.sign_up({
            "email": email,
            "password": password,
            "options": {
                "data": {
                    "full_name": user_data.get('nome'),
                    "cpf": user_data.get('cpf'),
                    "data_nascimento": user_data.get('dataNascimento'),
                    "telefone": user_data.get('telefone'),
                    "tipo": 'usuario'
                }
            }
        })

        auth_user = auth_response.user
        if auth_user is None:
            return error_result("Não foi possível criar o usuário", 400)

        # 2. Create the profile row keyed by the Auth id
        profile = {
            "id": str(auth_user.id),
            "nome": user_data.get('nome'),
            "email": email,
            "cpf": user_data.get('cpf'),
            "data_nascimento": user_data.get('dataNascimento'),
            "telefone": user_data.get('telefone'),
            "altura": user_data.get('altura'),
            "peso": user_data.get('peso'),
            "genero": user_data.get('genero'),
            "objetivo": user_data.get('objetivo'),
        }
        profile = {key: value for key, value in profile.items() if value is not None}

        response = get_supabase().table('usuarios').insert(profile).execute()

        current_app.logger.info(f"New user registered: {auth_user.id}")
        return {
            "success": True,
            "user": response.data[0],
            "session": to_json_safe(auth_response.session)
        }, 201

    except Exception as e:
        current_app.logger.error(f"Signup failed for {email}: {str(e)}")
        return error_result(str(e), 400)


def login_user(email, password):
    """Exchanges credentials for a Supabase session."""
    try:
        auth_response = create_auth_client().auth.sign_in_with_password({
            "email": email,
            "password": password
        })
        return {
            "success": True,
            "user": to_json_safe(auth_response.user),
            "session": to_json_safe(auth_response.session)
        }
    except Exception as e:
        current_app.logger.error(f"Login failed for {email}: {str(e)}")
        return error_result("Credenciais inválidas", 401)


def logout_user(access_token):
    """Revokes the sessions behind the caller's access token."""
    try:
        get_supabase().auth.admin.sign_out(access_token)
        return {"success": True, "message": "Logout realizado com sucesso"}
    except Exception as e:
        current_app.logger.error(f"Logout failed: {str(e)}")
        return error_result("Erro ao fazer logout", 500)


def get_own_profile(user):
    """
    Returns the authenticated identity together with its 'usuarios' row.
    """
    try:
        response = get_supabase().table('usuarios') \
            .select('*') \
            .eq('id', user.id) \
            .limit(1) \
            .execute()
    except Exception as e:
        current_app.logger.error(f"Error fetching profile for {user.id}: {str(e)}")
        return error_result("Erro ao buscar perfil do usuário", 500)

    if not response.data:
        return error_result("Perfil não encontrado", 404)

    return {
        "success": True,
        "user": user.to_dict(),
        "profile": response.data[0]
    }
