# nutriapp/services/nutritionists.py
# Nutritionist directory, self-registration and patient listing.

from flask import current_app
from nutriapp.supabase_client import get_supabase, create_auth_client
from nutriapp.utils import error_result, pick_allowed_fields

NUTRITIONIST_WITH_USER = """
    *,
    usuario:user_id (
        id, email, full_name, telefone
    )
"""

PATIENT_LINK_WITH_PROFILE = """
    id,
    paciente:usuario_id (
        id, nome, email, data_nascimento, genero, objetivo, created_at
    )
"""


def get_active_nutritionists():
    """Lists approved nutritionists (ativo = true) with their user data."""
    try:
        response = get_supabase().table('nutricionistas') \
            .select(NUTRITIONIST_WITH_USER) \
            .eq('ativo', True) \
            .execute()
        return {"success": True, "data": response.data or []}
    except Exception as e:
        current_app.logger.error(f"Error fetching nutritionists: {str(e)}")
        return error_result("Erro ao buscar nutricionistas", 500)


def register_nutritionist(email, password, nome, crn, telefone=None, especialidade=None):
    """
    Public registration. The Auth account is created with tipo='nutricionista'
    and the profile starts inactive until an administrator approves it.
    """
    try:
        # 1. Create the Auth account
        auth_response = create_auth_client().auth.sign_up({
            "email": email,
            "password": password,
            "options": {
                "data": {
                    "full_name": nome,
                    "telefone": telefone,
                    "tipo": 'nutricionista'
                }
            }
        })

        auth_user = auth_response.user
        if auth_user is None:
            return error_result("Não foi possível criar o usuário", 400)

        # 2. Create the nutritionist profile (pending approval)
        response = get_supabase().table('nutricionistas').insert({
            "user_id": str(auth_user.id),
            "nome": nome,
            "crn": crn,
            "telefone": telefone,
            "especialidade": especialidade,
            "ativo": False
        }).execute()

        current_app.logger.info(f"Nutritionist registered, pending approval: {auth_user.id} (CRN {crn})")
        return {
            "success": True,
            "message": "Cadastro realizado com sucesso! Aguarde a aprovação do administrador.",
            "data": response.data[0]
        }, 201

    except Exception as e:
        current_app.logger.error(f"Nutritionist registration failed for {email}: {str(e)}")
        return error_result(str(e), 400)


def get_nutritionist_profile(user_id):
    try:
        response = get_supabase().table('nutricionistas') \
            .select('*') \
            .eq('user_id', user_id) \
            .limit(1) \
            .execute()
    except Exception as e:
        current_app.logger.error(f"Error fetching nutritionist profile for {user_id}: {str(e)}")
        return error_result("Erro ao buscar perfil", 500)

    if not response.data:
        return error_result("Perfil não encontrado", 404)

    return {"success": True, "data": response.data[0]}


def update_nutritionist_profile(user_id, data):
    """
    Updates the caller's nutritionist profile with the allow-listed fields.
    'ativo', 'crn' and 'user_id' can never be changed from here.
    """
    updates = pick_allowed_fields(data, current_app.config['NUTRICIONISTA_EDITABLE_FIELDS'])

    if not updates:
        return error_result("Nenhum campo válido para atualizar", 400)

    try:
        response = get_supabase().table('nutricionistas') \
            .update(updates) \
            .eq('user_id', user_id) \
            .execute()
    except Exception as e:
        current_app.logger.error(f"Error updating nutritionist profile for {user_id}: {str(e)}")
        return error_result("Erro ao atualizar perfil", 500)

    if not response.data:
        return error_result("Perfil não encontrado", 404)

    return {"success": True, "data": response.data[0]}


def get_patients(nutritionist_id):
    """Lists the patient links of a nutritionist, each with the patient profile."""
    try:
        response = get_supabase().table('pacientes_nutricionistas') \
            .select(PATIENT_LINK_WITH_PROFILE) \
            .eq('nutricionista_id', nutritionist_id) \
            .execute()
        return {"success": True, "data": response.data or []}
    except Exception as e:
        current_app.logger.error(f"Error fetching patients of {nutritionist_id}: {str(e)}")
        return error_result("Erro ao buscar pacientes", 500)
