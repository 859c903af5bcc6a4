# nutriapp/services/users.py
# This file holds all the logic for user profiles and health metrics.
# Ownership is enforced by the routes (owner_required) before these run.

from flask import current_app
from nutriapp.supabase_client import get_supabase
from nutriapp.utils import error_result, pick_allowed_fields, utc_now_iso


def get_user(user_id):
    """Fetches a single 'usuarios' row."""
    try:
        response = get_supabase().table('usuarios') \
            .select('*') \
            .eq('id', user_id) \
            .limit(1) \
            .execute()
    except Exception as e:
        current_app.logger.error(f"Error fetching user {user_id}: {str(e)}")
        return error_result("Erro ao buscar usuário", 500)

    if not response.data:
        return error_result("Usuário não encontrado", 404)

    return {"success": True, "data": response.data[0]}


def update_user(user_id, data):
    """
    Updates a user profile with the allow-listed fields in 'data'.
    Keys outside USUARIO_EDITABLE_FIELDS (id, email, cpf...) are dropped.
    """
    updates = pick_allowed_fields(data, current_app.config['USUARIO_EDITABLE_FIELDS'])

    if not updates:
        return error_result("Nenhum campo válido para atualizar", 400)

    try:
        response = get_supabase().table('usuarios') \
            .update(updates) \
            .eq('id', user_id) \
            .execute()
    except Exception as e:
        current_app.logger.error(f"Error updating user {user_id}: {str(e)}")
        return error_result("Erro ao atualizar usuário", 500)

    if not response.data:
        return error_result("Usuário não encontrado", 404)

    current_app.logger.info(f"User {user_id} updated fields: {', '.join(sorted(updates))}")
    return {"success": True, "data": response.data[0]}


def get_health_metrics(user_id):
    """
    Returns the most recent health metrics of a user, newest first.
    At most METRICAS_LIMIT records are returned.
    """
    limit = current_app.config['METRICAS_LIMIT']

    try:
        response = get_supabase().table('metricas_saude') \
            .select('*') \
            .eq('usuario_id', user_id) \
            .order('data_registro', desc=True) \
            .limit(limit) \
            .execute()
    except Exception as e:
        current_app.logger.error(f"Error fetching metrics for {user_id}: {str(e)}")
        return error_result("Erro ao buscar métricas de saúde", 500)

    return {"success": True, "data": response.data or []}


def record_health_metric(user_id, data):
    """
    Inserts a health metric record stamped with the server time.
    """
    metric = pick_allowed_fields(data, current_app.config['METRICA_FIELDS'])

    if not metric:
        return error_result("Nenhuma métrica informada", 400)

    metric['usuario_id'] = user_id
    metric['data_registro'] = utc_now_iso()

    try:
        response = get_supabase().table('metricas_saude').insert(metric).execute()
    except Exception as e:
        current_app.logger.error(f"Error recording metric for {user_id}: {str(e)}")
        return error_result("Erro ao registrar métricas de saúde", 500)

    return {"success": True, "data": response.data[0]}, 201
