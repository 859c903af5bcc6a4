# nutriapp/services/goals.py
# Goal ('metas') CRUD, progress tracking and statistics.

from flask import current_app
from nutriapp.supabase_client import get_supabase
from nutriapp.utils import error_result, pick_allowed_fields, utc_now_iso, as_number


def is_goal_complete(valor_atual, valor_alvo):
    """
    A goal is complete while its current value reaches the target.
    Re-evaluated on every update, so a goal can become incomplete again.
    """
    return as_number(valor_atual) >= as_number(valor_alvo)


def summarize_goals(metas):
    """
    Builds the statistics payload for a list of goal rows.
    taxa_conclusao is a percentage rounded to two decimals.
    """
    total = len(metas)
    concluidas = sum(1 for meta in metas if meta.get('concluida'))
    taxa = (concluidas / total) * 100 if total > 0 else 0

    por_tipo = {}
    for meta in metas:
        stats = por_tipo.setdefault(meta.get('tipo'), {"total": 0, "concluidas": 0})
        stats["total"] += 1
        if meta.get('concluida'):
            stats["concluidas"] += 1

    return {
        "total_metas": total,
        "metas_concluidas": concluidas,
        "taxa_conclusao": round(taxa, 2),
        "por_tipo": por_tipo
    }


def _fetch_owned_goal(goal_id, user_id):
    """
    Loads a goal and checks it belongs to 'user_id'.

    Returns:
        tuple: (goal_row, None) on success or (None, error_tuple)
    """
    try:
        response = get_supabase().table('metas') \
            .select('*') \
            .eq('id', goal_id) \
            .limit(1) \
            .execute()
    except Exception as e:
        current_app.logger.error(f"Error fetching goal {goal_id}: {str(e)}")
        return None, error_result("Erro ao buscar meta", 500)

    if not response.data:
        return None, error_result("Meta não encontrada", 404)

    meta = response.data[0]
    if meta.get('usuario_id') != user_id:
        return None, error_result("Não autorizado", 403)

    return meta, None


def get_goals(user_id):
    try:
        response = get_supabase().table('metas') \
            .select('*') \
            .eq('usuario_id', user_id) \
            .order('data_criacao', desc=True) \
            .execute()
        return {"success": True, "data": response.data or []}
    except Exception as e:
        current_app.logger.error(f"Error fetching goals for {user_id}: {str(e)}")
        return error_result("Erro ao buscar metas", 500)


def create_goal(current_user_id, data):
    """
    Creates a goal for the caller. The body's 'usuario_id' must be the caller.
    """
    if data.get('usuario_id') != current_user_id:
        return error_result("Não autorizado", 403)

    tipo = data.get('tipo')
    valor_alvo = data.get('valor_alvo')

    if not tipo or not valor_alvo:
        return error_result("Tipo e valor alvo são obrigatórios", 400)

    if as_number(valor_alvo) is None:
        return error_result("Valor alvo deve ser numérico", 400)

    try:
        response = get_supabase().table('metas').insert({
            "usuario_id": current_user_id,
            "tipo": tipo,
            "valor_alvo": valor_alvo,
            "valor_atual": 0,
            "data_limite": data.get('data_limite') or None,
            "descricao": data.get('descricao') or None,
            "concluida": False,
            "data_criacao": utc_now_iso()
        }).execute()
    except Exception as e:
        current_app.logger.error(f"Error creating goal for {current_user_id}: {str(e)}")
        return error_result("Erro ao criar meta", 500)

    return {"success": True, "data": response.data[0]}, 201


def update_goal_progress(current_user_id, goal_id, valor_atual):
    if valor_atual is None:
        return error_result("Valor atual é obrigatório", 400)

    if as_number(valor_atual) is None:
        return error_result("Valor atual deve ser numérico", 400)

    meta, error = _fetch_owned_goal(goal_id, current_user_id)
    if error:
        return error

    try:
        response = get_supabase().table('metas') \
            .update({
                "valor_atual": valor_atual,
                "concluida": is_goal_complete(valor_atual, meta['valor_alvo']),
                "data_atualizacao": utc_now_iso()
            }) \
            .eq('id', goal_id) \
            .execute()
    except Exception as e:
        current_app.logger.error(f"Error updating progress of goal {goal_id}: {str(e)}")
        return error_result("Erro ao atualizar meta", 500)

    return {"success": True, "data": response.data[0]}


def update_goal(current_user_id, goal_id, data):
    """
    Edits the allow-listed fields of a goal. 'concluida' is recomputed
    against the (possibly new) target.
    """
    updates = pick_allowed_fields(data, current_app.config['META_EDITABLE_FIELDS'])

    if not updates:
        return error_result("Nenhum campo válido para atualizar", 400)

    if 'valor_alvo' in updates and (not updates['valor_alvo'] or as_number(updates['valor_alvo']) is None):
        return error_result("Valor alvo deve ser numérico", 400)

    if 'tipo' in updates and not updates['tipo']:
        return error_result("Tipo é obrigatório", 400)

    meta, error = _fetch_owned_goal(goal_id, current_user_id)
    if error:
        return error

    valor_alvo = updates.get('valor_alvo', meta['valor_alvo'])
    updates['concluida'] = is_goal_complete(meta.get('valor_atual') or 0, valor_alvo)
    updates['data_atualizacao'] = utc_now_iso()

    try:
        response = get_supabase().table('metas') \
            .update(updates) \
            .eq('id', goal_id) \
            .execute()
    except Exception as e:
        current_app.logger.error(f"Error updating goal {goal_id}: {str(e)}")
        return error_result("Erro ao atualizar meta", 500)

    return {"success": True, "data": response.data[0]}


def delete_goal(current_user_id, goal_id):
    _, error = _fetch_owned_goal(goal_id, current_user_id)
    if error:
        return error

    try:
        get_supabase().table('metas').delete().eq('id', goal_id).execute()
    except Exception as e:
        current_app.logger.error(f"Error deleting goal {goal_id}: {str(e)}")
        return error_result("Erro ao excluir meta", 500)

    current_app.logger.info(f"Goal {goal_id} deleted by {current_user_id}")
    return {"success": True}


def get_goal_statistics(user_id):
    try:
        response = get_supabase().table('metas') \
            .select('*') \
            .eq('usuario_id', user_id) \
            .execute()
    except Exception as e:
        current_app.logger.error(f"Error fetching goal statistics for {user_id}: {str(e)}")
        return error_result("Erro ao buscar estatísticas", 500)

    return {"success": True, "data": summarize_goals(response.data or [])}
