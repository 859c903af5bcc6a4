# nutriapp/services/chat.py
"""
Chat services: conversation summaries, history, sending and read receipts.

Messages live in the 'mensagens_chat' table. A conversation between two
participants is addressed by canonical_pair_key(), which is also the
Socket.IO room both participants join.
"""

from flask import current_app
from nutriapp.supabase_client import get_supabase
from nutriapp.utils import error_result, utc_now_iso

NEW_MESSAGE_EVENT = 'new_message'


def canonical_pair_key(first_id, second_id):
    """
    Returns the conversation/room id for two participants.
    canonical_pair_key(a, b) == canonical_pair_key(b, a)
    """
    return '_'.join(sorted([str(first_id), str(second_id)]))


def group_conversations(mensagens, user_id):
    """
    Groups messages into one summary per participant pair.

    'mensagens' must already be sorted by data_envio descending: the first
    message seen for a pair becomes 'ultimaMensagem'. 'naoLidas' counts the
    unread messages addressed to 'user_id'. Summaries keep the order in
    which their pair first appeared.
    """
    conversas = {}

    for mensagem in mensagens:
        remetente_id = mensagem.get('remetente_id')
        destinatario_id = mensagem.get('destinatario_id')
        conversa_id = canonical_pair_key(remetente_id, destinatario_id)

        if conversa_id not in conversas:
            conversas[conversa_id] = {
                "id": conversa_id,
                "participantes": [remetente_id, destinatario_id],
                "ultimaMensagem": mensagem,
                "naoLidas": 0
            }

        if destinatario_id == user_id and not mensagem.get('lida'):
            conversas[conversa_id]["naoLidas"] += 1

    return list(conversas.values())


def get_conversations(user_id):
    try:
        response = get_supabase().table('mensagens_chat') \
            .select('*') \
            .or_(f"remetente_id.eq.{user_id},destinatario_id.eq.{user_id}") \
            .order('data_envio', desc=True) \
            .execute()
    except Exception as e:
        current_app.logger.error(f"Error fetching conversations for {user_id}: {str(e)}")
        return error_result("Erro ao buscar conversas", 500)

    return {"success": True, "data": group_conversations(response.data or [], user_id)}


def get_messages(current_user_id, user_id, nutri_id):
    """
    Returns the history between 'user_id' and 'nutri_id', oldest first.

    The caller must be one of the two participants. Messages addressed to
    the caller that are still unread are marked as read in one update; the
    history is returned as it was fetched.
    """
    if current_user_id not in (user_id, nutri_id):
        return error_result("Não autorizado", 403)

    supabase = get_supabase()

    try:
        response = supabase.table('mensagens_chat') \
            .select('*') \
            .or_(
                f"and(remetente_id.eq.{user_id},destinatario_id.eq.{nutri_id}),"
                f"and(remetente_id.eq.{nutri_id},destinatario_id.eq.{user_id})"
            ) \
            .order('data_envio', desc=False) \
            .execute()
        mensagens = response.data or []

        unread_ids = [
            m['id'] for m in mensagens
            if m.get('destinatario_id') == current_user_id and not m.get('lida')
        ]

        if unread_ids:
            supabase.table('mensagens_chat') \
                .update({"lida": True}) \
                .in_('id', unread_ids) \
                .execute()

    except Exception as e:
        current_app.logger.error(f"Error fetching messages {user_id}/{nutri_id}: {str(e)}")
        return error_result("Erro ao buscar mensagens", 500)

    return {"success": True, "data": mensagens}


def send_message(socketio, remetente_id, destinatario_id, conteudo, tipo='texto'):
    """
    Persists a message and notifies the participants' room.

    Args:
        socketio: The SocketIO server the 'new_message' event is emitted on
        remetente_id: Authenticated sender
        destinatario_id: Recipient, must exist in 'usuarios'
        conteudo: Message body
        tipo: Message type ('texto' by default)

    The broadcast happens after the insert returns; there is no delivery
    acknowledgement.
    """
    supabase = get_supabase()

    try:
        recipient = supabase.table('usuarios') \
            .select('id') \
            .eq('id', destinatario_id) \
            .limit(1) \
            .execute()
    except Exception as e:
        current_app.logger.error(f"Error looking up recipient {destinatario_id}: {str(e)}")
        return error_result("Destinatário não encontrado", 404)

    if not recipient.data:
        return error_result("Destinatário não encontrado", 404)

    try:
        response = supabase.table('mensagens_chat').insert({
            "remetente_id": remetente_id,
            "destinatario_id": destinatario_id,
            "conteudo": conteudo,
            "tipo": tipo,
            "lida": False,
            "data_envio": utc_now_iso()
        }).execute()
        mensagem = response.data[0]
    except Exception as e:
        current_app.logger.error(f"Error sending message from {remetente_id}: {str(e)}")
        return error_result("Erro ao enviar mensagem", 500)

    room = canonical_pair_key(remetente_id, destinatario_id)
    socketio.emit(NEW_MESSAGE_EVENT, mensagem, to=room)

    return {"success": True, "data": mensagem}, 201


def mark_messages_read(user_id, mensagens_ids):
    """
    Marks the given messages as read. Only messages addressed to 'user_id'
    are affected; other ids in the list are silently left untouched.
    """
    try:
        get_supabase().table('mensagens_chat') \
            .update({"lida": True}) \
            .in_('id', mensagens_ids) \
            .eq('destinatario_id', user_id) \
            .execute()
    except Exception as e:
        current_app.logger.error(f"Error marking messages read for {user_id}: {str(e)}")
        return error_result("Erro ao atualizar mensagens", 500)

    return {"success": True}
