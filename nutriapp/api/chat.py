# nutriapp/api/chat.py
# (Chat routes. Real-time delivery goes through the Socket.IO rooms.)

from flask import Blueprint, jsonify, g, current_app
from nutriapp.jwt_auth import require_jwt
from nutriapp.utils import _handle_service_result, get_json_body
from nutriapp.services.chat import (
    get_conversations,
    get_messages,
    send_message,
    mark_messages_read
)

bp = Blueprint('chat', __name__)


@bp.route('/conversas', methods=['GET'])
@require_jwt
def conversations_route():
    """One summary per conversation with the last message and unread count."""
    result = get_conversations(g.current_user.id)
    return _handle_service_result(result)


@bp.route('/<string:user_id>/<string:nutri_id>', methods=['GET'])
@require_jwt
def messages_route(user_id, nutri_id):
    """History between two participants; marks the caller's unread messages as read."""
    result = get_messages(g.current_user.id, user_id, nutri_id)
    return _handle_service_result(result)


@bp.route('/send', methods=['POST'])
@require_jwt
def send_route():
    data = get_json_body()
    destinatario_id = data.get('destinatarioId')
    conteudo = data.get('conteudo')

    if not destinatario_id or not conteudo:
        return jsonify({"success": False, "error": "Destinatário e conteúdo são obrigatórios."}), 400

    result = send_message(
        current_app.extensions['socketio'],
        remetente_id=g.current_user.id,
        destinatario_id=destinatario_id,
        conteudo=conteudo,
        tipo=data.get('tipo') or 'texto'
    )
    return _handle_service_result(result)


@bp.route('/marcar-lidas', methods=['POST'])
@require_jwt
def mark_read_route():
    data = get_json_body()
    mensagens_ids = data.get('mensagensIds')

    if not isinstance(mensagens_ids, list) or len(mensagens_ids) == 0:
        return jsonify({"success": False, "error": "IDs das mensagens são obrigatórios"}), 400

    result = mark_messages_read(g.current_user.id, mensagens_ids)
    return _handle_service_result(result)
