# nutriapp/sockets.py
"""
Socket.IO relay for the chat.

Both participants join the room named by canonical_pair_key(userId, nutriId);
'send_message' is rebroadcast to that room as 'receive_message' with a
server timestamp. Nothing is persisted here (see POST /api/chat/send).
"""

from flask import request, current_app
from flask_socketio import join_room, emit
from nutriapp.services.chat import canonical_pair_key
from nutriapp.utils import utc_now_iso


def _room_from_payload(data):
    if not isinstance(data, dict):
        return None
    user_id = data.get('userId')
    nutri_id = data.get('nutriId')
    if not user_id or not nutri_id:
        return None
    return canonical_pair_key(user_id, nutri_id)


def handle_connect(auth=None):
    current_app.logger.info(f"Socket connected: {request.sid}")


def handle_disconnect(reason=None):
    current_app.logger.info(f"Socket disconnected: {request.sid}")


def handle_join_chat(data):
    room = _room_from_payload(data)
    if room is None:
        current_app.logger.warning(f"join_chat without userId/nutriId from {request.sid}")
        return

    join_room(room)
    current_app.logger.info(f"Socket {request.sid} joined room {room}")


def handle_send_message(data):
    room = _room_from_payload(data)
    if room is None:
        current_app.logger.warning(f"send_message without userId/nutriId from {request.sid}")
        return

    emit('receive_message', {
        "userId": data.get('userId'),
        "nutriId": data.get('nutriId'),
        "message": data.get('message'),
        "timestamp": utc_now_iso()
    }, to=room)


def register_socket_handlers(socketio):
    """Binds the chat events to a SocketIO server (call after init_app)."""
    socketio.on_event('connect', handle_connect)
    socketio.on_event('disconnect', handle_disconnect)
    socketio.on_event('join_chat', handle_join_chat)
    socketio.on_event('send_message', handle_send_message)
