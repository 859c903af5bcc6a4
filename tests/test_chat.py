"""
Tests for chat: pairing key, conversation grouping and the /api/chat routes.
"""

from unittest import mock

import pytest

from nutriapp import socketio
from nutriapp.services.chat import canonical_pair_key, group_conversations, send_message


def _message(remetente, destinatario, data_envio, lida=False, conteudo="oi", id=None):
    return {
        "id": id or f"{remetente}-{destinatario}-{data_envio}",
        "remetente_id": remetente,
        "destinatario_id": destinatario,
        "conteudo": conteudo,
        "tipo": "texto",
        "lida": lida,
        "data_envio": data_envio,
    }


# =============================================================================
# PURE LOGIC
# =============================================================================

@pytest.mark.parametrize("a, b", [
    ("user-1", "nutri-9"),
    ("b", "a"),
    ("same", "same"),
    ("0f8c1e", "f00d"),
])
def test_canonical_pair_key_is_swap_invariant(a, b):
    assert canonical_pair_key(a, b) == canonical_pair_key(b, a)


def test_canonical_pair_key_format():
    assert canonical_pair_key("zeta", "alfa") == "alfa_zeta"


def test_grouping_keeps_first_seen_message_as_latest():
    mensagens = [
        _message("A", "B", "2024-01-01T10:02:00", id="t2"),
        _message("B", "A", "2024-01-01T10:01:00", id="t1"),
    ]

    conversas = group_conversations(mensagens, "A")

    assert len(conversas) == 1
    assert conversas[0]["id"] == "A_B"
    assert conversas[0]["ultimaMensagem"]["id"] == "t2"
    assert conversas[0]["participantes"] == ["A", "B"]


def test_unread_counts_only_unread_messages_addressed_to_caller():
    mensagens = [
        _message("B", "A", "2024-01-01T10:05:00"),
        _message("A", "B", "2024-01-01T10:04:00"),              # sent by caller
        _message("B", "A", "2024-01-01T10:03:00", lida=True),   # already read
        _message("B", "A", "2024-01-01T10:02:00"),
        _message("C", "A", "2024-01-01T10:01:00"),
    ]

    conversas = group_conversations(mensagens, "A")

    by_id = {c["id"]: c for c in conversas}
    assert by_id["A_B"]["naoLidas"] == 2
    assert by_id["A_C"]["naoLidas"] == 1
    assert [c["id"] for c in conversas] == ["A_B", "A_C"]


# =============================================================================
# ROUTES
# =============================================================================

def test_conversations_route(client, supabase, make_user, make_nutritionist):
    user = make_user()
    nutri = make_nutritionist()
    supabase.rows("mensagens_chat").extend([
        _message(user.id, nutri.id, "2024-01-01T09:00:00", id="m1"),
        _message(nutri.id, user.id, "2024-01-01T09:05:00", id="m2"),
        _message("x", "y", "2024-01-01T09:10:00", id="unrelated"),
    ])

    response = client.get("/api/chat/conversas", headers=user.headers)

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert len(data) == 1
    assert data[0]["id"] == canonical_pair_key(user.id, nutri.id)
    assert data[0]["ultimaMensagem"]["id"] == "m2"
    assert data[0]["naoLidas"] == 1


def test_history_marks_unread_messages_to_caller_as_read(client, supabase, make_user, make_nutritionist):
    user = make_user()
    nutri = make_nutritionist()
    supabase.rows("mensagens_chat").extend([
        _message(nutri.id, user.id, "2024-01-01T09:05:00", id="to-user"),
        _message(user.id, nutri.id, "2024-01-01T09:00:00", id="to-nutri"),
        _message(nutri.id, "other", "2024-01-01T09:02:00", id="other-chat"),
    ])

    response = client.get(f"/api/chat/{user.id}/{nutri.id}", headers=user.headers)

    assert response.status_code == 200
    assert [m["id"] for m in response.get_json()["data"]] == ["to-nutri", "to-user"]

    lida = {m["id"]: m["lida"] for m in supabase.rows("mensagens_chat")}
    assert lida == {"to-user": True, "to-nutri": False, "other-chat": False}


def test_history_is_forbidden_for_outsiders(client, supabase, make_user, make_nutritionist):
    user = make_user()
    nutri = make_nutritionist()
    outsider = make_user(profile_type="athlete")
    supabase.rows("mensagens_chat").append(_message(nutri.id, user.id, "2024-01-01T09:05:00"))

    response = client.get(f"/api/chat/{user.id}/{nutri.id}", headers=outsider.headers)

    assert response.status_code == 403
    assert ("mensagens_chat", "select") not in supabase.calls


def test_send_persists_and_notifies_room(client, supabase, make_user, make_nutritionist):
    user = make_user()
    nutri = make_nutritionist()

    with mock.patch.object(socketio, "emit") as emit:
        response = client.post("/api/chat/send", headers=user.headers, json={
            "destinatarioId": nutri.id,
            "conteudo": "Posso trocar o arroz por batata?",
        })

    assert response.status_code == 201
    mensagem = response.get_json()["data"]
    assert mensagem["lida"] is False
    assert mensagem["tipo"] == "texto"
    assert mensagem["remetente_id"] == user.id
    assert mensagem["data_envio"]
    assert supabase.rows("mensagens_chat")[0]["id"] == mensagem["id"]

    emit.assert_called_once_with("new_message", mensagem, to=canonical_pair_key(user.id, nutri.id))


def test_send_reaches_socket_joined_to_conversation_room(client, socket_client, make_user, make_nutritionist):
    user = make_user()
    nutri = make_nutritionist()
    # The nutritionist's side joins with the ids in the opposite order
    socket_client.emit("join_chat", {"userId": nutri.id, "nutriId": user.id})

    response = client.post("/api/chat/send", headers=user.headers, json={
        "destinatarioId": nutri.id,
        "conteudo": "Comi fora hoje, tudo bem?",
    })

    assert response.status_code == 201
    received = [packet for packet in socket_client.get_received() if packet["name"] == "new_message"]
    assert len(received) == 1
    relayed = received[0]["args"][0]
    assert relayed["id"] == response.get_json()["data"]["id"]
    assert relayed["conteudo"] == "Comi fora hoje, tudo bem?"
    assert relayed["remetente_id"] == user.id


def test_send_to_unknown_recipient_is_404(client, supabase, make_user):
    user = make_user()

    with mock.patch.object(socketio, "emit") as emit:
        response = client.post("/api/chat/send", headers=user.headers, json={
            "destinatarioId": "ghost", "conteudo": "olá",
        })

    assert response.status_code == 404
    assert supabase.rows("mensagens_chat") == []
    emit.assert_not_called()


def test_send_requires_content(client, make_user, make_nutritionist):
    user = make_user()
    nutri = make_nutritionist()
    response = client.post("/api/chat/send", headers=user.headers, json={"destinatarioId": nutri.id})
    assert response.status_code == 400


def test_send_message_service_uses_given_socket_server(app, make_user, make_nutritionist):
    user = make_user()
    nutri = make_nutritionist()
    notifier = mock.Mock()

    with app.app_context():
        result, status = send_message(notifier, user.id, nutri.id, "bom dia", tipo="texto")

    assert status == 201
    notifier.emit.assert_called_once_with(
        "new_message", result["data"], to=canonical_pair_key(nutri.id, user.id)
    )


def test_mark_read_is_scoped_to_recipient(client, supabase, make_user, make_nutritionist):
    user = make_user()
    nutri = make_nutritionist()
    supabase.rows("mensagens_chat").extend([
        _message(nutri.id, user.id, "2024-01-01T09:05:00", id="mine"),
        _message(user.id, nutri.id, "2024-01-01T09:06:00", id="theirs"),
    ])

    response = client.post("/api/chat/marcar-lidas", headers=user.headers, json={
        "mensagensIds": ["mine", "theirs"],
    })

    assert response.status_code == 200
    assert response.get_json() == {"success": True}
    lida = {m["id"]: m["lida"] for m in supabase.rows("mensagens_chat")}
    assert lida == {"mine": True, "theirs": False}


@pytest.mark.parametrize("payload", [{}, {"mensagensIds": []}, {"mensagensIds": "mine"}])
def test_mark_read_requires_id_list(client, make_user, payload):
    user = make_user()
    response = client.post("/api/chat/marcar-lidas", headers=user.headers, json=payload)
    assert response.status_code == 400
