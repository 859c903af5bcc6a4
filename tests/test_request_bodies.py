"""
Tests for JSON bodies that parse but are not objects.

Every route reading a body answers 400 for a list or scalar body, for
public and protected routes alike.
"""

import pytest


PUBLIC_ROUTES = [
    ("post", "/api/auth/signup"),
    ("post", "/api/auth/login"),
    ("post", "/api/nutricionistas"),
]

PROTECTED_ROUTES = [
    ("post", "/api/metas"),
    ("put", "/api/metas/meta-1/progresso"),
    ("put", "/api/metas/meta-1"),
    ("post", "/api/chat/send"),
    ("post", "/api/chat/marcar-lidas"),
    ("put", "/api/user/{user_id}"),
    ("post", "/api/user/{user_id}/metricas"),
]


@pytest.mark.parametrize("body", [["a"], "texto", 42])
@pytest.mark.parametrize("method,path", PUBLIC_ROUTES)
def test_public_route_rejects_non_object_body(client, method, path, body):
    response = getattr(client, method)(path, json=body)

    assert response.status_code == 400
    payload = response.get_json()
    assert payload["success"] is False
    assert payload["error_code"] == 400


@pytest.mark.parametrize("method,path", PROTECTED_ROUTES)
def test_protected_route_rejects_non_object_body(client, supabase, make_user, method, path):
    user = make_user()

    response = getattr(client, method)(path.format(user_id=user.id), headers=user.headers, json=["a"])

    assert response.status_code == 400
    assert response.get_json()["error_code"] == 400
    assert supabase.rows("mensagens_chat") == []
    assert supabase.rows("metas") == []


def test_nutritionist_update_rejects_non_object_body(client, make_nutritionist):
    nutri = make_nutritionist()

    response = client.put("/api/nutricionistas/me", headers=nutri.headers, json=[{"ativo": True}])

    assert response.status_code == 400


def test_missing_body_is_still_a_validation_error(client):
    response = client.post("/api/auth/login")

    assert response.status_code == 400
    assert response.get_json()["error"] == "Email e senha são obrigatórios."
