"""
Shared fixtures for the API test suite.

The app is built with an in-memory Supabase fake, so no network access or
credentials are needed. Users are created through the `make_user` factory,
which registers an Auth account, a 'usuarios' row and a bearer token.
"""

import uuid
from types import SimpleNamespace

import pytest

from nutriapp import create_app, socketio
from nutriapp.config import Config
from fake_supabase import FakeSupabase, FakeAuthUser


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret'
    SUPABASE_URL = 'http://supabase.test'
    SUPABASE_KEY = 'test-service-key'
    SUPABASE_JWT_SECRET = None
    LOG_LEVEL = 'WARNING'
    CORS_ORIGINS = ['http://localhost:5173']
    SOCKETIO_ASYNC_MODE = 'threading'


# Realistic default profiles
REALISTIC_USERS = {
    "default": {"nome": "Ana Souza", "email_prefix": "ana.souza", "objetivo": "emagrecimento"},
    "athlete": {"nome": "Bruno Lima", "email_prefix": "bruno.lima", "objetivo": "hipertrofia"},
    "nutri": {"nome": "Dra. Carla Mendes", "email_prefix": "carla.mendes", "objetivo": None},
}


@pytest.fixture
def supabase():
    return FakeSupabase()


@pytest.fixture
def app(supabase):
    return create_app(TestingConfig, supabase_client=supabase, auth_client_factory=lambda: supabase)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def socket_client(app):
    """Socket.IO test client bound to the current app."""
    sio_client = socketio.test_client(app)
    yield sio_client
    if sio_client.is_connected():
        sio_client.disconnect()


@pytest.fixture
def make_user(supabase):
    """
    Factory creating an authenticated user.

    Returns a namespace with id, email, token and ready-to-use headers.
    """
    def _make_user(profile_type="default", tipo="usuario", with_profile=True):
        profile = REALISTIC_USERS[profile_type]
        user_id = str(uuid.uuid4())
        email = f"{profile['email_prefix']}-{user_id[:8]}@example.com"

        auth_user = FakeAuthUser(user_id, email, {"full_name": profile["nome"], "tipo": tipo})
        token = supabase.auth.issue_token(auth_user)

        if with_profile:
            supabase.rows('usuarios').append({
                "id": user_id,
                "nome": profile["nome"],
                "email": email,
                "cpf": "123.456.789-00",
                "objetivo": profile["objetivo"],
            })

        return SimpleNamespace(
            id=user_id,
            email=email,
            token=token,
            headers={"Authorization": f"Bearer {token}"}
        )

    return _make_user


@pytest.fixture
def make_nutritionist(supabase, make_user):
    """Factory creating a user with a 'nutricionistas' row."""
    def _make_nutritionist(ativo=True):
        user = make_user(profile_type="nutri", tipo="nutricionista")
        row = {
            "id": str(uuid.uuid4()),
            "user_id": user.id,
            "nome": "Dra. Carla Mendes",
            "crn": "CRN-3 12345",
            "telefone": "11999990000",
            "especialidade": "esportiva",
            "ativo": ativo,
        }
        supabase.rows('nutricionistas').append(row)
        user.nutritionist_id = row["id"]
        return user

    return _make_nutritionist
