# config.py

import os
from dotenv import load_dotenv

# Get the base directory of the application
basedir = os.path.abspath(os.path.dirname(__file__))

# This line finds the .env file in your root directory and loads it.
load_dotenv(os.path.join(basedir, '..', '.env'))
# --------------------------------------


def _split_csv(value):
    return [item.strip() for item in value.split(',') if item.strip()]


class Config:
    """
    Contains all the configuration variables for the application,
    including Supabase credentials and the per-table field allow-lists.
    """
    # --- Secret Key ---
    SECRET_KEY = os.environ.get('SECRET_KEY')

    # --- Supabase Settings ---
    # SUPABASE_KEY is the key the backend talks to the table API with
    # (service role in production so row-level policies do not block it).
    SUPABASE_URL = os.environ.get('SUPABASE_URL')
    SUPABASE_KEY = os.environ.get('SUPABASE_KEY') or os.environ.get('SUPABASE_SERVICE_ROLE_KEY')

    # When set, bearer tokens are verified locally with PyJWT instead of a
    # round trip to Supabase Auth.
    SUPABASE_JWT_SECRET = os.environ.get('SUPABASE_JWT_SECRET')

    # --- Server Settings ---
    PORT = int(os.environ.get('PORT') or 3000)
    LOG_LEVEL = os.environ.get('LOG_LEVEL') or 'INFO'
    CORS_ORIGINS = _split_csv(os.environ.get('CORS_ORIGINS') or 'http://localhost:5173')
    SOCKETIO_ASYNC_MODE = os.environ.get('SOCKETIO_ASYNC_MODE') or 'threading'

    # --- Health Metrics ---
    # Number of records returned by the metrics history endpoint.
    METRICAS_LIMIT = 30

    # --- EDITABLE FIELDS CONFIGURATION ---
    # Request bodies are filtered against these lists before reaching Supabase.
    USUARIO_EDITABLE_FIELDS = (
        'nome',
        'telefone',
        'data_nascimento',
        'altura',
        'peso',
        'genero',
        'objetivo',
    )

    # 'ativo' is reserved for admin approval and 'crn' is checked during it.
    NUTRICIONISTA_EDITABLE_FIELDS = (
        'nome',
        'telefone',
        'especialidade',
    )

    METRICA_FIELDS = (
        'peso',
        'altura',
        'imc',
        'percentual_gordura',
        'massa_muscular',
        'circunferencia_abdominal',
        'pressao_arterial',
        'frequencia_cardiaca',
        'glicemia',
        'calorias_consumidas',
        'agua_ml',
        'observacoes',
    )

    META_EDITABLE_FIELDS = (
        'tipo',
        'valor_alvo',
        'data_limite',
        'descricao',
    )
