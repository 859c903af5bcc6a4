# nutriapp/supabase_client.py
"""
Supabase client access.

Every table read/write in the services goes through the client returned by
get_supabase(). That client is created once per application (LAZY: on
first use, so the app boots without credentials in tests and tooling),
cached in app.extensions and always sends the service key.

Sign-up and sign-in store the resulting session on the client they run on
and switch its requests to the user's token. They therefore run on a
short-lived client from create_auth_client(), never on the shared one.
"""

from flask import current_app
from supabase import create_client, ClientOptions

EXTENSION_KEY = 'supabase'
AUTH_FACTORY_KEY = 'supabase_auth_factory'


class SupabaseConfigError(Exception):
    """Raised when the Supabase credentials are missing from the config"""
    def __init__(self, message):
        self.message = message
        super().__init__(self.message)


def init_supabase(app, client=None, auth_client_factory=None):
    """
    Registers already-built clients on the app (used by tests to inject
    fakes). Without them the real clients are created on demand.
    """
    if client is not None:
        app.extensions[EXTENSION_KEY] = client
    if auth_client_factory is not None:
        app.extensions[AUTH_FACTORY_KEY] = auth_client_factory


def _get_credentials():
    supabase_url = current_app.config.get('SUPABASE_URL')
    supabase_key = current_app.config.get('SUPABASE_KEY')

    if not supabase_url or not supabase_key:
        raise SupabaseConfigError("SUPABASE_URL and SUPABASE_KEY must be configured")

    return supabase_url, supabase_key


def get_supabase():
    """
    Returns the Supabase client bound to the current application.

    Raises:
        SupabaseConfigError: If SUPABASE_URL or SUPABASE_KEY is not configured
    """
    client = current_app.extensions.get(EXTENSION_KEY)
    if client is not None:
        return client

    supabase_url, supabase_key = _get_credentials()

    client = create_client(supabase_url, supabase_key)
    current_app.extensions[EXTENSION_KEY] = client
    current_app.logger.info("Supabase client created")
    return client


def create_auth_client():
    """
    Returns a new client for a single sign-up or sign-in call.

    The session is kept in memory only and never refreshed, so the client
    can be dropped as soon as the call returns.

    Raises:
        SupabaseConfigError: If SUPABASE_URL or SUPABASE_KEY is not configured
    """
    factory = current_app.extensions.get(AUTH_FACTORY_KEY)
    if factory is not None:
        return factory()

    supabase_url, supabase_key = _get_credentials()

    return create_client(
        supabase_url,
        supabase_key,
        options=ClientOptions(auto_refresh_token=False, persist_session=False)
    )
