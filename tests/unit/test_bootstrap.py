# =============================================================================
# tests/unit/test_bootstrap.py
# Unit Tests for Application Wiring
# =============================================================================

from types import SimpleNamespace
from unittest.mock import MagicMock

from copilot_core.auth import AuthGateway
from copilot_core.bootstrap import build_container
from copilot_core.data import MemoryBackend, SupabaseBackend


def _user(uid="auth-1", email="ada@example.com"):
    return SimpleNamespace(id=uid, email=email, user_metadata={"display_name": "Ada"})


class TestBuildContainer:

    def test_memory_backend_from_settings(self, memory_settings):
        container = build_container(memory_settings)

        assert isinstance(container.backend, MemoryBackend)
        assert container.store.connection_manager is container.connection
        assert container.projects.store is container.store
        assert not container.new_auth_gateway().is_configured
        assert not container.advisor.is_configured

    def test_supabase_settings_configure_store_and_auth(self, supabase_settings, mock_supabase):
        backend = SupabaseBackend(supabase_settings, client_factory=lambda s: mock_supabase)
        container = build_container(supabase_settings, backend=backend)

        assert container.new_auth_gateway().is_configured
        assert container.store.is_configured

    def test_each_session_gets_a_fresh_gateway(self, memory_settings):
        container = build_container(memory_settings)
        assert container.new_auth_gateway() is not container.new_auth_gateway()

    def test_policies_follow_settings(self, memory_settings, sleeper):
        memory_settings.max_retries = 1
        memory_settings.max_session_recovery_attempts = 2
        container = build_container(memory_settings, sleep=sleeper)

        assert container.connection.max_retries == 1
        assert container.connection.max_session_recovery_attempts == 2

        container.connection.retry_connection()
        assert sleeper.delays == [1.0]


class TestAuthIndependentOfTransport:
    """Going offline must not sign anyone out or make auth look unconfigured"""

    def test_signed_in_principal_survives_offline_mode(self, supabase_settings, sleeper):
        data_client = MagicMock()
        auth_client = MagicMock()
        auth_client.auth.sign_in_with_password.return_value = SimpleNamespace(user=_user())
        auth_client.auth.get_session.return_value = SimpleNamespace(user=_user(), access_token="jwt-ada")

        backend = SupabaseBackend(supabase_settings, client_factory=lambda s: data_client)
        container = build_container(
            supabase_settings,
            sleep=sleeper,
            backend=backend,
            auth_factory=lambda: AuthGateway(supabase_settings, client_factory=lambda s: auth_client),
        )
        gateway = container.new_auth_gateway()
        principal = gateway.sign_in("ada@example.com", "secret")

        container.connection.enable_offline_mode()

        assert backend.client is None
        assert gateway.is_configured
        assert gateway.current_user() == principal
        assert gateway.access_token() == "jwt-ada"
        data_client.auth.sign_in_with_password.assert_not_called()

    def test_sign_in_leaves_shared_data_client_untouched(self, supabase_settings):
        data_client = MagicMock()
        auth_client = MagicMock()
        auth_client.auth.sign_in_with_password.return_value = SimpleNamespace(user=_user())

        backend = SupabaseBackend(supabase_settings, client_factory=lambda s: data_client)
        container = build_container(
            supabase_settings,
            backend=backend,
            auth_factory=lambda: AuthGateway(supabase_settings, client_factory=lambda s: auth_client),
        )
        container.new_auth_gateway().sign_in("ada@example.com", "secret")
        container.projects.create_project(user_id="auth-1", name="EcoTech")

        data_client.table.assert_called_with("projects")
        data_client.auth.sign_in_with_password.assert_not_called()
        data_client.postgrest.auth.assert_not_called()
