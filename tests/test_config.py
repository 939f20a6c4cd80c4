"""Tests for CosmosConfig and credential selection."""

import pytest

from cosmos_repository import AuthenticationError, CosmosAuthMethod, CosmosConfig, get_credential

ENV_VARS = [
    "COSMOS_ENDPOINT",
    "COSMOS_KEY",
    "COSMOS_DATABASE",
    "COSMOS_AUTH_METHOD",
    "COSMOS_CONSISTENCY_LEVEL",
    "AZURE_TENANT_ID",
    "AZURE_CLIENT_ID",
    "AZURE_CLIENT_SECRET",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestFromEnv:
    def test_missing_endpoint(self, clean_env):
        with pytest.raises(AuthenticationError):
            CosmosConfig.from_env()

    def test_key_auth_when_key_set(self, clean_env):
        clean_env.setenv("COSMOS_ENDPOINT", "https://acct.documents.azure.com:443/")
        clean_env.setenv("COSMOS_KEY", "secret")
        config = CosmosConfig.from_env()
        assert config.auth_method is CosmosAuthMethod.KEY
        assert config.key == "secret"
        assert config.database_name == "cosmos_repository"
        assert config.consistency_level is None

    def test_default_credential_without_key(self, clean_env):
        clean_env.setenv("COSMOS_ENDPOINT", "https://acct.documents.azure.com:443/")
        assert CosmosConfig.from_env().auth_method is CosmosAuthMethod.DEFAULT_CREDENTIAL

    def test_explicit_settings(self, clean_env):
        clean_env.setenv("COSMOS_ENDPOINT", "https://acct.documents.azure.com:443/")
        clean_env.setenv("COSMOS_DATABASE", "orders")
        clean_env.setenv("COSMOS_AUTH_METHOD", "SERVICE_PRINCIPAL")
        clean_env.setenv("COSMOS_CONSISTENCY_LEVEL", "Session")
        clean_env.setenv("AZURE_TENANT_ID", "tenant")
        clean_env.setenv("AZURE_CLIENT_ID", "client")
        clean_env.setenv("AZURE_CLIENT_SECRET", "shh")
        config = CosmosConfig.from_env()
        assert config.auth_method is CosmosAuthMethod.SERVICE_PRINCIPAL
        assert config.database_name == "orders"
        assert config.consistency_level == "Session"
        assert config.azure_client_id == "client"

    def test_database_name_argument_wins(self, clean_env):
        clean_env.setenv("COSMOS_ENDPOINT", "https://acct.documents.azure.com:443/")
        clean_env.setenv("COSMOS_DATABASE", "orders")
        assert CosmosConfig.from_env(database_name="other").database_name == "other"

    def test_invalid_auth_method(self, clean_env):
        clean_env.setenv("COSMOS_ENDPOINT", "https://acct.documents.azure.com:443/")
        clean_env.setenv("COSMOS_AUTH_METHOD", "password")
        with pytest.raises(AuthenticationError, match="Authentication failed"):
            CosmosConfig.from_env()


class TestGetCredential:
    def test_key(self):
        config = CosmosConfig(endpoint="https://x", key="k", auth_method=CosmosAuthMethod.KEY)
        assert get_credential(config) == "k"

    def test_key_required(self):
        config = CosmosConfig(endpoint="https://x", auth_method=CosmosAuthMethod.KEY)
        with pytest.raises(AuthenticationError):
            get_credential(config)

    def test_service_principal_requires_secret(self):
        config = CosmosConfig(
            endpoint="https://x",
            auth_method=CosmosAuthMethod.SERVICE_PRINCIPAL,
            azure_tenant_id="tenant",
            azure_client_id="client",
        )
        with pytest.raises(AuthenticationError) as exc_info:
            get_credential(config)
        assert "azure_client_secret" in exc_info.value.details["reason"]
