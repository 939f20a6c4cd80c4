"""
Cosmos DB connection configuration.

Supports multiple authentication methods:
- Key-based authentication (if org policy allows)
- Azure AD via DefaultAzureCredential (recommended)
- Azure Managed Identity
- Service Principal
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import Any

from azure.identity.aio import (
    ClientSecretCredential,
    DefaultAzureCredential,
    ManagedIdentityCredential,
)

from .exceptions import AuthenticationError

DEFAULT_DATABASE_NAME = "cosmos_repository"


class CosmosAuthMethod(Enum):
    """Authentication method for Cosmos DB.

    KEY: Use the account key (not recommended for production)
    DEFAULT_CREDENTIAL: Use Azure DefaultAzureCredential (recommended)
        - Works with Azure CLI, Managed Identity, Environment variables, etc.
    MANAGED_IDENTITY: Use Azure Managed Identity explicitly
    SERVICE_PRINCIPAL: Use Service Principal with client_id/client_secret
    """

    KEY = "key"
    DEFAULT_CREDENTIAL = "default_credential"
    MANAGED_IDENTITY = "managed_identity"
    SERVICE_PRINCIPAL = "service_principal"


@dataclass
class CosmosConfig:
    """Configuration for a Cosmos DB account and database.

    Environment Variables:
        COSMOS_ENDPOINT: Cosmos DB endpoint URL
        COSMOS_KEY: Cosmos DB key (if using key auth)
        COSMOS_DATABASE: Database name (default: cosmos_repository)
        COSMOS_AUTH_METHOD: Auth method (default: key when COSMOS_KEY is set,
            default_credential otherwise)
        COSMOS_CONSISTENCY_LEVEL: Optional client consistency level override
        AZURE_TENANT_ID: Azure tenant ID (for service principal)
        AZURE_CLIENT_ID: Azure client ID (for service principal/managed identity)
        AZURE_CLIENT_SECRET: Azure client secret (for service principal)

    Attributes:
        endpoint: Cosmos DB account endpoint URL
        database_name: Name of the database holding the containers
        key: Cosmos DB account key (only for KEY auth method)
        auth_method: Authentication method
        azure_tenant_id: Azure tenant ID (for SERVICE_PRINCIPAL)
        azure_client_id: Azure client/app ID (for SERVICE_PRINCIPAL/MANAGED_IDENTITY)
        azure_client_secret: Azure client secret (for SERVICE_PRINCIPAL)
        consistency_level: Client consistency level (e.g. "Session"), None for
            the account default
    """

    endpoint: str
    database_name: str = DEFAULT_DATABASE_NAME
    key: str | None = None
    auth_method: CosmosAuthMethod = CosmosAuthMethod.DEFAULT_CREDENTIAL
    azure_tenant_id: str | None = None
    azure_client_id: str | None = None
    azure_client_secret: str | None = None
    consistency_level: str | None = None

    @classmethod
    def from_env(cls, database_name: str | None = None) -> CosmosConfig:
        """Create config from environment variables.

        Args:
            database_name: Overrides COSMOS_DATABASE when given

        Returns:
            CosmosConfig instance

        Raises:
            AuthenticationError: If the endpoint or auth method is missing or invalid
        """
        endpoint = os.environ.get("COSMOS_ENDPOINT")
        if not endpoint:
            raise AuthenticationError("cosmos", "COSMOS_ENDPOINT environment variable not set")

        key = os.environ.get("COSMOS_KEY")
        default_method = CosmosAuthMethod.KEY if key else CosmosAuthMethod.DEFAULT_CREDENTIAL
        auth_method_str = os.environ.get("COSMOS_AUTH_METHOD")
        if auth_method_str:
            try:
                auth_method = CosmosAuthMethod(auth_method_str.lower())
            except ValueError:
                raise AuthenticationError(
                    endpoint, f"Unsupported COSMOS_AUTH_METHOD: {auth_method_str}"
                ) from None
        else:
            auth_method = default_method

        return cls(
            endpoint=endpoint,
            database_name=database_name
            or os.environ.get("COSMOS_DATABASE", DEFAULT_DATABASE_NAME),
            key=key,
            auth_method=auth_method,
            azure_tenant_id=os.environ.get("AZURE_TENANT_ID"),
            azure_client_id=os.environ.get("AZURE_CLIENT_ID"),
            azure_client_secret=os.environ.get("AZURE_CLIENT_SECRET"),
            consistency_level=os.environ.get("COSMOS_CONSISTENCY_LEVEL"),
        )


def get_credential(config: CosmosConfig) -> Any:
    """Get the appropriate credential based on auth method.

    Args:
        config: Configuration with auth settings

    Returns:
        Credential object (or key string) for Cosmos DB authentication

    Raises:
        AuthenticationError: If credential cannot be created
    """
    auth_method = config.auth_method

    if auth_method == CosmosAuthMethod.KEY:
        if not config.key:
            raise AuthenticationError(config.endpoint, "key required for KEY authentication")
        return config.key

    if auth_method == CosmosAuthMethod.DEFAULT_CREDENTIAL:
        return DefaultAzureCredential()

    if auth_method == CosmosAuthMethod.MANAGED_IDENTITY:
        # If client_id is provided, use user-assigned managed identity
        if config.azure_client_id:
            return ManagedIdentityCredential(client_id=config.azure_client_id)
        return ManagedIdentityCredential()

    if auth_method == CosmosAuthMethod.SERVICE_PRINCIPAL:
        if not all([config.azure_tenant_id, config.azure_client_id, config.azure_client_secret]):
            raise AuthenticationError(
                config.endpoint,
                "azure_tenant_id, azure_client_id, and azure_client_secret "
                "required for SERVICE_PRINCIPAL authentication",
            )
        return ClientSecretCredential(
            tenant_id=config.azure_tenant_id,
            client_id=config.azure_client_id,
            client_secret=config.azure_client_secret,
        )

    raise AuthenticationError(config.endpoint, f"Unsupported auth method: {auth_method}")
