"""
Shared test configuration and fixtures.

Repositories and the template run against the in-memory client from
tests/fakes.py. Blocking repositories get their own event loop thread per
test so no state leaks between tests.
"""

import pytest

from cosmos_repository import (
    CosmosClientWrapper,
    CosmosConfig,
    CosmosTemplate,
    EventLoopThread,
)
from cosmos_repository.config import CosmosAuthMethod

from .fakes import FakeCosmosClient


@pytest.fixture
def config() -> CosmosConfig:
    return CosmosConfig(
        endpoint="https://localhost:8081",
        database_name="test-db",
        key="test-key",
        auth_method=CosmosAuthMethod.KEY,
    )


@pytest.fixture
def fake_client() -> FakeCosmosClient:
    return FakeCosmosClient()


@pytest.fixture
def client(config: CosmosConfig, fake_client: FakeCosmosClient) -> CosmosClientWrapper:
    return CosmosClientWrapper(config, client=fake_client)


@pytest.fixture
def diagnostics() -> list:
    """Collects ResponseDiagnostics reported by the template."""
    return []


@pytest.fixture
def template(client: CosmosClientWrapper, diagnostics: list) -> CosmosTemplate:
    return CosmosTemplate(client, response_diagnostics_processor=diagnostics.append)


@pytest.fixture
def loop_thread():
    thread = EventLoopThread(name="cosmos-repository-test-loop")
    yield thread
    thread.close()
