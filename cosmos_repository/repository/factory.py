"""
Repository factory.

Builds repository instances sharing one template:

    factory = CosmosRepositoryFactory.from_config(CosmosConfig.from_env())
    contacts = factory.get_repository(ContactRepository)
    ...
    factory.close()
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

from ..config import CosmosConfig
from ..core.client import CosmosClientWrapper
from ..core.diagnostics import ResponseDiagnosticsProcessor
from ..core.template import CosmosTemplate
from ..exceptions import ValidationError
from .base import RepositoryBase
from .loop import EventLoopThread, get_default_loop_thread
from .simple import CosmosRepository

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=RepositoryBase)


class CosmosRepositoryFactory:
    """Creates blocking and async repositories for one Cosmos DB database.

    Blocking repositories run on ``loop_thread``; async repositories must be
    used from that same loop, since the underlying client is bound to the loop
    that opened it.
    """

    def __init__(self, template: CosmosTemplate, loop_thread: EventLoopThread | None = None):
        self.template = template
        self.loop_thread = loop_thread or get_default_loop_thread()

    @classmethod
    def from_config(
        cls,
        config: CosmosConfig,
        response_diagnostics_processor: ResponseDiagnosticsProcessor | None = None,
        loop_thread: EventLoopThread | None = None,
    ) -> CosmosRepositoryFactory:
        client = CosmosClientWrapper(config)
        template = CosmosTemplate(
            client, response_diagnostics_processor=response_diagnostics_processor
        )
        return cls(template, loop_thread)

    def get_repository(self, repository_class: type[R], **kwargs: Any) -> R:
        """Instantiate a repository class declared against a domain class."""
        if not (isinstance(repository_class, type) and issubclass(repository_class, RepositoryBase)):
            raise ValidationError(
                "repository_class", "must be a CosmosRepository or ReactiveCosmosRepository"
            )
        if issubclass(repository_class, CosmosRepository):
            kwargs.setdefault("loop_thread", self.loop_thread)
        repository = repository_class(self.template, **kwargs)
        logger.debug(
            f"Created {repository_class.__name__} for {repository.domain_class.__name__}"
        )
        return repository

    def close(self) -> None:
        """Close the underlying Cosmos client."""
        self.loop_thread.run(self.template.client.close())
