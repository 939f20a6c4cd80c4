"""
Repository facades: blocking, async, and the factory that builds them.
"""

from .base import RepositoryBase, resolve_domain_class
from .factory import CosmosRepositoryFactory
from .loop import EventLoopThread, get_default_loop_thread
from .reactive import ReactiveCosmosRepository
from .simple import CosmosRepository

__all__ = [
    "CosmosRepository",
    "CosmosRepositoryFactory",
    "EventLoopThread",
    "ReactiveCosmosRepository",
    "RepositoryBase",
    "get_default_loop_thread",
    "resolve_domain_class",
]
