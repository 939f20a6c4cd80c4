"""
Cosmos DB access: client lifecycle and the async template repositories delegate to.
"""

from .client import CosmosClientWrapper
from .diagnostics import ResponseDiagnostics, ResponseDiagnosticsProcessor
from .template import CosmosTemplate

__all__ = [
    "CosmosClientWrapper",
    "CosmosTemplate",
    "ResponseDiagnostics",
    "ResponseDiagnosticsProcessor",
]
