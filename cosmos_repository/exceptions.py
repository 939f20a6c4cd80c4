"""
Custom exceptions for Cosmos DB repositories.

Metadata, validation and query-method errors are raised before any request
reaches Cosmos DB. Errors reported by the SDK itself (HTTP status, network,
serialization) are not wrapped and propagate unchanged.
"""


class CosmosRepositoryError(Exception):
    """Base exception for all repository errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class EntityMetadataError(CosmosRepositoryError, ValueError):
    """Raised when a domain class carries invalid mapping declarations.

    Examples: two id fields, a partition key that is not a string,
    no id field at all.
    """

    def __init__(self, domain_class: type, reason: str):
        name = getattr(domain_class, "__name__", str(domain_class))
        super().__init__(
            f"Invalid entity metadata for {name}: {reason}",
            {"domain_class": name, "reason": reason},
        )
        self.domain_class = domain_class
        self.reason = reason


class ValidationError(CosmosRepositoryError, ValueError):
    """Raised when an argument passed to a repository is invalid."""

    def __init__(self, field: str, reason: str, value: str | None = None):
        details = {"field": field, "reason": reason}
        if value is not None:
            details["value"] = value
        super().__init__(f"Validation failed for {field}: {reason}", details)
        self.field = field
        self.reason = reason
        self.value = value


class InvalidQueryMethodError(CosmosRepositoryError, ValueError):
    """Raised when a derived query method name or its arguments are invalid."""

    def __init__(self, method_name: str, reason: str):
        super().__init__(
            f"Invalid query method {method_name}: {reason}",
            {"method_name": method_name, "reason": reason},
        )
        self.method_name = method_name
        self.reason = reason


class QueryMethodNotFoundError(InvalidQueryMethodError, AttributeError):
    """Raised when a repository attribute looks like a derived query but cannot be resolved.

    Being an AttributeError, hasattr() and getattr() with a default treat the
    method as absent.
    """


class CosmosAccessError(CosmosRepositoryError):
    """Raised when a data access operation violates a repository contract."""


class IncorrectResultSizeError(CosmosAccessError):
    """Raised when a single-result query matches more than one document."""

    def __init__(self, expected: int, actual: int, container: str | None = None):
        details: dict = {"expected": expected, "actual": actual}
        if container:
            details["container"] = container
        super().__init__(
            f"Incorrect result size: expected {expected}, actual {actual}",
            details,
        )
        self.expected = expected
        self.actual = actual
        self.container = container


class UnsupportedOperationError(CosmosRepositoryError, NotImplementedError):
    """Raised for repository operations this module does not support."""

    def __init__(self, operation: str):
        super().__init__(f"Operation not supported: {operation}", {"operation": operation})
        self.operation = operation


class AuthenticationError(CosmosRepositoryError):
    """Raised when authentication to Cosmos DB fails or is misconfigured."""

    def __init__(self, endpoint: str, reason: str | None = None):
        details = {"endpoint": endpoint}
        if reason:
            details["reason"] = reason
        super().__init__(f"Authentication failed for {endpoint}", details)
        self.endpoint = endpoint
        self.reason = reason
