"""Per-request diagnostics surfaced from Cosmos DB response headers."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable

REQUEST_CHARGE_HEADER = "x-ms-request-charge"
ACTIVITY_ID_HEADER = "x-ms-activity-id"


@dataclass(frozen=True)
class ResponseDiagnostics:
    """Request charge (RU) and activity id of one Cosmos DB response."""

    request_charge: float
    activity_id: str | None = None
    headers: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_headers(cls, headers: Mapping[str, Any] | None) -> ResponseDiagnostics:
        headers = headers or {}
        charge = headers.get(REQUEST_CHARGE_HEADER)
        return cls(
            request_charge=float(charge) if charge is not None else 0.0,
            activity_id=headers.get(ACTIVITY_ID_HEADER),
            headers=dict(headers),
        )


ResponseDiagnosticsProcessor = Callable[[ResponseDiagnostics], None]
