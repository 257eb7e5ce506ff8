"""JSON-RPC 2.0 envelope models exchanged with the node daemon."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

JSONRPC_VERSION = "2.0"


@dataclass(slots=True)
class RpcError:
    """Error object carried by a failed response."""

    code: int
    message: str
    data: Any = None


@dataclass(slots=True)
class RpcRequest:
    """Request frame; `id` only needs to be unique within one relay."""

    id: int
    method: str
    params: list[Any] = field(default_factory=list)
    jsonrpc: str = JSONRPC_VERSION


@dataclass(slots=True)
class RpcResponse:
    """Response frame; a non-null `error` always means failure."""

    id: int | str | None = None
    result: Any = None
    error: RpcError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
