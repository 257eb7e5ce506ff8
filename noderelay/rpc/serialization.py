"""Serialization helpers for JSON-RPC envelopes."""

from __future__ import annotations

import json
from functools import lru_cache
from typing import Any

from pydantic import TypeAdapter

from .protocol import RpcError, RpcRequest, RpcResponse


def encode_request(request: RpcRequest) -> str:
    """Encode a request frame as a JSON object.

    Raises TypeError or ValueError when the params hold values JSON cannot
    represent.
    """
    payload = {
        "id": request.id,
        "jsonrpc": request.jsonrpc,
        "method": request.method,
        "params": request.params,
    }
    return json.dumps(payload, ensure_ascii=False, allow_nan=False)


def decode_error_object(error: Any) -> RpcError:
    """Decode the `error` member of a response; malformed objects raise ValueError."""
    if not isinstance(error, dict):
        raise ValueError(f"error member must be an object, got {type(error).__name__}")
    code = error.get("code")
    message = error.get("message")
    if not isinstance(code, int) or isinstance(code, bool):
        raise ValueError("error member is missing an integer 'code'")
    if not isinstance(message, str):
        raise ValueError("error member is missing a string 'message'")
    return RpcError(code=code, message=message, data=error.get("data"))


def decode_response(text: str) -> RpcResponse:
    """Decode a response body into an RpcResponse.

    Members the protocol does not require (`id`, `jsonrpc`, `result`) may be
    missing. A non-null `error` wins over any `result` that is also present.
    """
    row = json.loads(text)
    if not isinstance(row, dict):
        raise ValueError(f"response must be a JSON object, got {type(row).__name__}")
    req_id = row.get("id")
    if isinstance(req_id, bool) or not isinstance(req_id, (int, str)):
        # correlation metadata only; an unusable id is dropped
        req_id = None
    error = row.get("error")
    if error is not None:
        return RpcResponse(id=req_id, error=decode_error_object(error))
    return RpcResponse(id=req_id, result=row.get("result"))


@lru_cache(maxsize=256)
def _adapter(result_type: Any) -> TypeAdapter:
    return TypeAdapter(result_type)


def validate_result(value: Any, result_type: Any = Any) -> Any:
    """Validate a decoded result against `result_type`.

    `Any` returns the JSON value untouched. Shape mismatches raise
    pydantic.ValidationError.
    """
    if result_type is Any:
        return value
    try:
        adapter = _adapter(result_type)
    except TypeError:
        # unhashable generic aliases skip the cache
        adapter = TypeAdapter(result_type)
    return adapter.validate_python(value)
