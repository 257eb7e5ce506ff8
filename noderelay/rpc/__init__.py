"""JSON-RPC envelope, argument normalization and HTTP relay."""

from .defaults import empty_arr, empty_obj, handle_defaults, into_json, null, opt_into_json, opt_result
from .protocol import JSONRPC_VERSION, RpcError, RpcRequest, RpcResponse
from .relay import Relay, parse_url
from .serialization import decode_response, encode_request, validate_result

__all__ = [
    "JSONRPC_VERSION",
    "Relay",
    "RpcError",
    "RpcRequest",
    "RpcResponse",
    "decode_response",
    "empty_arr",
    "empty_obj",
    "encode_request",
    "handle_defaults",
    "into_json",
    "null",
    "opt_into_json",
    "opt_result",
    "parse_url",
    "validate_result",
]
