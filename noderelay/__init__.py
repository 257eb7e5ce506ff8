"""
noderelay - async JSON-RPC client for Bitcoin Core compatible node daemons.
"""

__version__ = "0.1.0"

from noderelay.auth import Auth
from noderelay.client import Client
from noderelay.rpc.relay import Relay
from noderelay.types import BlockchainInfo, Softfork, SoftforkType
from noderelay.utils.exceptions import (
    ClientError,
    ConfigurationError,
    JsonRpcError,
    RelayError,
    ResponseDecodeError,
    ServerError,
    TransportError,
    UnexpectedStructureError,
)

__all__ = [
    "__version__",
    "Auth",
    "Client",
    "Relay",
    "BlockchainInfo",
    "Softfork",
    "SoftforkType",
    "RelayError",
    "TransportError",
    "ClientError",
    "ServerError",
    "ResponseDecodeError",
    "JsonRpcError",
    "UnexpectedStructureError",
    "ConfigurationError",
]
