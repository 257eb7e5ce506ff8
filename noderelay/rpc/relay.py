"""HTTP relay for JSON-RPC calls against the node daemon."""

from __future__ import annotations

import threading
from typing import Any

import httpx
from loguru import logger

from noderelay.rpc.protocol import RpcRequest
from noderelay.rpc.serialization import decode_response, encode_request, validate_result
from noderelay.utils.exceptions import (
    ClientError,
    InvalidUrlError,
    JsonRpcError,
    RequestSerializationError,
    ResponseDecodeError,
    ServerError,
    TransportError,
)


def parse_url(url: str) -> httpx.URL:
    """Parse and check a relay URL; only absolute http(s) URLs are accepted."""
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL as exc:
        raise InvalidUrlError(url, str(exc)) from exc
    if parsed.scheme not in {"http", "https"}:
        raise InvalidUrlError(url, "scheme must be http or https")
    if not parsed.host:
        raise InvalidUrlError(url, "missing host")
    return parsed


class Relay:
    """Executes one JSON-RPC request/response cycle per call.

    A relay owns one HTTP client, one URL, one credentials pair and its own
    request id counter. It is safe to share between tasks. `clone()` shares
    the HTTP client but starts a fresh id sequence.
    """

    def __init__(
        self,
        url: str | httpx.URL,
        user: str | None = None,
        password: str | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.url = url if isinstance(url, httpx.URL) else parse_url(url)
        self.user = user
        self.password = password
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient()
        self._id_lock = threading.Lock()
        self._last_id = 0

    @property
    def auth(self) -> httpx.BasicAuth | None:
        """Basic auth is only sent when both user and password are set."""
        if self.user is not None and self.password is not None:
            return httpx.BasicAuth(self.user, self.password)
        return None

    def next_id(self) -> int:
        with self._id_lock:
            self._last_id += 1
            return self._last_id

    def clone(self) -> "Relay":
        """Return a relay on the same HTTP client with an independent id counter."""
        return Relay(self.url, self.user, self.password, http_client=self._client)

    __copy__ = clone

    async def request(self, method: str, params: Any = None, result_type: Any = Any) -> Any:
        """Send `method(params)` and return the result validated as `result_type`."""
        payload = RpcRequest(id=self.next_id(), method=method, params=list(params or []))
        try:
            body = encode_request(payload)
        except (TypeError, ValueError) as exc:
            raise RequestSerializationError(method, exc) from exc

        logger.debug(f"rpc request id={payload.id} method={method}")
        try:
            resp = await self._client.post(
                str(self.url),
                content=body.encode("utf-8"),
                headers={"Content-Type": "application/json"},
                auth=self.auth,
            )
        except httpx.RequestError as exc:
            logger.debug(f"rpc transport failure id={payload.id} method={method}: {exc.__class__.__name__}")
            raise TransportError(exc) from exc

        text = resp.text
        if not resp.is_success:
            logger.warning(f"rpc http error {resp.status_code} for method={method}")
            if resp.is_client_error:
                raise ClientError(text, resp.status_code)
            raise ServerError(text, resp.status_code)

        try:
            envelope = decode_response(text)
        except ValueError as exc:
            raise ResponseDecodeError(exc, text) from exc

        if envelope.id != payload.id:
            logger.debug(f"rpc response id {envelope.id!r} does not match request id {payload.id}")

        if envelope.error is not None:
            err = envelope.error
            raise JsonRpcError(err.code, err.message, err.data)

        try:
            return validate_result(envelope.result, result_type)
        except ValueError as exc:
            raise ResponseDecodeError(exc, text) from exc

    async def aclose(self) -> None:
        """Close the HTTP client when this relay created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "Relay":
        return self

    async def __aexit__(self, *exc: Any) -> bool:
        await self.aclose()
        return False

    def __repr__(self) -> str:
        return f"Relay(url={str(self.url)!r}, auth={'basic' if self.auth else 'none'})"
