import asyncio
import base64
import json

import httpx
import pytest

from noderelay.rpc.relay import Relay, parse_url
from noderelay.types import NetworkInfo
from noderelay.utils.exceptions import (
    ClientError,
    InvalidUrlError,
    JsonRpcError,
    RequestSerializationError,
    ResponseDecodeError,
    ServerError,
    TransportError,
)

URL = "http://127.0.0.1:18443"


def _relay(handler, user="alice", password="secret") -> Relay:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return Relay(URL, user, password, http_client=client)


def _echo_handler(seen: list[httpx.Request], result=None):
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        body = json.loads(request.content)
        return httpx.Response(200, json={"result": result, "error": None, "id": body["id"]})

    return handler


@pytest.mark.asyncio
async def test_request_posts_json_rpc_envelope_with_basic_auth() -> None:
    seen: list[httpx.Request] = []
    relay = _relay(_echo_handler(seen, result=812345))

    out = await relay.request("getblockcount", [], int)

    assert out == 812345
    assert len(seen) == 1
    req = seen[0]
    assert req.method == "POST"
    assert req.headers["content-type"] == "application/json"
    assert req.headers["authorization"] == "Basic " + base64.b64encode(b"alice:secret").decode()
    assert json.loads(req.content) == {"id": 1, "jsonrpc": "2.0", "method": "getblockcount", "params": []}


@pytest.mark.asyncio
async def test_partial_credentials_send_no_authorization() -> None:
    seen: list[httpx.Request] = []
    relay = _relay(_echo_handler(seen), user="alice", password=None)
    assert relay.auth is None

    await relay.request("ping")

    assert "authorization" not in seen[0].headers


@pytest.mark.asyncio
async def test_ids_increase_and_clone_starts_fresh() -> None:
    seen: list[httpx.Request] = []
    relay = _relay(_echo_handler(seen))

    await relay.request("ping")
    await relay.request("ping")
    clone = relay.clone()
    await clone.request("ping")

    ids = [json.loads(r.content)["id"] for r in seen]
    assert ids == [1, 2, 1]
    assert relay.next_id() == 3


@pytest.mark.asyncio
async def test_concurrent_requests_get_distinct_ids() -> None:
    seen: list[httpx.Request] = []
    relay = _relay(_echo_handler(seen))

    await asyncio.gather(*(relay.request("ping") for _ in range(10)))

    ids = sorted(json.loads(r.content)["id"] for r in seen)
    assert ids == list(range(1, 11))


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [401, 403, 404])
async def test_4xx_is_client_error_with_body_text(status: int) -> None:
    relay = _relay(lambda request: httpx.Response(status, text="Forbidden"))

    with pytest.raises(ClientError) as exc_info:
        await relay.request("getblockcount")

    assert exc_info.value.text == "Forbidden"
    assert exc_info.value.status_code == status


@pytest.mark.asyncio
async def test_401_with_empty_body() -> None:
    relay = _relay(lambda request: httpx.Response(401))

    with pytest.raises(ClientError) as exc_info:
        await relay.request("getblockcount")

    assert exc_info.value.text == ""


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [500, 503, 302])
async def test_other_statuses_are_server_errors(status: int) -> None:
    relay = _relay(lambda request: httpx.Response(status, text="down"))

    with pytest.raises(ServerError) as exc_info:
        await relay.request("getblockcount")

    assert exc_info.value.text == "down"


@pytest.mark.asyncio
async def test_connection_failure_is_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    relay = _relay(handler)

    with pytest.raises(TransportError) as exc_info:
        await relay.request("getblockcount")

    assert isinstance(exc_info.value.error, httpx.ConnectError)


@pytest.mark.asyncio
async def test_undecodable_body_keeps_raw_text() -> None:
    relay = _relay(lambda request: httpx.Response(200, text="<html>proxy</html>"))

    with pytest.raises(ResponseDecodeError) as exc_info:
        await relay.request("getblockcount")

    assert exc_info.value.text == "<html>proxy</html>"


@pytest.mark.asyncio
async def test_rpc_error_object_is_json_rpc_error() -> None:
    payload = {"result": None, "error": {"code": -8, "message": "Block height out of range"}, "id": 1}
    relay = _relay(lambda request: httpx.Response(200, json=payload))

    with pytest.raises(JsonRpcError) as exc_info:
        await relay.request("getblockhash", [10**9])

    assert exc_info.value.rpc_code == -8
    assert exc_info.value.rpc_message == "Block height out of range"


@pytest.mark.asyncio
async def test_rpc_error_on_500_status_is_server_error() -> None:
    # bitcoind reports RPC errors with HTTP 500; the status check comes first
    payload = {"result": None, "error": {"code": -32601, "message": "Method not found"}, "id": 1}
    relay = _relay(lambda request: httpx.Response(500, json=payload))

    with pytest.raises(ServerError):
        await relay.request("nosuchmethod")


@pytest.mark.asyncio
async def test_result_shape_mismatch_is_decode_error() -> None:
    relay = _relay(lambda request: httpx.Response(200, json={"result": "abc", "error": None, "id": 1}))

    with pytest.raises(ResponseDecodeError):
        await relay.request("getblockcount", [], int)


@pytest.mark.asyncio
async def test_typed_model_result() -> None:
    result = {"version": 250000, "subversion": "/Satoshi:25.0.0/", "protocolversion": 70016, "connections": 8}
    relay = _relay(lambda request: httpx.Response(200, json={"result": result, "error": None, "id": 1}))

    info = await relay.request("getnetworkinfo", [], NetworkInfo)

    assert info.version == 250000
    assert info.connections == 8


@pytest.mark.asyncio
async def test_mismatched_response_id_is_accepted() -> None:
    relay = _relay(lambda request: httpx.Response(200, json={"result": 1, "error": None, "id": 99}))

    assert await relay.request("getblockcount", [], int) == 1


@pytest.mark.asyncio
async def test_unserializable_params_raise_before_sending() -> None:
    seen: list[httpx.Request] = []
    relay = _relay(_echo_handler(seen))

    with pytest.raises(RequestSerializationError):
        await relay.request("x", [object()])

    assert seen == []


@pytest.mark.asyncio
async def test_relay_closes_only_its_own_client() -> None:
    shared = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
    async with Relay(URL, http_client=shared):
        pass
    assert not shared.is_closed
    await shared.aclose()

    relay = Relay(URL)
    await relay.aclose()
    assert relay._client.is_closed


@pytest.mark.parametrize("url", ["", "not a url", "ftp://host/", "http://"])
def test_invalid_url_is_rejected(url: str) -> None:
    with pytest.raises(InvalidUrlError):
        parse_url(url)


def test_repr_hides_credentials() -> None:
    relay = Relay(URL, "alice", "secret")
    assert "secret" not in repr(relay)
    assert "basic" in repr(relay)
