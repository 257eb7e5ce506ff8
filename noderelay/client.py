"""Async JSON-RPC client for Bitcoin Core compatible node daemons."""

from __future__ import annotations

import json
from collections.abc import Sequence
from decimal import Decimal
from typing import Any

import httpx
from loguru import logger
from pydantic import BaseModel, ValidationError

from noderelay.auth import Auth
from noderelay.compat.blockchain_info import decode_blockchain_info
from noderelay.consensus import BlockHeader, deserialize_hex
from noderelay.rpc.defaults import empty_arr, handle_defaults, into_json, null, opt_into_json
from noderelay.rpc.relay import Relay
from noderelay.types import (
    AddressType,
    BlockchainInfo,
    EstimateMode,
    EstimateSmartFeeResult,
    IndexStatus,
    LoadWalletResult,
    MempoolInfo,
    MiningInfo,
    NetworkInfo,
    RescanResult,
    TxOut,
)
from noderelay.utils.exceptions import ResponseDecodeError, ReturnedError


class _VersionOnly(BaseModel):
    version: int


class Client:
    """JSON-RPC client for the node daemon.

    Usage::

        async with Client("http://127.0.0.1:8332", Auth.cookie_file("~/.bitcoin/.cookie")) as client:
            info = await client.get_blockchain_info()
    """

    def __init__(
        self,
        url: str,
        auth: Auth | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
    ):
        user, password = (auth or Auth.none()).get_user_pass()
        self.relay = Relay(url, user, password, http_client=http_client)

    @classmethod
    def from_config(cls, config: Any, *, http_client: httpx.AsyncClient | None = None) -> "Client":
        """Build a client from a `noderelay.config.Config`."""
        return cls(config.rpc.url, config.get_auth(), http_client=http_client)

    async def call(self, method: str, args: Sequence[Any] = (), result_type: Any = Any) -> Any:
        """Call `method` with positional JSON `args`; the result is validated as `result_type`."""
        return await self.relay.request(method, list(args), result_type)

    async def aclose(self) -> None:
        await self.relay.aclose()

    async def __aenter__(self) -> "Client":
        return self

    async def __aexit__(self, *exc: Any) -> bool:
        await self.aclose()
        return False

    # -- network ------------------------------------------------------------

    async def get_network_info(self) -> NetworkInfo:
        return await self.call("getnetworkinfo", [], NetworkInfo)

    async def version(self) -> int:
        """Numeric server version, e.g. 250000 for 25.0."""
        res = await self.call("getnetworkinfo", [], _VersionOnly)
        return res.version

    async def get_connection_count(self) -> int:
        return await self.call("getconnectioncount", [], int)

    async def get_network_hash_ps(self, nblocks: int | None = None, height: int | None = None) -> float:
        """Estimated network hashes per second based on the last `nblocks` blocks."""
        args = [opt_into_json(nblocks), opt_into_json(height)]
        return await self.call("getnetworkhashps", handle_defaults(args, [null(), null()]), float)

    async def ping(self) -> None:
        await self.call("ping")

    async def uptime(self) -> int:
        return await self.call("uptime", [], int)

    async def stop(self) -> str:
        return await self.call("stop", [], str)

    # -- blockchain ---------------------------------------------------------

    async def get_index_info(self) -> dict[str, IndexStatus]:
        return await self.call("getindexinfo", [], dict[str, IndexStatus])

    async def get_blockchain_info(self) -> BlockchainInfo:
        """Blockchain processing state, with softforks in the unified map shape.

        Older servers report softforks in two legacy fields; those are
        converted, so callers only ever see one shape.
        """
        server_version = await self.version()
        raw = await self.call("getblockchaininfo")
        logger.debug(f"decoding getblockchaininfo for server version {server_version}")
        try:
            return decode_blockchain_info(raw, server_version)
        except ValidationError as exc:
            raise ResponseDecodeError(exc, json.dumps(raw)) from exc

    async def get_block_count(self) -> int:
        """Number of blocks in the longest chain."""
        return await self.call("getblockcount", [], int)

    async def get_best_block_hash(self) -> str:
        return await self.call("getbestblockhash", [], str)

    async def get_block_hash(self, height: int) -> str:
        return await self.call("getblockhash", [height], str)

    async def get_difficulty(self) -> float:
        return await self.call("getdifficulty", [], float)

    async def get_block_hex(self, block_hash: str) -> str:
        return await self.call("getblock", [block_hash, 0], str)

    async def get_block_info(self, block_hash: str) -> dict[str, Any]:
        return await self.call("getblock", [block_hash, 1], dict[str, Any])

    async def get_block_header(self, block_hash: str) -> BlockHeader:
        """Fetch a raw header and decode it; leftover bytes raise TrailingDataError."""
        hex_str = await self.call("getblockheader", [block_hash, False], str)
        return deserialize_hex(hex_str, BlockHeader.consensus_decode)

    async def get_block_header_info(self, block_hash: str) -> dict[str, Any]:
        return await self.call("getblockheader", [block_hash, True], dict[str, Any])

    async def get_mining_info(self) -> MiningInfo:
        return await self.call("getmininginfo", [], MiningInfo)

    async def get_tx_out(self, txid: str, vout: int, include_mempool: bool | None = None) -> TxOut | None:
        """Details about an unspent output, or None when it is spent or unknown."""
        args = [txid, vout, opt_into_json(include_mempool)]
        return await self.call("gettxout", handle_defaults(args, [null()]), TxOut | None)

    async def rescan_blockchain(
        self,
        start_from: int | None = None,
        stop_height: int | None = None,
    ) -> tuple[int, int | None]:
        args = [opt_into_json(start_from), opt_into_json(stop_height)]
        res = await self.call("rescanblockchain", handle_defaults(args, [0, null()]), RescanResult)
        return res.start_height, res.stop_height

    async def submit_block_hex(self, block_hex: str) -> None:
        """Submit a serialized block; any non-null result is the rejection reason."""
        res = await self.call("submitblock", [block_hex])
        if res is not None:
            raise ReturnedError(res if isinstance(res, str) else json.dumps(res))

    async def scan_tx_out_set_blocking(self, descriptors: Sequence[Any]) -> dict[str, Any]:
        return await self.call("scantxoutset", ["start", into_json(list(descriptors))], dict[str, Any])

    # -- mempool / fees -----------------------------------------------------

    async def get_mempool_info(self) -> MempoolInfo:
        return await self.call("getmempoolinfo", [], MempoolInfo)

    async def get_raw_mempool(self) -> list[str]:
        return await self.call("getrawmempool", [], list[str])

    async def estimate_smart_fee(
        self,
        conf_target: int,
        estimate_mode: EstimateMode | None = None,
    ) -> EstimateSmartFeeResult:
        args = [conf_target, opt_into_json(estimate_mode)]
        return await self.call("estimatesmartfee", handle_defaults(args, [null()]), EstimateSmartFeeResult)

    # -- raw transactions ---------------------------------------------------

    async def get_raw_transaction_hex(self, txid: str, block_hash: str | None = None) -> str:
        args = [txid, False, opt_into_json(block_hash)]
        return await self.call("getrawtransaction", handle_defaults(args, [null()]), str)

    async def get_raw_transaction_info(self, txid: str, block_hash: str | None = None) -> dict[str, Any]:
        args = [txid, True, opt_into_json(block_hash)]
        return await self.call("getrawtransaction", handle_defaults(args, [null()]), dict[str, Any])

    # -- wallet -------------------------------------------------------------

    async def create_wallet(
        self,
        wallet: str,
        disable_private_keys: bool | None = None,
        blank: bool | None = None,
        passphrase: str | None = None,
        avoid_reuse: bool | None = None,
    ) -> LoadWalletResult:
        args = [
            wallet,
            opt_into_json(disable_private_keys),
            opt_into_json(blank),
            opt_into_json(passphrase),
            opt_into_json(avoid_reuse),
        ]
        defaults = [False, False, "", False]
        return await self.call("createwallet", handle_defaults(args, defaults), LoadWalletResult)

    async def load_wallet(self, wallet: str) -> LoadWalletResult:
        return await self.call("loadwallet", [wallet], LoadWalletResult)

    async def unload_wallet(self, wallet: str | None = None) -> dict[str, Any] | None:
        args = [opt_into_json(wallet)]
        return await self.call("unloadwallet", handle_defaults(args, [null()]), dict[str, Any] | None)

    async def list_wallets(self) -> list[str]:
        return await self.call("listwallets", [], list[str])

    async def backup_wallet(self, destination: str | None = None) -> None:
        args = [opt_into_json(destination)]
        await self.call("backupwallet", handle_defaults(args, [null()]))

    async def get_balance(
        self,
        minconf: int | None = None,
        include_watchonly: bool | None = None,
    ) -> Decimal:
        """Wallet balance in BTC."""
        args = ["*", opt_into_json(minconf), opt_into_json(include_watchonly)]
        return await self.call("getbalance", handle_defaults(args, [0, null()]), Decimal)

    async def get_received_by_address(self, address: str, minconf: int | None = None) -> Decimal:
        args = [address, opt_into_json(minconf)]
        return await self.call("getreceivedbyaddress", handle_defaults(args, [null()]), Decimal)

    async def list_transactions(
        self,
        label: str | None = None,
        count: int | None = None,
        skip: int | None = None,
        include_watchonly: bool | None = None,
    ) -> list[dict[str, Any]]:
        args = [
            "*" if label is None else label,
            opt_into_json(count),
            opt_into_json(skip),
            opt_into_json(include_watchonly),
        ]
        return await self.call("listtransactions", handle_defaults(args, [10, 0, null()]), list[dict[str, Any]])

    async def list_unspent(
        self,
        minconf: int | None = None,
        maxconf: int | None = None,
        addresses: Sequence[str] | None = None,
        include_unsafe: bool | None = None,
        query_options: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        args = [
            opt_into_json(minconf),
            opt_into_json(maxconf),
            opt_into_json(list(addresses) if addresses is not None else None),
            opt_into_json(include_unsafe),
            opt_into_json(query_options),
        ]
        defaults = [0, 9999999, empty_arr(), True, null()]
        return await self.call("listunspent", handle_defaults(args, defaults), list[dict[str, Any]])

    async def list_received_by_address(
        self,
        address_filter: str | None = None,
        minconf: int | None = None,
        include_empty: bool | None = None,
        include_watchonly: bool | None = None,
    ) -> list[dict[str, Any]]:
        args = [
            opt_into_json(minconf),
            opt_into_json(include_empty),
            opt_into_json(include_watchonly),
            opt_into_json(address_filter),
        ]
        defaults = [1, False, False, null()]
        return await self.call("listreceivedbyaddress", handle_defaults(args, defaults), list[dict[str, Any]])

    async def send_to_address(
        self,
        address: str,
        amount: Decimal,
        comment: str | None = None,
        comment_to: str | None = None,
        subtract_fee: bool | None = None,
        replaceable: bool | None = None,
        confirmation_target: int | None = None,
        estimate_mode: EstimateMode | None = None,
    ) -> str:
        """Send `amount` BTC to `address` and return the txid."""
        args = [
            address,
            float(amount),
            opt_into_json(comment),
            opt_into_json(comment_to),
            opt_into_json(subtract_fee),
            opt_into_json(replaceable),
            opt_into_json(confirmation_target),
            opt_into_json(estimate_mode),
        ]
        defaults = ["", "", False, False, 6, null()]
        return await self.call("sendtoaddress", handle_defaults(args, defaults), str)

    async def add_multisig_address(
        self,
        nrequired: int,
        keys: Sequence[str],
        label: str | None = None,
        address_type: AddressType | None = None,
    ) -> dict[str, Any]:
        args = [nrequired, list(keys), opt_into_json(label), opt_into_json(address_type)]
        return await self.call("addmultisigaddress", handle_defaults(args, ["", null()]), dict[str, Any])
