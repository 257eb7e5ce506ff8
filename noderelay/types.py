"""Result models for node RPC calls."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _Result(BaseModel):
    """Base for results; fields added by newer servers are kept, not rejected."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class SoftforkType(str, Enum):
    """How a consensus rule was deployed."""
    BURIED = "buried"
    BIP9 = "bip9"
    OTHER = "other"


class Bip9SoftforkStatus(str, Enum):
    """Versionbits deployment state."""
    DEFINED = "defined"
    STARTED = "started"
    LOCKED_IN = "locked_in"
    ACTIVE = "active"
    FAILED = "failed"


class Bip9SoftforkStatistics(_Result):
    period: int
    threshold: int | None = None
    elapsed: int
    count: int
    possible: bool | None = None


class Bip9SoftforkInfo(_Result):
    status: Bip9SoftforkStatus
    bit: int | None = None
    start_time: int
    timeout: int
    since: int
    statistics: Bip9SoftforkStatistics | None = None


class Softfork(_Result):
    """Unified consensus-rule activation state (one entry of `softforks`)."""
    type_: SoftforkType = Field(alias="type")
    bip9: Bip9SoftforkInfo | None = None
    height: int | None = None
    active: bool


class BlockchainInfo(_Result):
    """Result of `getblockchaininfo`."""
    chain: str
    blocks: int
    headers: int
    bestblockhash: str
    difficulty: float
    mediantime: int
    verificationprogress: float
    initialblockdownload: bool
    chainwork: str
    size_on_disk: int
    pruned: bool
    pruneheight: int | None = None
    automatic_pruning: bool | None = None
    prune_target_size: int | None = None
    softforks: dict[str, Softfork] = Field(default_factory=dict)
    warnings: str | list[str] = ""


class NetworkInfo(_Result):
    """Result of `getnetworkinfo`."""
    version: int
    subversion: str
    protocolversion: int
    localservices: str = ""
    localrelay: bool = True
    timeoffset: int = 0
    connections: int = 0
    networkactive: bool = True
    networks: list[dict[str, Any]] = Field(default_factory=list)
    relayfee: float = 0.0
    incrementalfee: float = 0.0
    localaddresses: list[dict[str, Any]] = Field(default_factory=list)
    warnings: str | list[str] = ""


class IndexStatus(_Result):
    synced: bool
    best_block_height: int


class MiningInfo(_Result):
    """Result of `getmininginfo`."""
    blocks: int
    currentblockweight: int | None = None
    currentblocktx: int | None = None
    difficulty: float
    networkhashps: float
    pooledtx: int
    chain: str
    warnings: str | list[str] = ""


class MempoolInfo(_Result):
    """Result of `getmempoolinfo`."""
    loaded: bool | None = None
    size: int
    bytes: int
    usage: int
    maxmempool: int
    mempoolminfee: float
    minrelaytxfee: float


class EstimateSmartFeeResult(_Result):
    feerate: float | None = None
    errors: list[str] | None = None
    blocks: int


class LoadWalletResult(_Result):
    name: str
    warning: str | None = None


class TxOut(_Result):
    """Result of `gettxout` for an unspent output."""
    bestblock: str
    confirmations: int
    value: float
    script_pub_key: dict[str, Any] = Field(alias="scriptPubKey")
    coinbase: bool


class RescanResult(_Result):
    start_height: int
    stop_height: int | None = None


class EstimateMode(str, Enum):
    UNSET = "UNSET"
    ECONOMICAL = "ECONOMICAL"
    CONSERVATIVE = "CONSERVATIVE"


class AddressType(str, Enum):
    LEGACY = "legacy"
    P2SH_SEGWIT = "p2sh-segwit"
    BECH32 = "bech32"
    BECH32M = "bech32m"
