"""Reshape `getblockchaininfo` results from servers that predate unified softforks.

Servers before 0.19 return a `softforks` array (buried deployments) and a
`bip9_softforks` map (versionbits deployments). Newer servers return a single
`softforks` map. Both are decoded into `BlockchainInfo` with the unified map.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, ValidationError

from noderelay.types import (
    Bip9SoftforkInfo,
    Bip9SoftforkStatistics,
    Bip9SoftforkStatus,
    BlockchainInfo,
    Softfork,
    SoftforkType,
)
from noderelay.utils.exceptions import UnexpectedStructureError

UNIFIED_SOFTFORKS_VERSION = 190000


class LegacyBuriedSoftfork(BaseModel):
    """One entry of the legacy `softforks` array."""
    id: str
    active: StrictBool

    def to_softfork(self) -> Softfork:
        return Softfork(type_=SoftforkType.BURIED, bip9=None, height=None, active=self.active)


class LegacyBip9Softfork(BaseModel):
    """One value of the legacy `bip9_softforks` map."""
    model_config = ConfigDict(populate_by_name=True)

    status: Bip9SoftforkStatus
    bit: StrictInt | None = None
    start_time: StrictInt = Field(alias="startTime")
    timeout: StrictInt
    since: StrictInt
    statistics: Bip9SoftforkStatistics | None = None

    def to_softfork(self) -> Softfork:
        info = Bip9SoftforkInfo(
            status=self.status,
            bit=self.bit,
            start_time=self.start_time,
            timeout=self.timeout,
            since=self.since,
            statistics=self.statistics,
        )
        return Softfork(
            type_=SoftforkType.BIP9,
            bip9=info,
            height=None,
            active=self.status == Bip9SoftforkStatus.ACTIVE,
        )


def _as_object(value: Any, what: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise UnexpectedStructureError(f"{what} must be an object")
    return value


def parse_legacy_buried(entry: Any) -> LegacyBuriedSoftfork:
    """Parse `{"id": ..., "reject": {"status": bool}, ...}`."""
    row = _as_object(entry, "legacy softfork entry")
    sf_id = row.get("id")
    if not isinstance(sf_id, str):
        raise UnexpectedStructureError("legacy softfork entry is missing a string 'id'")
    reject = _as_object(row.get("reject"), f"softfork '{sf_id}' reject")
    status = reject.get("status")
    if not isinstance(status, bool):
        raise UnexpectedStructureError(f"softfork '{sf_id}' reject.status must be a boolean")
    return LegacyBuriedSoftfork(id=sf_id, active=status)


def parse_legacy_bip9(sf_id: str, entry: Any) -> LegacyBip9Softfork:
    """Parse one value of the legacy `bip9_softforks` map."""
    row = _as_object(entry, f"bip9 softfork '{sf_id}'")
    try:
        return LegacyBip9Softfork.model_validate(row)
    except ValidationError as exc:
        raise UnexpectedStructureError(f"bip9 softfork '{sf_id}': {exc}") from exc


def reshape_legacy_blockchain_info(raw: Any) -> BlockchainInfo:
    """Decode a pre-0.19 `getblockchaininfo` payload into the unified result."""
    data = dict(_as_object(raw, "getblockchaininfo result"))
    if "bip9_softforks" not in data:
        raise UnexpectedStructureError("getblockchaininfo result is missing 'bip9_softforks'")
    if "softforks" not in data:
        raise UnexpectedStructureError("getblockchaininfo result is missing 'softforks'")
    bip9_softforks = data.pop("bip9_softforks")
    old_softforks = data.pop("softforks")
    data["softforks"] = {}

    if not isinstance(old_softforks, list):
        raise UnexpectedStructureError("legacy 'softforks' must be an array")
    buried = [parse_legacy_buried(sf) for sf in old_softforks]
    bip9 = {sf_id: parse_legacy_bip9(sf_id, sf) for sf_id, sf in _as_object(bip9_softforks, "'bip9_softforks'").items()}

    try:
        info = BlockchainInfo.model_validate(data)
    except ValidationError as exc:
        raise UnexpectedStructureError(f"getblockchaininfo result: {exc}") from exc

    for sf in buried:
        info.softforks[sf.id] = sf.to_softfork()
    for sf_id, sf in bip9.items():
        info.softforks[sf_id] = sf.to_softfork()
    return info


def decode_blockchain_info(raw: Any, server_version: int) -> BlockchainInfo:
    """Decode `getblockchaininfo` for a server reporting `server_version`."""
    if server_version < UNIFIED_SOFTFORKS_VERSION:
        return reshape_legacy_blockchain_info(raw)
    return BlockchainInfo.model_validate(raw)
