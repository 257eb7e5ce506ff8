import copy

import pytest
from pydantic import ValidationError

from noderelay.compat.blockchain_info import (
    UNIFIED_SOFTFORKS_VERSION,
    decode_blockchain_info,
    reshape_legacy_blockchain_info,
)
from noderelay.types import Bip9SoftforkStatus, SoftforkType
from noderelay.utils.exceptions import UnexpectedStructureError

BASE = {
    "chain": "main",
    "blocks": 600000,
    "headers": 600000,
    "bestblockhash": "00000000000000000007316856900e76b4f7a9139cfbfba89842c8d196cd5f91",
    "difficulty": 13691480038694.45,
    "mediantime": 1571571178,
    "verificationprogress": 0.9999,
    "initialblockdownload": False,
    "chainwork": "00000000000000000000000000000000000000000987f8a3c5dd3e0e2c2b1d10",
    "size_on_disk": 280000000000,
    "pruned": False,
    "warnings": "",
}

LEGACY = {
    **BASE,
    "softforks": [
        {"id": "bip34", "version": 2, "reject": {"status": True}},
        {"id": "bip66", "version": 3, "reject": {"status": False}},
    ],
    "bip9_softforks": {
        "csv": {"status": "active", "startTime": 1462060800, "timeout": 1493596800, "since": 419328},
        "testdummy": {
            "status": "started",
            "bit": 28,
            "startTime": 1199145601,
            "timeout": 1230767999,
            "since": 0,
            "statistics": {"period": 2016, "threshold": 1916, "elapsed": 10, "count": 3, "possible": True},
        },
    },
}

UNIFIED = {
    **BASE,
    "softforks": {
        "bip34": {"type": "buried", "active": True},
        "bip66": {"type": "buried", "active": False},
        "csv": {
            "type": "bip9",
            "bip9": {"status": "active", "start_time": 1462060800, "timeout": 1493596800, "since": 419328},
            "active": True,
        },
        "testdummy": {
            "type": "bip9",
            "bip9": {
                "status": "started",
                "bit": 28,
                "start_time": 1199145601,
                "timeout": 1230767999,
                "since": 0,
                "statistics": {"period": 2016, "threshold": 1916, "elapsed": 10, "count": 3, "possible": True},
            },
            "active": False,
        },
    },
}


def test_legacy_and_unified_shapes_decode_to_the_same_value() -> None:
    legacy = decode_blockchain_info(copy.deepcopy(LEGACY), 180100)
    unified = decode_blockchain_info(copy.deepcopy(UNIFIED), 190000)
    assert legacy == unified


def test_legacy_conversion_details() -> None:
    info = reshape_legacy_blockchain_info(copy.deepcopy(LEGACY))

    assert info.softforks["bip34"].type_ == SoftforkType.BURIED
    assert info.softforks["bip34"].active is True
    assert info.softforks["bip34"].bip9 is None
    assert info.softforks["bip34"].height is None
    assert info.softforks["bip66"].active is False

    csv = info.softforks["csv"]
    assert csv.type_ == SoftforkType.BIP9
    assert csv.active is True
    assert csv.bip9.status == Bip9SoftforkStatus.ACTIVE
    assert csv.bip9.bit is None
    assert csv.bip9.start_time == 1462060800

    dummy = info.softforks["testdummy"]
    assert dummy.active is False
    assert dummy.bip9.statistics.count == 3


def test_threshold_selects_decoder() -> None:
    # at the threshold the legacy payload is not accepted
    with pytest.raises(ValidationError):
        decode_blockchain_info(copy.deepcopy(LEGACY), UNIFIED_SOFTFORKS_VERSION)
    info = decode_blockchain_info(copy.deepcopy(LEGACY), UNIFIED_SOFTFORKS_VERSION - 1)
    assert set(info.softforks) == {"bip34", "bip66", "csv", "testdummy"}


def test_unified_result_without_softforks_defaults_to_empty_map() -> None:
    info = decode_blockchain_info(dict(BASE), 250000)
    assert info.softforks == {}


def test_input_payload_is_not_mutated() -> None:
    raw = copy.deepcopy(LEGACY)
    reshape_legacy_blockchain_info(raw)
    assert raw == LEGACY


def _without(key: str) -> dict:
    raw = copy.deepcopy(LEGACY)
    del raw[key]
    return raw


@pytest.mark.parametrize(
    "raw",
    [
        _without("bip9_softforks"),
        _without("softforks"),
        _without("chain"),
        {**copy.deepcopy(LEGACY), "softforks": {"bip34": {}}},
        {**copy.deepcopy(LEGACY), "softforks": [{"id": "bip34"}]},
        {**copy.deepcopy(LEGACY), "softforks": [{"id": "bip34", "reject": {"status": "yes"}}]},
        {**copy.deepcopy(LEGACY), "softforks": [{"reject": {"status": True}}]},
        {**copy.deepcopy(LEGACY), "bip9_softforks": {"csv": {"status": "active"}}},
        {**copy.deepcopy(LEGACY), "bip9_softforks": {"csv": {**LEGACY["bip9_softforks"]["csv"], "since": "x"}}},
        {**copy.deepcopy(LEGACY), "bip9_softforks": {"csv": {**LEGACY["bip9_softforks"]["csv"], "status": "bogus"}}},
        {**copy.deepcopy(LEGACY), "bip9_softforks": []},
        [],
    ],
)
def test_malformed_legacy_payload_is_unexpected_structure(raw) -> None:
    with pytest.raises(UnexpectedStructureError):
        reshape_legacy_blockchain_info(raw)
