"""Result reshaping for calls whose schema changed across server versions."""

from .blockchain_info import (
    UNIFIED_SOFTFORKS_VERSION,
    LegacyBip9Softfork,
    LegacyBuriedSoftfork,
    decode_blockchain_info,
    parse_legacy_bip9,
    parse_legacy_buried,
    reshape_legacy_blockchain_info,
)

__all__ = [
    "UNIFIED_SOFTFORKS_VERSION",
    "LegacyBip9Softfork",
    "LegacyBuriedSoftfork",
    "decode_blockchain_info",
    "parse_legacy_bip9",
    "parse_legacy_buried",
    "reshape_legacy_blockchain_info",
]
