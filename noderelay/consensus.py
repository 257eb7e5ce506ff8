"""
Hex-encoded consensus object decoding.

Only the fixed 80-byte block header is modelled here; other consensus
structures are decoded by callers that plug their own decoder into
`deserialize_hex`.
"""

from __future__ import annotations

import hashlib
import io
import struct
from dataclasses import dataclass
from typing import Callable, TypeVar

from noderelay.utils.exceptions import DomainDecodeError, TrailingDataError

T = TypeVar("T")

_HEADER = struct.Struct("<i32s32sIII")


def read_exact(reader: io.BytesIO, n: int) -> bytes:
    """Read exactly `n` bytes or raise DomainDecodeError."""
    data = reader.read(n)
    if len(data) != n:
        raise DomainDecodeError(f"unexpected end of data: wanted {n} bytes, got {len(data)}")
    return data


def deserialize_hex(hex_str: str, decoder: Callable[[io.BytesIO], T]) -> T:
    """Decode `hex_str` with `decoder`, requiring every byte to be consumed."""
    try:
        raw = bytes.fromhex(hex_str)
    except ValueError as exc:
        raise DomainDecodeError(f"invalid hex: {exc}", code="INVALID_HEX") from exc
    reader = io.BytesIO(raw)
    obj = decoder(reader)
    remaining = len(raw) - reader.tell()
    if remaining:
        raise TrailingDataError(remaining)
    return obj


def _hash_hex(internal: bytes) -> str:
    # hashes are displayed byte-reversed
    return internal[::-1].hex()


@dataclass(frozen=True, slots=True)
class BlockHeader:
    """Bitcoin block header."""

    version: int
    prev_blockhash: str
    merkle_root: str
    time: int
    bits: int
    nonce: int

    @classmethod
    def consensus_decode(cls, reader: io.BytesIO) -> "BlockHeader":
        version, prev, merkle, time, bits, nonce = _HEADER.unpack(read_exact(reader, _HEADER.size))
        return cls(
            version=version,
            prev_blockhash=_hash_hex(prev),
            merkle_root=_hash_hex(merkle),
            time=time,
            bits=bits,
            nonce=nonce,
        )

    def serialize(self) -> bytes:
        return _HEADER.pack(
            self.version,
            bytes.fromhex(self.prev_blockhash)[::-1],
            bytes.fromhex(self.merkle_root)[::-1],
            self.time,
            self.bits,
            self.nonce,
        )

    def block_hash(self) -> str:
        digest = hashlib.sha256(hashlib.sha256(self.serialize()).digest()).digest()
        return _hash_hex(digest)
