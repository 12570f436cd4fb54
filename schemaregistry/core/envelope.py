"""
Confluent wire envelope.

    +------------------+--------------------+---------------------+
    | magic (1 byte)   | schema id (4 bytes)| encoded payload     |
    | 0x00             | big-endian uint32  | format specific     |
    +------------------+--------------------+---------------------+
"""

import struct
from typing import Tuple

from schemaregistry.errors import EnvelopeError

MAGIC_BYTE: int = 0
HEADER_SIZE: int = 5
MAX_SCHEMA_ID: int = 0xFFFFFFFF

_HEADER = struct.Struct(">BI")


def encode(schema_id: int, payload: bytes) -> bytes:
    """
    Prefix `payload` with the envelope header for `schema_id`.

    Raises:
        EnvelopeError: If schema_id does not fit an unsigned 32-bit integer.
    """
    if not 0 <= schema_id <= MAX_SCHEMA_ID:
        raise EnvelopeError(f"schema id {schema_id} out of range")
    return _HEADER.pack(MAGIC_BYTE, schema_id) + bytes(payload)


def decode(data: bytes) -> Tuple[int, bytes]:
    """
    Split an enveloped message into (schema_id, payload).

    Raises:
        EnvelopeError: If data is shorter than the header or the magic byte is wrong.
    """
    if data is None or len(data) < HEADER_SIZE:
        size = 0 if data is None else len(data)
        raise EnvelopeError(
            f"message of {size} bytes is shorter than the {HEADER_SIZE} byte envelope"
        )

    magic, schema_id = _HEADER.unpack_from(data)
    if magic != MAGIC_BYTE:
        raise EnvelopeError(f"unknown magic byte {magic:#04x}")

    return schema_id, bytes(data[HEADER_SIZE:])
