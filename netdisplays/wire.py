"""Low-level helpers for the protocol buffer wire format."""

from __future__ import annotations

import enum
from typing import Iterator, NamedTuple, Union

_MAX_VARINT_BYTES = 10
_UINT64_LIMIT = 1 << 64
_MAX_FIELD_NUMBER = (1 << 29) - 1


class WireType(enum.IntEnum):
    """Wire types that tag every encoded field."""

    VARINT = 0
    FIXED64 = 1
    LENGTH_DELIMITED = 2
    START_GROUP = 3
    END_GROUP = 4
    FIXED32 = 5


class DecodeError(ValueError):
    """Raised when encoded data is malformed or truncated."""


class Field(NamedTuple):
    """One decoded field: its number, wire type and raw value."""

    number: int
    wire_type: WireType
    value: Union[int, bytes]


def encode_varint(value: int) -> bytes:
    """Encode an integer as a base-128 varint.

    Negative values are encoded as their 64-bit two's complement,
    the way signed enum and int32 fields are written.
    """
    if value < 0:
        value += _UINT64_LIMIT
        if value < 0:
            raise ValueError("varint value is below the 64-bit range")
    if value >= _UINT64_LIMIT:
        raise ValueError("varint value exceeds 64 bits")

    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def decode_varint(data: bytes, offset: int = 0) -> tuple[int, int]:
    """Decode a varint at ``offset``; return the value and the next offset."""
    result = 0
    shift = 0
    for position in range(offset, min(len(data), offset + _MAX_VARINT_BYTES)):
        byte = data[position]
        result |= (byte & 0x7F) << shift
        if not byte & 0x80:
            if result >= _UINT64_LIMIT:
                raise DecodeError("varint exceeds 64 bits")
            return result, position + 1
        shift += 7
    if len(data) - offset >= _MAX_VARINT_BYTES:
        raise DecodeError("varint is too long")
    raise DecodeError("truncated varint")


def encode_key(number: int, wire_type: WireType) -> bytes:
    """Encode the tag that precedes a field."""
    if not 1 <= number <= _MAX_FIELD_NUMBER:
        raise ValueError(f"invalid field number {number}")
    return encode_varint((number << 3) | int(WireType(wire_type)))


def encode_length_delimited(number: int, payload: bytes) -> bytes:
    """Encode a length-delimited field (string, bytes or sub-message)."""
    payload = bytes(payload)
    return (
        encode_key(number, WireType.LENGTH_DELIMITED)
        + encode_varint(len(payload))
        + payload
    )


def _take(data: bytes, offset: int, size: int) -> bytes:
    end = offset + size
    if end > len(data):
        raise DecodeError("field runs past the end of the data")
    return bytes(data[offset:end])


def iter_fields(data: bytes) -> Iterator[Field]:
    """Yield every field of an encoded message in the order it appears."""
    offset = 0
    while offset < len(data):
        key, offset = decode_varint(data, offset)
        number = key >> 3
        if number == 0:
            raise DecodeError("field number 0 is not allowed")
        try:
            wire_type = WireType(key & 0x07)
        except ValueError:
            raise DecodeError(f"unknown wire type {key & 0x07}") from None

        if wire_type is WireType.VARINT:
            value, offset = decode_varint(data, offset)
        elif wire_type is WireType.FIXED64:
            value = int.from_bytes(_take(data, offset, 8), "little")
            offset += 8
        elif wire_type is WireType.FIXED32:
            value = int.from_bytes(_take(data, offset, 4), "little")
            offset += 4
        elif wire_type is WireType.LENGTH_DELIMITED:
            length, offset = decode_varint(data, offset)
            value = _take(data, offset, length)
            offset += length
        else:
            raise DecodeError("group fields are not supported")

        yield Field(number, wire_type, value)