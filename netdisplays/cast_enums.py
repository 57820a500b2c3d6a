"""Enumerations of the cast channel protocol."""

from __future__ import annotations

import enum
from typing import Type, TypeVar

from netdisplays.wire import DecodeError

_INT32_SIGN = 1 << 31
_UINT32_LIMIT = 1 << 32
_UINT64_LIMIT = 1 << 64

E = TypeVar("E", bound=enum.IntEnum)


class ProtocolVersion(enum.IntEnum):
    """Version of the cast channel protocol that a message is sent with."""

    CASTV2_1_0 = 0
    # message chunking support (deprecated)
    CASTV2_1_1 = 1
    # reworked message chunking
    CASTV2_1_2 = 2
    # binary payload over utf8
    CASTV2_1_3 = 3


class PayloadType(enum.IntEnum):
    """Kind of payload that a cast message carries."""

    STRING = 0
    BINARY = 1


class ErrorType(enum.IntEnum):
    """Reason given by a receiver for a failed authentication."""

    INTERNAL_ERROR = 0
    # the underlying connection is not TLS
    NO_TLS = 1
    SIGNATURE_ALGORITHM_UNAVAILABLE = 2


class SignatureAlgorithm(enum.IntEnum):
    """Signature algorithm used in the authentication exchange."""

    UNSPECIFIED = 0
    RSASSA_PKCS1v15 = 1
    RSASSA_PSS = 2


class HashAlgorithm(enum.IntEnum):
    """Hash algorithm used in the authentication exchange."""

    SHA1 = 0
    SHA256 = 1


def _to_int32(value: int) -> int:
    """Interpret a decoded varint as the signed 32-bit value it carries."""
    if value < 0:
        return value
    if value >= _UINT64_LIMIT:
        raise DecodeError("enum value exceeds 64 bits")
    value &= _UINT32_LIMIT - 1
    if value & _INT32_SIGN:
        value -= _UINT32_LIMIT
    return value


def enum_from_wire(enum_class: Type[E], value: int) -> E:
    """Return the member of ``enum_class`` that a decoded varint stands for.

    Enum fields are signed 32-bit integers on the wire; a value that does
    not name a member of ``enum_class`` raises DecodeError.
    """
    number = _to_int32(int(value))
    try:
        return enum_class(number)
    except ValueError:
        raise DecodeError(
            f"{number} is not a valid {enum_class.__name__}"
        ) from None