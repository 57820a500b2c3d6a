"""Messages of the cast channel protocol and their wire encoding."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional

from netdisplays.cast_enums import (
    ErrorType,
    HashAlgorithm,
    PayloadType,
    ProtocolVersion,
    SignatureAlgorithm,
    enum_from_wire,
)
from netdisplays.wire import (
    DecodeError,
    WireType,
    encode_key,
    encode_length_delimited,
    encode_varint,
    iter_fields,
)

_UINT32_LIMIT = 1 << 32

_Found = dict[int, list]


def _collect(data: bytes, wire_types: Mapping[int, WireType], message: str) -> _Found:
    """Group the known fields of ``data`` by number, checking their wire types.

    Fields whose numbers the message does not define are skipped.
    """
    found: _Found = {}
    for item in iter_fields(bytes(data)):
        expected = wire_types.get(item.number)
        if expected is None:
            continue
        if item.wire_type is not expected:
            raise DecodeError(
                f"{message}: field {item.number} has wire type "
                f"{item.wire_type.name}, expected {expected.name}"
            )
        found.setdefault(item.number, []).append(item.value)
    return found


def _last(found: _Found, number: int):
    values = found.get(number)
    return values[-1] if values else None


def _required(found: _Found, number: int, name: str, message: str):
    values = found.get(number)
    if not values:
        raise DecodeError(f"{message}: required field {name!r} is missing")
    return values[-1]


def _merged(found: _Found, number: int) -> Optional[bytes]:
    """Join every occurrence of a sub-message so later ones merge into earlier ones."""
    values = found.get(number)
    return b"".join(values) if values else None


def _text(value: bytes, name: str) -> str:
    try:
        return value.decode("utf-8")
    except UnicodeDecodeError:
        raise DecodeError(f"field {name!r} is not valid UTF-8") from None


def _uint32(value: int) -> int:
    return value & (_UINT32_LIMIT - 1)


def _varint_field(number: int, value: int) -> bytes:
    return encode_key(number, WireType.VARINT) + encode_varint(int(value))


def _string_field(number: int, value: str) -> bytes:
    return encode_length_delimited(number, value.encode("utf-8"))


@dataclass
class CastMessage:
    """A message routed between two endpoints over a cast channel.

    Optional fields left as ``None`` are not written.
    """

    protocol_version: ProtocolVersion = ProtocolVersion.CASTV2_1_0
    source_id: str = ""
    destination_id: str = ""
    namespace: str = ""
    payload_type: PayloadType = PayloadType.STRING
    payload_utf8: Optional[str] = None
    payload_binary: Optional[bytes] = None
    continued: Optional[bool] = None
    remaining_length: Optional[int] = None

    _WIRE_TYPES = {
        1: WireType.VARINT,
        2: WireType.LENGTH_DELIMITED,
        3: WireType.LENGTH_DELIMITED,
        4: WireType.LENGTH_DELIMITED,
        5: WireType.VARINT,
        6: WireType.LENGTH_DELIMITED,
        7: WireType.LENGTH_DELIMITED,
        8: WireType.VARINT,
        9: WireType.VARINT,
    }

    def pack(self) -> bytes:
        """Encode the message in field-number order."""
        parts = [
            _varint_field(1, self.protocol_version),
            _string_field(2, self.source_id or ""),
            _string_field(3, self.destination_id or ""),
            _string_field(4, self.namespace or ""),
            _varint_field(5, self.payload_type),
        ]
        if self.payload_utf8 is not None:
            parts.append(_string_field(6, self.payload_utf8))
        if self.payload_binary is not None:
            parts.append(encode_length_delimited(7, self.payload_binary))
        if self.continued is not None:
            parts.append(_varint_field(8, 1 if self.continued else 0))
        if self.remaining_length is not None:
            if not 0 <= self.remaining_length < _UINT32_LIMIT:
                raise ValueError("remaining_length must fit in 32 unsigned bits")
            parts.append(_varint_field(9, self.remaining_length))
        return b"".join(parts)

    def packed_size(self) -> int:
        """Number of bytes that ``pack`` produces."""
        return len(self.pack())

    @classmethod
    def unpack(cls, data: bytes) -> "CastMessage":
        """Decode a message; raise DecodeError if it is malformed or incomplete."""
        name = "CastMessage"
        found = _collect(data, cls._WIRE_TYPES, name)
        payload_utf8 = _last(found, 6)
        continued = _last(found, 8)
        remaining_length = _last(found, 9)
        return cls(
            protocol_version=enum_from_wire(
                ProtocolVersion, _required(found, 1, "protocol_version", name)
            ),
            source_id=_text(_required(found, 2, "source_id", name), "source_id"),
            destination_id=_text(
                _required(found, 3, "destination_id", name), "destination_id"
            ),
            namespace=_text(_required(found, 4, "namespace", name), "namespace"),
            payload_type=enum_from_wire(
                PayloadType, _required(found, 5, "payload_type", name)
            ),
            payload_utf8=None if payload_utf8 is None else _text(payload_utf8, "payload_utf8"),
            payload_binary=_last(found, 7),
            continued=None if continued is None else bool(continued),
            remaining_length=None if remaining_length is None else _uint32(remaining_length),
        )


@dataclass
class AuthChallenge:
    """Challenge a sender issues to authenticate a receiver.

    Unset algorithms stand for RSASSA_PKCS1v15 and SHA1.
    """

    signature_algorithm: Optional[SignatureAlgorithm] = None
    sender_nonce: Optional[bytes] = None
    hash_algorithm: Optional[HashAlgorithm] = None

    _WIRE_TYPES = {
        1: WireType.VARINT,
        2: WireType.LENGTH_DELIMITED,
        3: WireType.VARINT,
    }

    def pack(self) -> bytes:
        """Encode the challenge in field-number order."""
        parts = []
        if self.signature_algorithm is not None:
            parts.append(_varint_field(1, self.signature_algorithm))
        if self.sender_nonce is not None:
            parts.append(encode_length_delimited(2, self.sender_nonce))
        if self.hash_algorithm is not None:
            parts.append(_varint_field(3, self.hash_algorithm))
        return b"".join(parts)

    @classmethod
    def unpack(cls, data: bytes) -> "AuthChallenge":
        """Decode a challenge; raise DecodeError if it is malformed."""
        found = _collect(data, cls._WIRE_TYPES, "AuthChallenge")
        signature = _last(found, 1)
        hash_algorithm = _last(found, 3)
        return cls(
            signature_algorithm=None
            if signature is None
            else enum_from_wire(SignatureAlgorithm, signature),
            sender_nonce=_last(found, 2),
            hash_algorithm=None
            if hash_algorithm is None
            else enum_from_wire(HashAlgorithm, hash_algorithm),
        )


@dataclass
class AuthResponse:
    """A receiver's signed answer to an authentication challenge.

    Unset algorithms stand for RSASSA_PKCS1v15 and SHA1.
    """

    signature: bytes = b""
    client_auth_certificate: bytes = b""
    intermediate_certificate: list[bytes] = field(default_factory=list)
    signature_algorithm: Optional[SignatureAlgorithm] = None
    sender_nonce: Optional[bytes] = None
    hash_algorithm: Optional[HashAlgorithm] = None
    crl: Optional[bytes] = None

    _WIRE_TYPES = {
        1: WireType.LENGTH_DELIMITED,
        2: WireType.LENGTH_DELIMITED,
        3: WireType.LENGTH_DELIMITED,
        4: WireType.VARINT,
        5: WireType.LENGTH_DELIMITED,
        6: WireType.VARINT,
        7: WireType.LENGTH_DELIMITED,
    }

    def pack(self) -> bytes:
        """Encode the response in field-number order."""
        parts = [
            encode_length_delimited(1, self.signature or b""),
            encode_length_delimited(2, self.client_auth_certificate or b""),
        ]
        parts.extend(
            encode_length_delimited(3, certificate)
            for certificate in self.intermediate_certificate
        )
        if self.signature_algorithm is not None:
            parts.append(_varint_field(4, self.signature_algorithm))
        if self.sender_nonce is not None:
            parts.append(encode_length_delimited(5, self.sender_nonce))
        if self.hash_algorithm is not None:
            parts.append(_varint_field(6, self.hash_algorithm))
        if self.crl is not None:
            parts.append(encode_length_delimited(7, self.crl))
        return b"".join(parts)

    @classmethod
    def unpack(cls, data: bytes) -> "AuthResponse":
        """Decode a response; raise DecodeError if it is malformed or incomplete."""
        name = "AuthResponse"
        found = _collect(data, cls._WIRE_TYPES, name)
        signature_algorithm = _last(found, 4)
        hash_algorithm = _last(found, 6)
        return cls(
            signature=_required(found, 1, "signature", name),
            client_auth_certificate=_required(found, 2, "client_auth_certificate", name),
            intermediate_certificate=list(found.get(3, [])),
            signature_algorithm=None
            if signature_algorithm is None
            else enum_from_wire(SignatureAlgorithm, signature_algorithm),
            sender_nonce=_last(found, 5),
            hash_algorithm=None
            if hash_algorithm is None
            else enum_from_wire(HashAlgorithm, hash_algorithm),
            crl=_last(found, 7),
        )


@dataclass
class AuthError:
    """Error a receiver reports instead of an authentication response."""

    error_type: ErrorType = ErrorType.INTERNAL_ERROR

    _WIRE_TYPES = {1: WireType.VARINT}

    def pack(self) -> bytes:
        """Encode the error."""
        return _varint_field(1, self.error_type)

    @classmethod
    def unpack(cls, data: bytes) -> "AuthError":
        """Decode an error; raise DecodeError if it is malformed or incomplete."""
        name = "AuthError"
        found = _collect(data, cls._WIRE_TYPES, name)
        return cls(
            error_type=enum_from_wire(ErrorType, _required(found, 1, "error_type", name))
        )


@dataclass
class DeviceAuthMessage:
    """Envelope of the authentication exchange: a challenge, response or error."""

    challenge: Optional[AuthChallenge] = None
    response: Optional[AuthResponse] = None
    error: Optional[AuthError] = None

    _WIRE_TYPES = {
        1: WireType.LENGTH_DELIMITED,
        2: WireType.LENGTH_DELIMITED,
        3: WireType.LENGTH_DELIMITED,
    }

    def pack(self) -> bytes:
        """Encode the envelope in field-number order."""
        parts = []
        if self.challenge is not None:
            parts.append(encode_length_delimited(1, self.challenge.pack()))
        if self.response is not None:
            parts.append(encode_length_delimited(2, self.response.pack()))
        if self.error is not None:
            parts.append(encode_length_delimited(3, self.error.pack()))
        return b"".join(parts)

    @classmethod
    def unpack(cls, data: bytes) -> "DeviceAuthMessage":
        """Decode an envelope; repeated sub-messages are merged in order."""
        found = _collect(data, cls._WIRE_TYPES, "DeviceAuthMessage")
        challenge = _merged(found, 1)
        response = _merged(found, 2)
        error = _merged(found, 3)
        return cls(
            challenge=None if challenge is None else AuthChallenge.unpack(challenge),
            response=None if response is None else AuthResponse.unpack(response),
            error=None if error is None else AuthError.unpack(error),
        )