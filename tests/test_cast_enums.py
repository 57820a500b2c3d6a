import pytest

from netdisplays.cast_enums import (
    ErrorType,
    HashAlgorithm,
    PayloadType,
    ProtocolVersion,
    SignatureAlgorithm,
    enum_from_wire,
)
from netdisplays.wire import DecodeError, decode_varint, encode_varint

ALL_ENUMS = [ProtocolVersion, PayloadType, ErrorType, SignatureAlgorithm, HashAlgorithm]


def test_protocol_version_values_fixed_by_source():
    members = [enum_from_wire(ProtocolVersion, value) for value in range(4)]
    assert [m.name for m in members] == [
        "CASTV2_1_0",
        "CASTV2_1_1",
        "CASTV2_1_2",
        "CASTV2_1_3",
    ]
    assert members[3] is ProtocolVersion.CASTV2_1_3


def test_payload_type_values():
    assert enum_from_wire(PayloadType, 0) is PayloadType.STRING
    assert enum_from_wire(PayloadType, 1) is PayloadType.BINARY


def test_error_type_names():
    assert [enum_from_wire(ErrorType, value).name for value in range(3)] == [
        "INTERNAL_ERROR",
        "NO_TLS",
        "SIGNATURE_ALGORITHM_UNAVAILABLE",
    ]


def test_signature_and_hash_algorithms():
    assert enum_from_wire(SignatureAlgorithm, 0) is SignatureAlgorithm.UNSPECIFIED
    assert enum_from_wire(SignatureAlgorithm, 1) is SignatureAlgorithm.RSASSA_PKCS1v15
    assert enum_from_wire(SignatureAlgorithm, 2) is SignatureAlgorithm.RSASSA_PSS
    assert enum_from_wire(HashAlgorithm, 0) is HashAlgorithm.SHA1
    assert enum_from_wire(HashAlgorithm, 1) is HashAlgorithm.SHA256


@pytest.mark.parametrize("enum_class", ALL_ENUMS)
def test_every_member_round_trips_through_varint(enum_class):
    for member in enum_class:
        value, _ = decode_varint(encode_varint(int(member)))
        assert enum_from_wire(enum_class, value) is member


@pytest.mark.parametrize("enum_class", ALL_ENUMS)
def test_value_past_last_member_is_rejected(enum_class):
    with pytest.raises(DecodeError):
        enum_from_wire(enum_class, len(enum_class))


def test_negative_wire_value_is_rejected():
    value, _ = decode_varint(encode_varint(-1))
    with pytest.raises(DecodeError):
        enum_from_wire(PayloadType, value)


def test_negative_python_value_is_rejected():
    with pytest.raises(DecodeError):
        enum_from_wire(HashAlgorithm, -1)


def test_high_bits_beyond_int32_are_dropped():
    value = (1 << 32) + int(ErrorType.NO_TLS)
    assert enum_from_wire(ErrorType, value) is ErrorType.NO_TLS


def test_value_beyond_64_bits_is_rejected():
    with pytest.raises(DecodeError):
        enum_from_wire(ProtocolVersion, 1 << 64)


def test_decode_error_is_value_error():
    with pytest.raises(ValueError):
        enum_from_wire(SignatureAlgorithm, len(SignatureAlgorithm) + 5)