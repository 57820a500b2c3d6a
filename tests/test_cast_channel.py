import pytest

from netdisplays.cast_channel import (
    AuthChallenge,
    AuthError,
    AuthResponse,
    CastMessage,
    DeviceAuthMessage,
)
from netdisplays.cast_enums import (
    ErrorType,
    HashAlgorithm,
    PayloadType,
    ProtocolVersion,
    SignatureAlgorithm,
)
from netdisplays.wire import (
    DecodeError,
    WireType,
    encode_key,
    encode_length_delimited,
    encode_varint,
)


def _full_message():
    return CastMessage(
        protocol_version=ProtocolVersion.CASTV2_1_0,
        source_id="sender-0",
        destination_id="receiver-0",
        namespace="urn:x-cast:com.google.cast.tp.connection",
        payload_type=PayloadType.STRING,
        payload_utf8='{"type":"CONNECT"}',
    )


def test_default_cast_message_wire_bytes():
    assert CastMessage().pack() == b"\x08\x00\x12\x00\x1a\x00\x22\x00\x28\x00"


def test_auth_error_wire_bytes():
    assert AuthError(ErrorType.NO_TLS).pack() == b"\x08\x01"


def test_empty_challenge_packs_to_nothing():
    assert AuthChallenge().pack() == b""


def test_cast_message_round_trip():
    message = _full_message()
    assert CastMessage.unpack(message.pack()) == message


def test_cast_message_binary_round_trip():
    message = CastMessage(
        protocol_version=ProtocolVersion.CASTV2_1_3,
        source_id="sender-0",
        destination_id="receiver-0",
        namespace="urn:x-cast:com.google.cast.tp.deviceauth",
        payload_type=PayloadType.BINARY,
        payload_binary=b"\x00\x01\xff",
        continued=True,
        remaining_length=42,
    )
    decoded = CastMessage.unpack(message.pack())
    assert decoded == message
    assert decoded.payload_type is PayloadType.BINARY
    assert decoded.protocol_version is ProtocolVersion.CASTV2_1_3


def test_packed_size_matches_pack():
    message = _full_message()
    assert message.packed_size() == len(message.pack())


def test_optional_fields_absent_after_unpack():
    decoded = CastMessage.unpack(CastMessage(source_id="a").pack())
    assert decoded.payload_utf8 is None
    assert decoded.payload_binary is None
    assert decoded.continued is None
    assert decoded.remaining_length is None
    assert decoded.source_id == "a"


def test_missing_required_field_is_an_error():
    with pytest.raises(DecodeError):
        CastMessage.unpack(b"")


def test_missing_required_namespace_is_an_error():
    data = (
        encode_key(1, WireType.VARINT)
        + encode_varint(0)
        + encode_length_delimited(2, b"s")
        + encode_length_delimited(3, b"d")
        + encode_key(5, WireType.VARINT)
        + encode_varint(0)
    )
    with pytest.raises(DecodeError):
        CastMessage.unpack(data)


def test_wrong_wire_type_is_an_error():
    data = CastMessage().pack() + encode_key(8, WireType.LENGTH_DELIMITED) + b"\x00"
    with pytest.raises(DecodeError):
        CastMessage.unpack(data)


def test_unknown_enum_value_is_an_error():
    data = encode_key(1, WireType.VARINT) + encode_varint(7)
    with pytest.raises(DecodeError):
        AuthError.unpack(data)


def test_negative_enum_value_is_an_error():
    data = encode_key(1, WireType.VARINT) + encode_varint(-1)
    with pytest.raises(DecodeError):
        AuthError.unpack(data)


def test_unknown_fields_are_skipped():
    data = AuthError(ErrorType.SIGNATURE_ALGORITHM_UNAVAILABLE).pack()
    data += encode_length_delimited(15, b"extra")
    assert AuthError.unpack(data) == AuthError(ErrorType.SIGNATURE_ALGORITHM_UNAVAILABLE)


def test_last_scalar_occurrence_wins():
    data = CastMessage(source_id="first").pack() + encode_length_delimited(2, b"second")
    assert CastMessage.unpack(data).source_id == "second"


def test_invalid_utf8_is_an_error():
    data = CastMessage().pack() + encode_length_delimited(6, b"\xff\xfe")
    with pytest.raises(DecodeError):
        CastMessage.unpack(data)


def test_nonzero_bool_decodes_true():
    data = CastMessage().pack() + encode_key(8, WireType.VARINT) + encode_varint(5)
    assert CastMessage.unpack(data).continued is True


def test_remaining_length_out_of_range():
    with pytest.raises(ValueError):
        CastMessage(remaining_length=1 << 32).pack()
    with pytest.raises(ValueError):
        CastMessage(remaining_length=-1).pack()


def test_truncated_data_is_an_error():
    data = _full_message().pack()
    with pytest.raises(DecodeError):
        CastMessage.unpack(data[:-3])


def test_auth_challenge_round_trip():
    challenge = AuthChallenge(
        signature_algorithm=SignatureAlgorithm.RSASSA_PSS,
        sender_nonce=b"nonce",
        hash_algorithm=HashAlgorithm.SHA256,
    )
    assert AuthChallenge.unpack(challenge.pack()) == challenge


def test_auth_challenge_unset_fields_stay_unset():
    decoded = AuthChallenge.unpack(b"")
    assert decoded == AuthChallenge()
    assert decoded.signature_algorithm is None
    assert decoded.hash_algorithm is None


def test_auth_response_round_trip_keeps_certificate_order():
    response = AuthResponse(
        signature=b"sig",
        client_auth_certificate=b"cert",
        intermediate_certificate=[b"one", b"two", b"three"],
        signature_algorithm=SignatureAlgorithm.RSASSA_PKCS1v15,
        sender_nonce=b"nonce",
        hash_algorithm=HashAlgorithm.SHA1,
        crl=b"crl",
    )
    decoded = AuthResponse.unpack(response.pack())
    assert decoded == response
    assert decoded.intermediate_certificate == [b"one", b"two", b"three"]


def test_auth_response_requires_signature():
    with pytest.raises(DecodeError):
        AuthResponse.unpack(encode_length_delimited(2, b"cert"))


def test_auth_error_requires_error_type():
    with pytest.raises(DecodeError):
        AuthError.unpack(b"")


def test_device_auth_message_round_trip():
    message = DeviceAuthMessage(
        challenge=AuthChallenge(sender_nonce=b"n"),
        response=AuthResponse(signature=b"s", client_auth_certificate=b"c"),
        error=AuthError(ErrorType.NO_TLS),
    )
    assert DeviceAuthMessage.unpack(message.pack()) == message


def test_device_auth_message_empty():
    assert DeviceAuthMessage.unpack(DeviceAuthMessage().pack()) == DeviceAuthMessage()


def test_repeated_sub_messages_are_merged():
    data = encode_length_delimited(
        1, AuthChallenge(sender_nonce=b"n").pack()
    ) + encode_length_delimited(
        1, AuthChallenge(hash_algorithm=HashAlgorithm.SHA256).pack()
    )
    decoded = DeviceAuthMessage.unpack(data)
    assert decoded.challenge == AuthChallenge(
        sender_nonce=b"n", hash_algorithm=HashAlgorithm.SHA256
    )


def test_invalid_nested_message_is_an_error():
    data = encode_length_delimited(3, b"")
    with pytest.raises(DecodeError):
        DeviceAuthMessage.unpack(data)