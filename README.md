# netdisplays

Building blocks for a sender that streams to network displays: the cast
channel messages and their wire encoding, a length-prefixed TLS message
channel, and small observable models for listing discovered sinks and
describing missing codecs. The package has no dependencies outside the
standard library.

## Modules

- `netdisplays.wire` – protocol-buffer wire format helpers: `encode_varint`,
  `decode_varint`, `encode_key`, `encode_length_delimited`, `iter_fields`,
  the `WireType` enum and `DecodeError` (a `ValueError`) for malformed or
  truncated data.
- `netdisplays.cast_enums` – `ProtocolVersion`, `PayloadType`, `ErrorType`,
  `SignatureAlgorithm`, `HashAlgorithm`, and `enum_from_wire`, which turns a
  decoded varint into an enum member or raises `DecodeError`.
- `netdisplays.cast_channel` – the messages `CastMessage`, `AuthChallenge`,
  `AuthResponse`, `AuthError` and `DeviceAuthMessage` as dataclasses, each
  with `pack()` and a `unpack(data)` class method. Unpacking raises
  `DecodeError` when a required field is missing, a field has the wrong wire
  type, an enum value is unknown or a string is not UTF-8. Unknown field
  numbers are skipped.
- `netdisplays.cc_comm` – the request channel:
  - `MessageType` (`AUTH`, `CONNECT`, `DISCONNECT`, `PING`, `PONG`,
    `RECEIVER`, `MEDIA`), each with the `namespace` it is sent on.
  - `build_message(sender_id, destination_id, message_type, utf8_payload)`:
    `AUTH` requests carry an empty binary payload, all others the given
    string payload.
  - `frame_message(message)`: the encoded message preceded by its length as
    a 4-byte big-endian number.
  - `FrameReader.feed(data)`: buffers received bytes and returns every
    complete message; frames that cannot be decoded are logged and dropped.
  - `create_tls_context()`: a client TLS context that does not verify the
    receiver's certificate (receivers use self-signed certificates).
  - `CcComm`: connects over IPv4 and TLS (`make_connection`, port 8009 unless
    the address names another), sends requests (`send_request`), handles
    received bytes (`receive`) and closes (`finish`). It reports received
    messages, a completed handshake and connection errors through a
    `CommClosure`. Failures are raised as `CcError`, whose `code` names the
    kind of failure.
- `netdisplays.signals` – `Signal`, a list of handlers with `connect`,
  `disconnect` and `emit`.
- `netdisplays.sink_list_model` – `Provider`, with `sink_added` and
  `sink_removed` signals, and `SinkListModel`, an ordered list of the sinks
  its provider announces. Each change emits `items_changed` with the
  position, the number removed and the number added.
- `netdisplays.sink_row` – `SinkRow`, whose `title` follows the sink's
  `display_name` and is refreshed whenever the sink's `notify` signal is
  emitted; `close()` releases the sink.
- `netdisplays.codec_install` – `describe_codec(codec)`,
  `installer_resource(description, codec)` and `CodecInstall`, a titled list
  of missing elements that is `visible` only when the list is non-empty and
  whose `rows()` pair each element with its description.

## Installation

```
pip install .
```

## Examples

Framing and reading back a request:

```python
from netdisplays.cc_comm import FrameReader, MessageType, build_message, frame_message

message = build_message("sender-0", "receiver-0", MessageType.CONNECT, '{"type": "CONNECT"}')
frame = frame_message(message)

reader = FrameReader()
for received in reader.feed(frame):
    print(received.namespace, received.payload_utf8)
```

Talking to a receiver:

```python
from netdisplays.cc_comm import CcComm, CommClosure, MessageType

comm = CcComm(CommClosure(message_received=print), timeout=5.0)
comm.make_connection("192.0.2.10")
comm.send_request("receiver-0", MessageType.CONNECT, '{"type": "CONNECT"}')
comm.receive()   # reads one chunk and passes complete messages to print
comm.finish()
```

Following a provider's sinks:

```python
from netdisplays.sink_list_model import Provider, SinkListModel

provider = Provider()
model = SinkListModel(provider)
model.items_changed.connect(lambda pos, removed, added: print(pos, removed, added))
provider.sink_added.emit("living room")   # prints: 0 0 1
print(list(model))                        # ['living room']
```

Describing missing codecs:

```python
from netdisplays.codec_install import describe_codec

print(describe_codec("x264enc"))  # GStreamer x264 video encoder (x264enc)
```

## What the package does not do

There is no command and no window. The package does not discover sinks on
the network, capture the screen or audio, encode or stream media, or install
codecs: `Provider` signals must be emitted by the caller, and
`installer_resource` only builds the string an installer would be given.
`CcComm` sends and receives cast messages but does not carry out the
authentication or media session logic on top of them.

## Running the tests

```
pip install .[test]
pytest
```