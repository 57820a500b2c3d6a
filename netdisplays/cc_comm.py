"""TLS communication channel with a cast receiver."""

from __future__ import annotations

import enum
import logging
import random
import socket
import ssl
from dataclasses import dataclass
from typing import Any, Callable, Optional

from netdisplays.cast_channel import CastMessage
from netdisplays.cast_enums import PayloadType, ProtocolVersion
from netdisplays.wire import DecodeError

logger = logging.getLogger(__name__)

DEFAULT_PORT = 8009
DEFAULT_SENDER_ID = "sender-nd"
READ_CHUNK_SIZE = 4096
HEADER_SIZE = 4

NAMESPACE_AUTH = "urn:x-cast:com.google.cast.tp.deviceauth"
NAMESPACE_CONNECTION = "urn:x-cast:com.google.cast.tp.connection"
NAMESPACE_HEARTBEAT = "urn:x-cast:com.google.cast.tp.heartbeat"
NAMESPACE_RECEIVER = "urn:x-cast:com.google.cast.receiver"
NAMESPACE_MEDIA = "urn:x-cast:com.google.cast.media"


class MessageType(enum.IntEnum):
    """Kinds of request a sender can put on the channel."""

    AUTH = 0
    CONNECT = 1
    DISCONNECT = 2
    PING = 3
    PONG = 4
    RECEIVER = 5
    MEDIA = 6

    @property
    def namespace(self) -> str:
        """The channel namespace that messages of this kind are sent on."""
        return _NAMESPACES[self]


_NAMESPACES = {
    MessageType.AUTH: NAMESPACE_AUTH,
    MessageType.CONNECT: NAMESPACE_CONNECTION,
    MessageType.DISCONNECT: NAMESPACE_CONNECTION,
    MessageType.PING: NAMESPACE_HEARTBEAT,
    MessageType.PONG: NAMESPACE_HEARTBEAT,
    MessageType.RECEIVER: NAMESPACE_RECEIVER,
    MessageType.MEDIA: NAMESPACE_MEDIA,
}

_QUIET_TYPES = frozenset({MessageType.PING, MessageType.PONG, MessageType.AUTH})


class CcError(Exception):
    """A failure on the cast channel; ``code`` tells which kind."""

    TLS_READ_FAILED = "tls-read-failed"
    HANDSHAKE_FAILED = "handshake-failed"
    NO_TLS_CONN = "no-tls-conn"
    TLS_WRITE_FAILED = "tls-write-failed"
    CANCELLED = "cancelled"

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code


@dataclass
class CommClosure:
    """Callbacks through which a channel reports to its owner."""

    message_received: Optional[Callable[[CastMessage], Any]] = None
    handshake_completed: Optional[Callable[[], Any]] = None
    error_close_connection: Optional[Callable[[CcError], Any]] = None


def build_message(
    sender_id: str,
    destination_id: str,
    message_type: MessageType,
    utf8_payload: Optional[str] = None,
) -> CastMessage:
    """Build the cast message for a request of ``message_type``.

    Authentication requests carry an empty binary payload; every other
    kind carries ``utf8_payload`` as a string payload.
    """
    message_type = MessageType(message_type)
    message = CastMessage(
        protocol_version=ProtocolVersion.CASTV2_1_0,
        source_id=sender_id,
        destination_id=destination_id,
        namespace=message_type.namespace,
    )
    if message_type is MessageType.AUTH:
        message.payload_type = PayloadType.BINARY
        message.payload_binary = b""
    else:
        message.payload_type = PayloadType.STRING
        message.payload_utf8 = utf8_payload
    return message


def frame_message(message: CastMessage) -> bytes:
    """Encode a message preceded by its length as a 4-byte big-endian number."""
    body = message.pack()
    return len(body).to_bytes(HEADER_SIZE, "big") + body


def create_tls_context() -> ssl.SSLContext:
    """A client TLS context that accepts the receiver's self-signed certificate."""
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    return context


class FrameReader:
    """Reassembles length-prefixed cast messages from a byte stream."""

    def __init__(self) -> None:
        self._buffer = bytearray()

    @property
    def pending(self) -> int:
        """Number of buffered bytes not yet part of a complete frame."""
        return len(self._buffer)

    def feed(self, data: bytes) -> list[CastMessage]:
        """Add received bytes and return every message completed by them.

        Frames whose body cannot be decoded are logged and dropped.
        """
        self._buffer.extend(data)
        messages = []
        while len(self._buffer) >= HEADER_SIZE:
            size = int.from_bytes(self._buffer[:HEADER_SIZE], "big")
            end = HEADER_SIZE + size
            if len(self._buffer) < end:
                break
            body = bytes(self._buffer[HEADER_SIZE:end])
            del self._buffer[:end]
            logger.debug("CcComm: Received message size: %d", size)
            try:
                messages.append(CastMessage.unpack(body))
            except DecodeError as error:
                logger.warning("CcComm: Failed to unpack received data: %s", error)
        return messages


def _parse_address(remote_address: str, default_port: int) -> tuple[str, int]:
    address = remote_address.strip()
    if not address:
        raise ValueError("empty remote address")
    if address.startswith("["):
        host, bracket, rest = address[1:].partition("]")
        if not bracket:
            raise ValueError(f"invalid address {remote_address!r}")
        if not rest:
            return host, default_port
        if not rest.startswith(":"):
            raise ValueError(f"invalid address {remote_address!r}")
        return host, _parse_port(rest[1:], remote_address)
    if address.count(":") == 1:
        host, _, port = address.partition(":")
        return host, _parse_port(port, remote_address)
    return address, default_port


def _parse_port(text: str, remote_address: str) -> int:
    try:
        port = int(text)
    except ValueError:
        raise ValueError(f"invalid port in address {remote_address!r}") from None
    if not 0 < port < 65536:
        raise ValueError(f"invalid port in address {remote_address!r}")
    return port


class CcComm:
    """A TLS connection to a cast receiver that sends and receives messages."""

    def __init__(
        self,
        closure: Optional[CommClosure] = None,
        sender_prefix: str = DEFAULT_SENDER_ID,
        timeout: Optional[float] = None,
    ) -> None:
        self.closure = closure
        self.con: Any = None
        self.cancelled = False
        self.sender_id: Optional[str] = None
        self.local_address: Optional[str] = None
        self.timeout = timeout
        self._sender_prefix = sender_prefix
        self._reader = FrameReader()

    def make_connection(self, remote_address: str) -> None:
        """Connect over IPv4 and TLS to ``remote_address`` (port 8009 by default).

        Connection errors raise OSError; a failed TLS handshake is reported
        to the closure and raised as CcError.
        """
        if self.con is not None:
            raise RuntimeError("the channel is already connected")

        host, port = _parse_address(remote_address, DEFAULT_PORT)
        addresses = socket.getaddrinfo(host, port, socket.AF_INET, socket.SOCK_STREAM)
        if not addresses:
            raise OSError(f"no IPv4 address found for {host!r}")

        raw: Optional[socket.socket] = None
        last_error: Optional[OSError] = None
        for family, kind, proto, _, sockaddr in addresses:
            candidate = socket.socket(family, kind, proto)
            candidate.settimeout(self.timeout)
            try:
                candidate.connect(sockaddr)
            except OSError as error:
                candidate.close()
                last_error = error
                continue
            raw = candidate
            break
        if raw is None:
            assert last_error is not None
            raise last_error

        logger.debug("CcComm: Connecting to: %s", remote_address)
        try:
            tls = create_tls_context().wrap_socket(raw, server_hostname=host)
        except (ssl.SSLError, OSError) as error:
            raw.close()
            failure = CcError(
                CcError.HANDSHAKE_FAILED, f"Failed to perform TLS handshake: {error}"
            )
            logger.warning("CcComm: %s", failure)
            self._close_connection(failure)
            raise failure from error

        self.con = tls
        self._reader = FrameReader()
        self.local_address = tls.getsockname()[0]
        logger.debug("CcComm: Local address: %s", self.local_address)
        self.sender_id = f"{self._sender_prefix}{random.randrange(100, 1000)}"

        if self.closure and self.closure.handshake_completed:
            self.closure.handshake_completed()

    def send_request(
        self,
        destination_id: str,
        message_type: MessageType,
        utf8_payload: Optional[str] = None,
    ) -> bytes:
        """Build, frame and send a request; return the bytes written."""
        if self.cancelled:
            raise CcError(CcError.CANCELLED, "the channel has been cancelled")

        message_type = MessageType(message_type)
        message = build_message(self.sender_id or "", destination_id, message_type, utf8_payload)
        frame = frame_message(message)

        if message_type not in _QUIET_TYPES:
            logger.debug("CcComm: Sending message: %s", message)

        if self.con is None:
            error = CcError(CcError.NO_TLS_CONN, "TLS connection not found")
            logger.warning("CcComm: %s", error)
            self._close_connection(error)
            raise error

        try:
            self.con.sendall(frame)
        except OSError as cause:
            error = CcError(
                CcError.TLS_WRITE_FAILED, f"Failed to write bytes in the stream: {cause}"
            )
            logger.warning("CcComm: %s", error)
            raise error from cause
        return frame

    def receive(self, data: Optional[bytes] = None) -> list[CastMessage]:
        """Handle received bytes and pass each complete message to the closure.

        Without ``data``, one chunk is read from the connection. Returns the
        messages that were dispatched.
        """
        if data is None:
            if self.cancelled:
                return []
            if self.con is None:
                error = CcError(CcError.NO_TLS_CONN, "TLS connection not found")
                self._close_connection(error)
                raise error
            try:
                data = self.con.recv(READ_CHUNK_SIZE)
            except (ssl.SSLWantReadError, BlockingIOError):
                return []
            except OSError as cause:
                error = CcError(CcError.TLS_READ_FAILED, f"TLS read error: {cause}")
                logger.warning("CcComm: %s", error)
                self._close_connection(error)
                raise error from cause
            if not data:
                return []

        messages = self._reader.feed(data)
        if self.closure and self.closure.message_received:
            for message in messages:
                self.closure.message_received(message)
        return messages

    def finish(self) -> None:
        """Forget the session identity and close the connection."""
        logger.debug("CcComm: Finishing")
        self.sender_id = None
        self.local_address = None
        self._reader = FrameReader()
        if self.con is not None:
            try:
                self.con.close()
            except OSError as error:
                logger.warning(
                    "CcComm: Error closing communication client connection: %s", error
                )
            self.con = None

    def _close_connection(self, error: CcError) -> None:
        if self.closure and self.closure.error_close_connection:
            self.closure.error_close_connection(error)