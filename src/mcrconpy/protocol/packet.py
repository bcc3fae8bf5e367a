"""
Defines the packet format exchanged between the client and server.
"""
import enum
import functools
import struct
from typing import Type

from ..errors import (
    InvalidEncoding,
    InvalidPayload,
    MalformedPacket,
    PayloadTooLarge,
    ProtocolViolation,
)

__all__ = (
    "DEFAULT_PORT",
    "HEADER_LEN",
    "MAX_OUTGOING_PAYLOAD_LEN",
    "MAX_PAYLOAD_LEN",
    "PacketType",
    "Packet",
    "encode",
)

DEFAULT_PORT = 25575
"""The default port used by Minecraft for RCON."""

HEADER_LEN = 10
"""The smallest possible value of a packet's length field.

This covers the request ID, the packet type and both null terminators.

"""

MAX_PAYLOAD_LEN = 4096
"""The maximum number of payload bytes allowed in a single packet."""

MAX_OUTGOING_PAYLOAD_LEN = 1446
"""The maximum number of payload bytes that a vanilla server will accept.

Longer passwords or commands cause the server to drop the connection.

"""

ENCODING = "utf-8"

_INT32 = struct.Struct("<i")
_HEADER = struct.Struct("<iii")


def _convert_exception(
    from_exc: Type[Exception],
    to_exc: Type[Exception],
    message: str | None = None,
):
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except from_exc as e:
                if message is not None:
                    raise to_exc(message) from e
                raise to_exc from e

        return wrapper

    return decorator


class PacketType(enum.IntEnum):
    """The type of a :py:class:`Packet`.

    The protocol re-uses the value ``2`` for both authentication responses
    and command requests. Which one is meant depends on the direction of
    the packet, so :py:attr:`EXEC_COMMAND` is an alias of
    :py:attr:`AUTH_RESPONSE`.

    """

    RESPONSE_VALUE = 0
    """Sent by the server in response to a command."""

    AUTH_RESPONSE = 2
    """Sent by the server in response to a login attempt."""

    EXEC_COMMAND = 2
    """Sent by the client to execute a command."""

    AUTH = 3
    """Sent by the client to log in with a password."""


def _check_payload(payload: bytes) -> None:
    if b"\x00" in payload:
        raise InvalidPayload("payload cannot contain a null byte")

    over_size = len(payload) - MAX_PAYLOAD_LEN
    if over_size > 0:
        raise PayloadTooLarge(f"max payload size exceeded by {over_size} bytes")


@_convert_exception(
    struct.error,
    InvalidPayload,
    "request ID and packet type must be 32-bit signed integers",
)
def encode(request_id: int, packet_type: PacketType | int, payload: str) -> bytes:
    """Encodes a packet into its wire representation.

    :param request_id: The ID used to correlate the request with its response.
    :param packet_type: The type of packet being sent.
    :param payload: The text to include in the packet.
    :returns: The bytes to write to the stream, including the length prefix.
    :raises InvalidPayload:
        The payload contained a null byte, or the request ID or packet
        type did not fit in a 32-bit signed integer.
    :raises PayloadTooLarge:
        The encoded payload was larger than :py:data:`MAX_PAYLOAD_LEN`.

    """
    payload_bytes = payload.encode(ENCODING)
    _check_payload(payload_bytes)

    length = HEADER_LEN + len(payload_bytes)
    header = _HEADER.pack(length, request_id, int(packet_type))
    return header + payload_bytes + b"\x00\x00"


def _type_name(packet_type: PacketType) -> str:
    # EXEC_COMMAND and AUTH_RESPONSE share a value
    return "/".join(
        name
        for name, member in PacketType.__members__.items()
        if member == packet_type
    )


class Packet:
    """A single message sent between the RCON client and server.

    The packet's length is always derived from its payload
    and cannot be set directly.

    :param request_id: The ID used to correlate the request with its response.
    :param type: The type of packet.
    :param payload: The text contained by the packet.
    :raises InvalidPayload: The payload contained a null byte.
    :raises PayloadTooLarge:
        The encoded payload was larger than :py:data:`MAX_PAYLOAD_LEN`.

    """

    __slots__ = ("request_id", "type", "payload", "data")

    request_id: int
    type: PacketType
    payload: str
    data: bytes
    """The encoded packet, including the length prefix."""

    def __init__(self, request_id: int, type: PacketType, payload: str = ""):
        self.data = encode(request_id, type, payload)
        self.request_id = request_id
        self.type = type
        self.payload = payload

    def __repr__(self):
        return "{}({!r}, {}, {!r})".format(
            type(self).__name__,
            self.request_id,
            _type_name(self.type),
            self.payload,
        )

    def __eq__(self, other):
        if not isinstance(other, Packet):
            return NotImplemented
        return self.data == other.data

    def __hash__(self):
        return hash(self.data)

    @property
    def length(self) -> int:
        """The value of the packet's length field.

        This is the number of bytes following the length prefix.

        """
        return len(self.data) - _INT32.size

    @classmethod
    def parse_length(cls, data: bytes) -> int:
        """Parses and validates the 4-byte length prefix of a packet.

        :raises MalformedPacket:
            The length is too small to hold a header or too large to
            be a valid packet.

        """
        if len(data) != _INT32.size:
            raise MalformedPacket(f"length prefix must be 4 bytes, not {len(data)}")

        (length,) = _INT32.unpack(data)
        if length < HEADER_LEN:
            raise MalformedPacket(f"packet length {length} is below {HEADER_LEN}")
        elif length > HEADER_LEN + MAX_PAYLOAD_LEN:
            raise MalformedPacket(
                f"packet length {length} exceeds {HEADER_LEN + MAX_PAYLOAD_LEN}"
            )
        return length

    @classmethod
    @_convert_exception(struct.error, MalformedPacket, "insufficient data provided")
    def from_bytes(cls, data: bytes) -> "Packet":
        """Constructs a packet from a complete frame.

        :param data: The data to parse, including the length prefix.
        :returns: The parsed packet.
        :raises MalformedPacket:
            The given data does not match the packet format,
            for example if the terminating null bytes are missing.
        :raises InvalidEncoding: The payload is not valid UTF-8.
        :raises ProtocolViolation: The packet type is unknown.

        """
        length = cls.parse_length(data[: _INT32.size])
        if len(data) - _INT32.size != length:
            raise MalformedPacket(
                f"expected {length} bytes after length prefix, "
                f"received {len(data) - _INT32.size}"
            )

        _, request_id, type_value = _HEADER.unpack_from(data)
        if data[-2:] != b"\x00\x00":
            raise MalformedPacket("expected two null bytes at end of packet")

        payload_bytes = data[_HEADER.size : -2]
        if b"\x00" in payload_bytes:
            raise MalformedPacket("payload cannot contain a null byte")

        try:
            ptype = PacketType(type_value)
        except ValueError:
            raise ProtocolViolation(f"unknown packet type: {type_value}") from None

        try:
            payload = payload_bytes.decode(ENCODING)
        except UnicodeDecodeError as e:
            raise InvalidEncoding(f"payload is not valid {ENCODING}") from e

        return cls(request_id, ptype, payload)
