import struct

import pytest

from mcrconpy.errors import (
    InvalidEncoding,
    InvalidPayload,
    MalformedPacket,
    PayloadTooLarge,
    ProtocolViolation,
)
from mcrconpy.protocol import (
    HEADER_LEN,
    MAX_PAYLOAD_LEN,
    Packet,
    PacketType,
    encode,
)


def raw_frame(request_id: int, type_value: int, body: bytes) -> bytes:
    """Builds a frame by hand, bypassing any validation."""
    return struct.pack("<iii", 8 + len(body), request_id, type_value) + body


def test_encode_layout():
    data = encode(7, PacketType.EXEC_COMMAND, "seed")
    assert data == (
        b"\x0e\x00\x00\x00"
        b"\x07\x00\x00\x00"
        b"\x02\x00\x00\x00"
        b"seed\x00\x00"
    )
    assert Packet(7, PacketType.EXEC_COMMAND, "seed").data == data


def test_encode_negative_request_id():
    data = encode(-1, PacketType.AUTH_RESPONSE, "")
    assert data[4:8] == b"\xff\xff\xff\xff"


@pytest.mark.parametrize(
    "request_id,packet_type,payload",
    [
        (0, PacketType.AUTH, "foobar2000"),
        (-1, PacketType.AUTH_RESPONSE, ""),
        (42, PacketType.EXEC_COMMAND, "say hello world"),
        (2**31 - 1, PacketType.RESPONSE_VALUE, "Seed: [-1137927873379713691]"),
        (3, PacketType.RESPONSE_VALUE, "§aThere are 0 of a max of 20 players"),
        (4, PacketType.RESPONSE_VALUE, "x" * MAX_PAYLOAD_LEN),
    ],
)
def test_round_trip(request_id: int, packet_type: PacketType, payload: str):
    packet = Packet.from_bytes(encode(request_id, packet_type, payload))
    assert packet.request_id == request_id
    assert packet.type == packet_type
    assert packet.payload == payload


@pytest.mark.parametrize("payload", ["", "list", "é" * 100, "y" * 1000])
def test_length_invariant(payload: str):
    packet = Packet(1, PacketType.EXEC_COMMAND, payload)
    (length,) = struct.unpack_from("<i", packet.data)
    assert length == len(packet.data) - 4
    assert length == packet.length
    assert length == HEADER_LEN + len(payload.encode())


def test_exec_command_aliases_auth_response():
    assert PacketType.EXEC_COMMAND is PacketType.AUTH_RESPONSE
    assert PacketType(2) is PacketType.EXEC_COMMAND


def test_null_payload_rejected():
    with pytest.raises(InvalidPayload):
        encode(1, PacketType.EXEC_COMMAND, "say\x00hi")
    with pytest.raises(InvalidPayload):
        Packet(1, PacketType.AUTH, "\x00")


def test_payload_too_large():
    with pytest.raises(PayloadTooLarge):
        encode(1, PacketType.EXEC_COMMAND, "x" * (MAX_PAYLOAD_LEN + 1))

    # The limit applies to encoded bytes, not characters
    with pytest.raises(PayloadTooLarge):
        encode(1, PacketType.EXEC_COMMAND, "é" * (MAX_PAYLOAD_LEN // 2 + 1))

    # PayloadTooLarge is a kind of InvalidPayload
    with pytest.raises(InvalidPayload):
        encode(1, PacketType.EXEC_COMMAND, "x" * (MAX_PAYLOAD_LEN + 1))


@pytest.mark.parametrize("index", [-1, -2])
def test_malformed_terminator(index: int):
    data = bytearray(Packet(5, PacketType.RESPONSE_VALUE, "hello").data)
    data[index] = ord("!")
    with pytest.raises(MalformedPacket):
        Packet.from_bytes(bytes(data))


def test_embedded_null_in_response():
    with pytest.raises(MalformedPacket):
        Packet.from_bytes(raw_frame(1, 0, b"a\x00b\x00\x00"))


def test_length_mismatch():
    data = Packet(5, PacketType.RESPONSE_VALUE, "hello").data
    with pytest.raises(MalformedPacket):
        Packet.from_bytes(data[:-1])
    with pytest.raises(MalformedPacket):
        Packet.from_bytes(data + b"\x00")
    with pytest.raises(MalformedPacket):
        Packet.from_bytes(data[:2])


def test_length_bounds():
    with pytest.raises(MalformedPacket):
        Packet.parse_length(struct.pack("<i", HEADER_LEN - 1))
    with pytest.raises(MalformedPacket):
        Packet.parse_length(struct.pack("<i", HEADER_LEN + MAX_PAYLOAD_LEN + 1))
    with pytest.raises(MalformedPacket):
        Packet.parse_length(struct.pack("<i", -5))

    assert Packet.parse_length(struct.pack("<i", HEADER_LEN)) == HEADER_LEN


def test_unknown_packet_type():
    with pytest.raises(ProtocolViolation):
        Packet.from_bytes(raw_frame(1, 5, b"\x00\x00"))


def test_invalid_encoding():
    with pytest.raises(InvalidEncoding):
        Packet.from_bytes(raw_frame(1, 0, b"\xff\xfe\x00\x00"))

    # InvalidEncoding is a kind of MalformedPacket
    with pytest.raises(MalformedPacket):
        Packet.from_bytes(raw_frame(1, 0, b"\xc3\x00\x00"))


def test_equality():
    a = Packet(1, PacketType.EXEC_COMMAND, "seed")
    b = Packet.from_bytes(a.data)
    assert a == b
    assert hash(a) == hash(b)
    assert a != Packet(2, PacketType.EXEC_COMMAND, "seed")
    assert a != Packet(1, PacketType.AUTH, "seed")


@pytest.mark.parametrize("request_id", [2**31, -(2**31) - 1])
def test_request_id_out_of_range(request_id: int):
    with pytest.raises(InvalidPayload):
        encode(request_id, PacketType.EXEC_COMMAND, "seed")
    with pytest.raises(InvalidPayload):
        Packet(request_id, PacketType.EXEC_COMMAND, "seed")


def test_repr_shows_both_names_for_shared_type():
    text = repr(Packet(1, PacketType.EXEC_COMMAND, "seed"))
    assert "EXEC_COMMAND" in text
    assert "AUTH_RESPONSE" in text
    assert "RESPONSE_VALUE" in repr(Packet(1, PacketType.RESPONSE_VALUE))
    assert "AUTH" in repr(Packet(1, PacketType.AUTH, "pass"))
