from typing import Type, TypeVar

from mcrconpy.protocol import (
    AUTH_FAILURE_ID,
    ClientAuthEvent,
    ClientEvent,
    ClientState,
    Packet,
    PacketType,
    RCONClientProtocol,
    RCONGenericProtocol,
)

expected_password = "foobar2000"
incorrect_password = "abc123"

T = TypeVar("T")


def respond(client: RCONClientProtocol, *packets: Packet) -> list[ClientEvent]:
    """Delivers the given server packets to the client and returns
    the events received by the client.
    """
    for packet in packets:
        client.receive_frame(packet.data)

    return client.events_received()


def authenticate(
    client: RCONClientProtocol,
    password: str,
    *,
    should_succeed: bool = True,
) -> None:
    """Authenticates the client, replying the way a Minecraft server would."""
    packet = client.authenticate(password)
    assert client.packets_to_send() == [packet]

    if should_succeed:
        reply = Packet(packet.request_id, PacketType.AUTH_RESPONSE)
    else:
        reply = Packet(AUTH_FAILURE_ID, PacketType.AUTH_RESPONSE)

    events = respond(client, reply)
    assert len(events) == 1
    event = events[0]
    assert isinstance(event, ClientAuthEvent)

    if should_succeed:
        assert client.state == ClientState.LOGGED_IN
        assert event.success
    else:
        assert client.state == ClientState.AUTH_FAILED
        assert not event.success


def first_and_only_event(proto_a: RCONGenericProtocol, event_cls: Type[T]) -> T:
    events = proto_a.events_received()
    assert len(events) == 1
    first_event = events[0]
    assert isinstance(first_event, event_cls)
    return first_event
