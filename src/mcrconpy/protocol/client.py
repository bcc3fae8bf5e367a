import enum
import logging
from typing import Iterable

from ..errors import PayloadTooLarge, ProtocolViolation
from .base import RCONGenericProtocol
from .errors import InvalidStateError
from .events import ClientAuthEvent, ClientCommandEvent, ClientEvent
from .packet import MAX_OUTGOING_PAYLOAD_LEN, ENCODING, Packet, PacketType

log = logging.getLogger(__name__)

AUTH_FAILURE_ID = -1
"""The request ID returned by the server when a login attempt is refused."""


class ClientState(enum.Enum):
    """Defines the current state of the protocol."""

    UNAUTHENTICATED = enum.auto()
    """The client has not yet tried to log in."""
    AWAITING_AUTH_RESPONSE = enum.auto()
    """The client sent its password and is waiting for the server to respond."""
    AUTH_FAILED = enum.auto()
    """The server refused the password. The client may try to log in again."""
    LOGGED_IN = enum.auto()
    """The client is logged in and able to send commands."""
    AWAITING_COMMAND_RESPONSE = enum.auto()
    """The client sent a command and is collecting the server's response."""


class RCONClientProtocol(RCONGenericProtocol):
    """Implements the client-side portion of the protocol.

    The protocol does not mark the last packet of a response that the
    server split into multiple packets. To find the end of a response,
    every command is followed by an empty "sentinel" command using the
    same request ID. The server handles commands in order, so the empty
    response to the sentinel arrives right after the last fragment of
    the real response. The first packet of a response always belongs to
    the real command, even when it is empty, so only a later empty packet
    ends the response.

    This means every command causes the server to run an extra,
    empty command. It also means a real response containing an empty
    fragment cannot be told apart from the sentinel's response.

    :param max_outgoing_payload:
        The largest password or command in bytes that this protocol
        will send. Defaults to :py:data:`MAX_OUTGOING_PAYLOAD_LEN`.

    """

    MAX_REQUEST_ID = 2**31 - 1

    state: ClientState
    """The current state of the protocol."""

    _events: list[ClientEvent]
    """A list of events waiting to be collected."""
    _fragments: list[str]
    """The payloads received so far for the command in flight."""
    _pending_id: int | None
    """The request ID of the login attempt or command in flight."""
    _response_started: bool
    """Whether the first packet of the command's own response has arrived."""
    _auth_preamble_seen: bool
    _next_request_id: int
    _to_send: list[Packet]

    def __init__(
        self,
        *,
        max_outgoing_payload: int = MAX_OUTGOING_PAYLOAD_LEN,
    ) -> None:
        self.max_outgoing_payload = max_outgoing_payload
        self.reset()

    def __repr__(self) -> str:
        return "<{} {}, {} event(s), {} packet(s) to send>".format(
            type(self).__name__,
            self.state.name.lower().replace("_", " "),
            len(self._events),
            len(self._to_send),
        )

    # Required methods

    def receive_frame(self, data: bytes) -> Packet:
        """Handles a complete packet received from the server.

        :raises MalformedPacket: A malformed packet was provided.
        :raises ProtocolViolation:
            The packet was not expected in the current state.

        """
        return self.receive_packet(Packet.from_bytes(data))

    def events_received(self) -> list[ClientEvent]:
        current_events = self._events
        self._events = []
        return current_events

    def packets_to_send(self) -> list[Packet]:
        current_packets = self._to_send
        self._to_send = []
        return current_packets

    # Utility methods

    def authenticate(self, password: str) -> Packet:
        """Returns the packet needed to authenticate with the server.

        The packet is also queued in :py:meth:`packets_to_send()`.

        :raises InvalidStateError:
            This method can only be called before logging in
            or after a failed login attempt.
        :raises InvalidPayload: The password contained a null byte.
        :raises PayloadTooLarge: The password was too long.

        """
        self._assert_state(ClientState.UNAUTHENTICATED, ClientState.AUTH_FAILED)
        self._check_outgoing_payload(password, "password")

        packet = Packet(self._get_next_request_id(), PacketType.AUTH, password)
        self._to_send.append(packet)
        self._pending_id = packet.request_id
        self._auth_preamble_seen = False
        self.state = ClientState.AWAITING_AUTH_RESPONSE
        return packet

    def is_logged_in(self) -> bool:
        """Indicates if the server has accepted the client's password."""
        return self.state in (
            ClientState.LOGGED_IN,
            ClientState.AWAITING_COMMAND_RESPONSE,
        )

    def receive_packet(self, packet: Packet) -> Packet:
        """Handles a packet that was already parsed.

        :raises ProtocolViolation:
            The packet was not expected in the current state.

        """
        events, to_send = self._handle_packet(packet)
        self._events.extend(events)
        self._to_send.extend(to_send)

        return packet

    def reset(self) -> None:
        """Resets the protocol to the beginning state.

        This should be invoked when a new connection is made.

        """
        self._events = []
        self._fragments = []
        self._pending_id = None
        self._response_started = False
        self._auth_preamble_seen = False
        self._next_request_id = 0
        self.state = ClientState.UNAUTHENTICATED
        self._to_send = []

    def send_command(self, command: str) -> Packet:
        """Returns the packet for sending a command.

        Both the command packet and its sentinel are queued in
        :py:meth:`packets_to_send()`. Each invocation of this method
        uses a new request ID.

        :raises InvalidStateError:
            This method can only be called after being logged in
            and while no other command is in flight.
        :raises InvalidPayload: The command contained a null byte.
        :raises PayloadTooLarge: The command was too long.

        """
        self._assert_state(ClientState.LOGGED_IN)
        self._check_outgoing_payload(command, "command")

        request_id = self._get_next_request_id()
        packet = Packet(request_id, PacketType.EXEC_COMMAND, command)
        sentinel = Packet(request_id, PacketType.EXEC_COMMAND, "")
        self._to_send.extend((packet, sentinel))

        self._pending_id = request_id
        self._fragments = []
        self._response_started = False
        self.state = ClientState.AWAITING_COMMAND_RESPONSE
        return packet

    def _assert_state(self, *states: ClientState) -> None:
        if self.state not in states:
            raise InvalidStateError(self.state, states)

    def _check_outgoing_payload(self, payload: str, name: str) -> None:
        size = len(payload.encode(ENCODING))
        if size > self.max_outgoing_payload:
            raise PayloadTooLarge(
                f"{name} must be no longer than {self.max_outgoing_payload} bytes"
            )

    def _get_next_request_id(self) -> int:
        # Wrapping to 0 means -1 is never used, so authentication
        # failures can always be identified
        request_id = self._next_request_id
        self._next_request_id = (request_id + 1) % (self.MAX_REQUEST_ID + 1)
        return request_id

    def _handle_packet(
        self,
        packet: Packet,
    ) -> tuple[Iterable[ClientEvent], Iterable[Packet]]:
        """Handles the given :py:class:`Packet`.

        :returns: A tuple containing the events and packets to send.
        :raises ProtocolViolation: The packet was not expected.

        """
        if self.state is ClientState.AWAITING_AUTH_RESPONSE:
            return self._handle_auth_packet(packet)
        elif self.state is ClientState.AWAITING_COMMAND_RESPONSE:
            return self._handle_command_packet(packet)

        raise ProtocolViolation(
            f"unexpected packet received while {self.state.name.lower()}: {packet!r}"
        )

    def _handle_auth_packet(
        self,
        packet: Packet,
    ) -> tuple[Iterable[ClientEvent], Iterable[Packet]]:
        """Specifically handles the response to a login attempt.

        :returns: A tuple containing the events and packets to send.
        :raises ProtocolViolation: The packet was not expected.

        """
        if packet.request_id == AUTH_FAILURE_ID and packet.type in (
            PacketType.AUTH_RESPONSE,
            PacketType.RESPONSE_VALUE,
        ):
            self._pending_id = None
            self.state = ClientState.AUTH_FAILED
            return (ClientAuthEvent(False),), ()

        elif (
            packet.type is PacketType.RESPONSE_VALUE
            and packet.payload == ""
            and not self._auth_preamble_seen
        ):
            # Some servers send an empty response before the real one
            log.debug(f"discarding empty response before login (id {packet.request_id})")
            self._auth_preamble_seen = True
            return (), ()

        elif (
            packet.request_id == self._pending_id
            and packet.type is PacketType.AUTH_RESPONSE
        ):
            self._pending_id = None
            self.state = ClientState.LOGGED_IN
            return (ClientAuthEvent(True),), ()

        raise ProtocolViolation(
            f"unexpected login response (expected ID {self._pending_id}): {packet!r}"
        )

    def _handle_command_packet(
        self,
        packet: Packet,
    ) -> tuple[Iterable[ClientEvent], Iterable[Packet]]:
        """Specifically handles a packet for the command in flight.

        :returns: A tuple containing the events and packets to send.
        :raises ProtocolViolation: The packet was not expected.

        """
        request_id = self._pending_id
        assert request_id is not None

        if packet.request_id == AUTH_FAILURE_ID:
            raise ProtocolViolation("client became deauthenticated between packets")
        elif packet.request_id != request_id:
            raise ProtocolViolation(
                f"unexpected command response ID {packet.request_id} "
                f"(expected {request_id})"
            )
        elif packet.type is not PacketType.RESPONSE_VALUE:
            raise ProtocolViolation(
                f"unexpected {packet.type.name} packet in command response "
                f"(ID {request_id})"
            )

        # The server always answers the real command, so its first packet
        # belongs to the response even when empty
        if packet.payload or not self._response_started:
            self._response_started = True
            self._fragments.append(packet.payload)
            return (), ()

        # The empty response to our sentinel marks the end of the response
        message = "".join(self._fragments)
        self._fragments = []
        self._pending_id = None
        self._response_started = False
        self.state = ClientState.LOGGED_IN

        return (ClientCommandEvent(request_id, message),), ()
