import contextlib
import logging
from dataclasses import dataclass
from typing import Iterator

from .errors import (
    AuthenticationFailed,
    ConnectionClosed,
    RCONError,
)
from .io import ByteStream, open_connection, read_frame, write_packet
from .protocol import (
    DEFAULT_PORT,
    MAX_OUTGOING_PAYLOAD_LEN,
    ClientAuthEvent,
    ClientCommandEvent,
    ClientEvent,
    RCONClientProtocol,
)

__all__ = (
    "Address",
    "ClientConfig",
    "RCONClient",
    "parse_address",
)

log = logging.getLogger(__name__)

Address = str | tuple[str, int]


def parse_address(address: Address) -> tuple[str, int]:
    """Parses an address into a host and port.

    The address can be given as ``"host"``, ``"host:port"``, ``"[ipv6]:port"``
    or a ``(host, port)`` tuple. When omitted, the port defaults to
    :py:data:`DEFAULT_PORT`.

    :raises ValueError: The port was not a valid integer.

    """
    if isinstance(address, tuple):
        host, port = address
        return host, int(port)

    host, sep, port = address.rpartition(":")
    if not sep:
        return address, DEFAULT_PORT
    elif host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    elif ":" in host:
        # Bare IPv6 address without a port
        return address, DEFAULT_PORT

    try:
        port_number = int(port)
    except ValueError:
        raise ValueError(f"invalid port in address {address!r}") from None

    if port_number not in range(65536):
        raise ValueError(f"port must be within 0-65535, not {port_number}")

    return host, port_number


@dataclass
class ClientConfig:
    """Specifies the configuration used for the :py:class:`RCONClient`."""

    connection_timeout: float | None = 10.0
    """
    The amount of time in seconds to wait for the TCP connection to be
    established, or ``None`` to wait indefinitely.
    """
    read_timeout: float | None = None
    """
    The amount of time in seconds that a single read or write may block
    before :py:exc:`RCONTimeout` is raised, or ``None`` to wait indefinitely.
    """
    max_outgoing_payload: int = MAX_OUTGOING_PAYLOAD_LEN
    """
    The largest password or command in bytes that the client will send.
    Vanilla servers drop the connection when given anything longer than
    :py:data:`MAX_OUTGOING_PAYLOAD_LEN`.
    """


class RCONClient:
    """A blocking client for Minecraft's RCON protocol.

    The client exclusively owns its stream and is not thread-safe.
    Any I/O or protocol error closes the stream, after which the client
    can no longer be used.

    Example usage::

        with RCONClient.connect("localhost:25575") as client:
            client.log_in("SuperSecurePassword")
            print(client.send_command("seed"))

    :param stream:
        The connected stream to communicate over.
    :param config:
        The configuration to use. Defaults to an instance of
        :py:class:`ClientConfig`.
    :param protocol:
        The protocol to use for handling packets.
        Defaults to an instance of :py:class:`RCONClientProtocol`.

    """

    _stream: ByteStream | None

    def __init__(
        self,
        stream: ByteStream,
        *,
        config: ClientConfig | None = None,
        protocol: RCONClientProtocol | None = None,
    ):
        if config is None:
            config = ClientConfig()
        if protocol is None:
            protocol = RCONClientProtocol(
                max_outgoing_payload=config.max_outgoing_payload,
            )

        self.config = config
        self.protocol = protocol
        self._stream = stream

    def __repr__(self) -> str:
        return "<{} connected={} logged_in={}>".format(
            type(self).__name__,
            self.is_connected(),
            self.is_logged_in(),
        )

    def __enter__(self) -> "RCONClient":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    @classmethod
    def connect(
        cls,
        address: Address,
        *,
        config: ClientConfig | None = None,
    ) -> "RCONClient":
        """Connects to a server at the given address.

        See :py:func:`parse_address()` for the accepted address formats.

        :raises RCONTimeout: The connection could not be established in time.
        :raises OSError:
            An error occurred while connecting to the server. Most notably,
            :py:exc:`ConnectionRefusedError` is raised if the server is not
            running or RCON is not enabled.

        """
        if config is None:
            config = ClientConfig()

        host, port = parse_address(address)
        stream = open_connection(
            host,
            port,
            connection_timeout=config.connection_timeout,
            read_timeout=config.read_timeout,
        )
        log.info(f"connected to {host}:{port}")
        return cls(stream, config=config)

    def close(self) -> None:
        """Closes the connection.

        This method is idempotent and can be called multiple times consecutively.

        """
        if self._stream is None:
            return

        stream, self._stream = self._stream, None
        stream.close()
        self.protocol.reset()
        log.debug("connection closed")

    def is_connected(self) -> bool:
        """Indicates if the client still has an open stream."""
        return self._stream is not None

    def is_logged_in(self) -> bool:
        """Indicates if the client is currently authenticated with the server."""
        return self.is_connected() and self.protocol.is_logged_in()

    def log_in(self, password: str) -> None:
        """Attempts to log into the server with the given password.

        If the password is refused, the client stays connected and
        this method may be called again, though the server may decide
        to close the connection.

        :raises AuthenticationFailed: The server refused the password.
        :raises ConnectionClosed:
            The client is not connected or the stream ended during login.
        :raises InvalidStateError:
            The client is already logged in. Nothing is sent to the server.
        :raises InvalidPayload:
            The password contained a null byte. Nothing is sent to the server.
        :raises PayloadTooLarge:
            The password was too long. Nothing is sent to the server.
        :raises ProtocolViolation: The server sent an unexpected response.
        :raises RCONTimeout: The server did not respond in time.

        """
        stream = self._get_stream()
        self.protocol.authenticate(password)

        with self._close_on_error():
            self._flush(stream)
            event = self._wait_for_event(stream)

        assert isinstance(event, ClientAuthEvent)
        if not event.success:
            log.warning("password authentication was denied")
            raise AuthenticationFailed("tried to log in with incorrect password")

        log.info("successfully logged in")

    def send_command(self, command: str) -> str:
        """Sends a command to the server and returns its full response.

        The response is not interpreted in any way. A successful return only
        means the server received the command and responded to it.

        An empty command is sent after every command to detect the end
        of responses that the server split across multiple packets.

        :param command: The command to send.
        :returns: The server's response as a string.
        :raises ConnectionClosed:
            The client is not connected or the stream ended
            before the response was complete.
        :raises InvalidStateError:
            The client is not logged in. Nothing is sent to the server.
        :raises InvalidPayload:
            The command contained a null byte. Nothing is sent to the server.
        :raises PayloadTooLarge:
            The command was too long. Nothing is sent to the server.
        :raises MalformedPacket: The server sent a corrupt packet.
        :raises ProtocolViolation: The server sent an unexpected packet.
        :raises RCONTimeout: The server did not respond in time.

        """
        stream = self._get_stream()
        self.protocol.send_command(command)

        with self._close_on_error():
            self._flush(stream)
            event = self._wait_for_event(stream)

        assert isinstance(event, ClientCommandEvent)
        return event.message

    def _get_stream(self) -> ByteStream:
        if self._stream is None:
            raise ConnectionClosed("client is not connected")
        return self._stream

    @contextlib.contextmanager
    def _close_on_error(self) -> Iterator[None]:
        try:
            yield
        except (RCONError, OSError) as e:
            log.error(f"closing connection due to error: {e}")
            self.close()
            raise

    def _flush(self, stream: ByteStream) -> None:
        for packet in self.protocol.packets_to_send():
            write_packet(stream, packet)

    def _wait_for_event(self, stream: ByteStream) -> ClientEvent:
        while True:
            events = self.protocol.events_received()
            if events:
                assert len(events) == 1
                return events[0]

            packet = self.protocol.receive_frame(read_frame(stream))
            log.debug(f"received {packet!r}")
