"""Provides blocking I/O over a byte stream for the Sans-IO protocol."""
import contextlib
import errno
import logging
import socket
from typing import Iterator, Protocol

from .errors import ConnectionClosed, RCONError, RCONTimeout
from .protocol import Packet

__all__ = (
    "ByteStream",
    "decode",
    "open_connection",
    "read_exactly",
    "read_frame",
    "write_packet",
)

log = logging.getLogger(__name__)


class ByteStream(Protocol):
    """A bidirectional, ordered stream of bytes.

    :py:class:`socket.socket` objects satisfy this protocol.
    A read deadline may be implemented by raising :py:exc:`TimeoutError`
    from :py:meth:`recv()`.

    """

    def recv(self, bufsize: int, /) -> bytes:
        """Reads up to ``bufsize`` bytes, blocking until at least one byte
        is available. An empty bytes object means the stream has ended.
        """
        ...

    def sendall(self, data: bytes, /) -> None:
        """Writes all of the given data, blocking until it is sent."""
        ...

    def close(self) -> None:
        """Closes the stream."""
        ...


@contextlib.contextmanager
def _translate_errors(action: str) -> Iterator[None]:
    try:
        yield
    except RCONError:
        raise
    except TimeoutError as e:
        raise RCONTimeout(f"timed out while {action}") from e
    except (BrokenPipeError, ConnectionAbortedError, ConnectionResetError) as e:
        raise ConnectionClosed(f"connection lost while {action}") from e
    except OSError as e:
        if e.errno == errno.EBADF:
            raise ConnectionClosed(f"stream was closed while {action}") from e
        raise


def open_connection(
    host: str,
    port: int,
    *,
    connection_timeout: float | None = None,
    read_timeout: float | None = None,
) -> socket.socket:
    """Opens a TCP connection to the given address.

    :param connection_timeout:
        The number of seconds to wait for the connection to be established,
        or ``None`` to wait indefinitely.
    :param read_timeout:
        The number of seconds each blocking read or write may take
        on the returned socket, or ``None`` to wait indefinitely.
    :raises RCONTimeout: The connection could not be established in time.
    :raises OSError: An error occurred while connecting to the server.

    """
    log.debug(f"connecting to {host}:{port}")
    with _translate_errors(f"connecting to {host}:{port}"):
        sock = socket.create_connection((host, port), timeout=connection_timeout)

    sock.settimeout(read_timeout)
    return sock


def read_exactly(stream: ByteStream, n: int) -> bytes:
    """Reads exactly ``n`` bytes from the stream.

    :raises ConnectionClosed: The stream ended before enough data was read.
    :raises RCONTimeout: The stream's deadline elapsed.

    """
    buffer = bytearray()
    with _translate_errors("reading from the stream"):
        while len(buffer) < n:
            chunk = stream.recv(n - len(buffer))
            if not chunk:
                raise ConnectionClosed(
                    f"stream ended after {len(buffer)} of {n} bytes"
                )
            buffer.extend(chunk)

    return bytes(buffer)


def read_frame(stream: ByteStream) -> bytes:
    """Reads the bytes of one complete packet, including its length prefix.

    :raises ConnectionClosed: The stream ended before the packet was read.
    :raises MalformedPacket: The length prefix was out of bounds.
    :raises RCONTimeout: The stream's deadline elapsed.

    """
    prefix = read_exactly(stream, 4)
    length = Packet.parse_length(prefix)
    return prefix + read_exactly(stream, length)


def decode(stream: ByteStream) -> Packet:
    """Reads and parses one packet from the stream.

    :raises ConnectionClosed: The stream ended before the packet was read.
    :raises MalformedPacket: The packet did not match the packet format.
    :raises InvalidEncoding: The packet's payload was not valid text.
    :raises ProtocolViolation: The packet type was unknown.
    :raises RCONTimeout: The stream's deadline elapsed.

    """
    return Packet.from_bytes(read_frame(stream))


def write_packet(stream: ByteStream, packet: Packet) -> None:
    """Writes a packet to the stream.

    :raises ConnectionClosed: The stream was closed.
    :raises RCONTimeout: The stream's deadline elapsed.

    """
    with _translate_errors("writing to the stream"):
        stream.sendall(packet.data)
    log.debug(f"sent {packet!r}")
