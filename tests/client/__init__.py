import errno
from typing import Callable, Iterable

from mcrconpy import Packet, PacketType
from mcrconpy.protocol import AUTH_FAILURE_ID

expected_password = "foobar2000"
incorrect_password = "abc123"

Reply = Packet | bytes


class FakeServer:
    """Replies to packets the way a Minecraft server would.

    :param responses:
        A mapping of commands to the payloads of each packet
        in their response.
    :param preamble:
        If ``True``, an empty response is sent before every login response.

    """

    def __init__(
        self,
        *,
        password: str = expected_password,
        responses: dict[str, list[str]] | None = None,
        preamble: bool = False,
    ):
        self.password = password
        self.responses = responses or {}
        self.preamble = preamble

    def __call__(self, packet: Packet) -> list[Reply]:
        if packet.type is PacketType.AUTH:
            return self.handle_login(packet)
        return self.handle_command(packet)

    def handle_login(self, packet: Packet) -> list[Reply]:
        replies: list[Reply] = []
        if self.preamble:
            replies.append(Packet(packet.request_id, PacketType.RESPONSE_VALUE))

        if packet.payload == self.password:
            replies.append(Packet(packet.request_id, PacketType.AUTH_RESPONSE))
        else:
            replies.append(Packet(AUTH_FAILURE_ID, PacketType.AUTH_RESPONSE))
        return replies

    def handle_command(self, packet: Packet) -> list[Reply]:
        if not packet.payload:
            fragments = [""]
        else:
            default = [f"Unknown command: {packet.payload}"]
            fragments = self.responses.get(packet.payload, default)

        return [
            Packet(packet.request_id, PacketType.RESPONSE_VALUE, fragment)
            for fragment in fragments
        ]


class ScriptedStream:
    """An in-memory stream that passes every packet written to it to
    a handler and makes the handler's replies available for reading.

    Reads return at most ``chunk_size`` bytes at a time to exercise
    partial reads. Once every reply has been read, the stream ends.

    """

    def __init__(
        self,
        handler: Callable[[Packet], Iterable[Reply]],
        *,
        chunk_size: int = 3,
    ):
        self.handler = handler
        self.chunk_size = chunk_size
        self.closed = False
        self.sent: list[Packet] = []
        self._incoming = bytearray()
        self._outgoing = bytearray()

    def recv(self, bufsize: int) -> bytes:
        self._check_closed()
        n = min(bufsize, self.chunk_size)
        chunk = bytes(self._incoming[:n])
        del self._incoming[:n]
        return chunk

    def sendall(self, data: bytes) -> None:
        self._check_closed()
        self._outgoing.extend(data)

        while len(self._outgoing) >= 4:
            length = int.from_bytes(self._outgoing[:4], "little", signed=True)
            if len(self._outgoing) < 4 + length:
                break

            frame = bytes(self._outgoing[: 4 + length])
            del self._outgoing[: 4 + length]

            packet = Packet.from_bytes(frame)
            self.sent.append(packet)
            for reply in self.handler(packet):
                if isinstance(reply, Packet):
                    reply = reply.data
                self._incoming.extend(reply)

    def close(self) -> None:
        self.closed = True

    def _check_closed(self) -> None:
        if self.closed:
            raise OSError(errno.EBADF, "Bad file descriptor")
