from .client import (
    ClientConfig as ClientConfig,
    RCONClient as RCONClient,
    parse_address as parse_address,
)
from .errors import (
    AuthenticationFailed as AuthenticationFailed,
    ConnectionClosed as ConnectionClosed,
    InvalidEncoding as InvalidEncoding,
    InvalidPayload as InvalidPayload,
    LoginFailure as LoginFailure,
    MalformedPacket as MalformedPacket,
    PayloadTooLarge as PayloadTooLarge,
    ProtocolViolation as ProtocolViolation,
    RCONError as RCONError,
    RCONTimeout as RCONTimeout,
)
from .io import (
    ByteStream as ByteStream,
    decode as decode,
    open_connection as open_connection,
    read_exactly as read_exactly,
    read_frame as read_frame,
    write_packet as write_packet,
)
from .protocol import (
    DEFAULT_PORT as DEFAULT_PORT,
    MAX_OUTGOING_PAYLOAD_LEN as MAX_OUTGOING_PAYLOAD_LEN,
    MAX_PAYLOAD_LEN as MAX_PAYLOAD_LEN,
    ClientAuthEvent as ClientAuthEvent,
    ClientCommandEvent as ClientCommandEvent,
    ClientEvent as ClientEvent,
    ClientState as ClientState,
    InvalidStateError as InvalidStateError,
    Packet as Packet,
    PacketType as PacketType,
    RCONClientProtocol as RCONClientProtocol,
    RCONGenericProtocol as RCONGenericProtocol,
    encode as encode,
)


def _get_version() -> str:
    from importlib.metadata import version

    return version("mcrconpy")


__version__ = _get_version()
