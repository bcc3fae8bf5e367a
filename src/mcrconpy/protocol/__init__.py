"""Contains a Sans-IO implementation of the Minecraft RCON protocol.

Suggested reading about sansio:
    https://fractalideas.com/blog/sans-io-when-rubber-meets-road/
    https://sans-io.readthedocs.io/index.html

"""

from .base import RCONGenericProtocol as RCONGenericProtocol
from .client import (
    AUTH_FAILURE_ID as AUTH_FAILURE_ID,
    ClientState as ClientState,
    RCONClientProtocol as RCONClientProtocol,
)
from .errors import InvalidStateError as InvalidStateError
from .events import (
    ClientAuthEvent as ClientAuthEvent,
    ClientCommandEvent as ClientCommandEvent,
    ClientEvent as ClientEvent,
    Event as Event,
)
from .packet import (
    DEFAULT_PORT as DEFAULT_PORT,
    HEADER_LEN as HEADER_LEN,
    MAX_OUTGOING_PAYLOAD_LEN as MAX_OUTGOING_PAYLOAD_LEN,
    MAX_PAYLOAD_LEN as MAX_PAYLOAD_LEN,
    Packet as Packet,
    PacketType as PacketType,
    encode as encode,
)
