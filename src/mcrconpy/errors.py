class RCONError(Exception):
    """The base class for RCON errors."""


class ConnectionClosed(RCONError, ConnectionError):
    """Raised when the stream ended before an exchange could finish.

    The client is unusable after this error.

    """


class RCONTimeout(RCONError, TimeoutError):
    """Raised when the stream's deadline elapsed while waiting for data.

    The state of the connection is undefined afterwards, so the client
    treats this as fatal.

    """


class MalformedPacket(RCONError, ValueError):
    """Raised when data received from the server does not match the packet format."""


class InvalidEncoding(MalformedPacket):
    """Raised when a packet's payload could not be decoded as text."""


class InvalidPayload(RCONError, ValueError):
    """Raised when a payload cannot be framed into a packet.

    Nothing is sent to the server when this is raised.

    """


class PayloadTooLarge(InvalidPayload):
    """Raised when a payload exceeds the maximum packet size."""


class LoginFailure(RCONError):
    """Raised when the client could not log into the RCON server."""


class AuthenticationFailed(LoginFailure):
    """Raised when the password given to the RCON server was incorrect."""


class ProtocolViolation(RCONError):
    """Raised when the server sent a packet that was not expected at this point
    of the exchange, such as an unknown request ID or packet type.
    """
