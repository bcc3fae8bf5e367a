"""Provides classes to be used as facades for :py:class:`Packet` objects."""
from dataclasses import dataclass


class Event:
    """The base class for events produced by :py:class:`RCONGenericProtocol`
    subclasses.
    """


class ClientEvent(Event):
    """An event produced by the :py:class:`RCONClientProtocol` subclass."""


@dataclass
class ClientAuthEvent(ClientEvent):
    """Indicates if an authentication request was successful."""

    success: bool
    """``True`` if the client was authenticated, ``False`` otherwise."""


@dataclass
class ClientCommandEvent(ClientEvent):
    """Represents the response to a given command."""

    request_id: int
    """The request ID of the command this is responding to."""
    message: str
    """The command's full response from the server.

    If the server split its response across multiple packets,
    this is every fragment joined together in the order they arrived.

    """
