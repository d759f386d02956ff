"""Client for the Source engine RCON protocol."""

from .connection import Connection, Settings
from .console import RemoteConsole
from .const import ClientPacketKind, ServerPacketKind
from .errors import (
    AlreadyAuthenticatedError,
    AlreadyConnectedError,
    AuthenticationFailedError,
    CommandEmptyError,
    CommandTooLongError,
    ConnectionClosedError,
    FramingError,
    InvalidAuthResponseError,
    InvalidPacketSizeError,
    InvalidPacketTerminatorError,
    InvalidPacketTypeError,
    NotAuthenticatedError,
    NotConnectedError,
    PacketIdMismatchError,
    PacketTooLargeError,
    ProtocolError,
    RconError,
    UsageError,
)
from .packet import ClientPacket, ServerPacket

__all__ = [
    "AlreadyAuthenticatedError",
    "AlreadyConnectedError",
    "AuthenticationFailedError",
    "ClientPacket",
    "ClientPacketKind",
    "CommandEmptyError",
    "CommandTooLongError",
    "Connection",
    "ConnectionClosedError",
    "FramingError",
    "InvalidAuthResponseError",
    "InvalidPacketSizeError",
    "InvalidPacketTerminatorError",
    "InvalidPacketTypeError",
    "NotAuthenticatedError",
    "NotConnectedError",
    "PacketIdMismatchError",
    "PacketTooLargeError",
    "ProtocolError",
    "RconError",
    "RemoteConsole",
    "ServerPacket",
    "ServerPacketKind",
    "Settings",
    "UsageError",
]
