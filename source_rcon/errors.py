# source_rcon/errors.py
from __future__ import annotations

from .const import COMMAND_MAXIMUM_SIZE, PACKET_MAXIMUM_SIZE


class RconError(Exception):
    """Base class for everything this package raises on purpose."""


# ── transport ───────────────────────────────────────────────────────────────


class ConnectionClosedError(RconError, ConnectionError):
    def __init__(self, expected: int, got: int):
        super().__init__(f"connection closed after {got} of {expected} bytes")
        self.expected = expected
        self.got = got


# ── framing ─────────────────────────────────────────────────────────────────


class FramingError(RconError):
    """The byte stream does not hold a well-formed packet.

    The connection should not be trusted after one of these.
    """


class InvalidPacketTerminatorError(FramingError):
    def __init__(self, tail: bytes):
        super().__init__(f"the packet was not terminated correctly (got {tail!r})")
        self.tail = tail


class InvalidPacketTypeError(FramingError):
    def __init__(self, kind: int):
        super().__init__(f"packet type is invalid: {kind}")
        self.kind = kind


class InvalidPacketSizeError(FramingError):
    def __init__(self, size: int):
        super().__init__(f"packet size is invalid: {size}")
        self.size = size


# ── protocol negotiation ────────────────────────────────────────────────────


class ProtocolError(RconError):
    """The server answered, but not the way the handshake expects."""


class InvalidAuthResponseError(ProtocolError):
    def __init__(self, kind: int):
        super().__init__(
            f"the server responded with an invalid packet type for an auth packet: {kind}"
        )
        self.kind = kind


class AuthenticationFailedError(ProtocolError):
    def __init__(self):
        super().__init__("the authentication attempt with the server failed")


class PacketIdMismatchError(ProtocolError):
    def __init__(self, expected: int, got: int):
        super().__init__(
            f"the server replied with packet id {got}, expected {expected}"
        )
        self.expected = expected
        self.got = got


# ── usage ───────────────────────────────────────────────────────────────────


class UsageError(RconError):
    """Rejected before any I/O happened."""


class CommandEmptyError(UsageError):
    def __init__(self):
        super().__init__("the command must not be a blank string")


class CommandTooLongError(UsageError):
    def __init__(self, size: int):
        super().__init__(
            f"the supplied command was too long ({size} bytes, max {COMMAND_MAXIMUM_SIZE})"
        )
        self.size = size


class PacketTooLargeError(UsageError, ValueError):
    def __init__(self, size: int):
        super().__init__(f"packet too large: {size} bytes (max {PACKET_MAXIMUM_SIZE})")
        self.size = size


class AlreadyConnectedError(UsageError):
    def __init__(self):
        super().__init__("remote console is already connected")


class AlreadyAuthenticatedError(UsageError):
    def __init__(self):
        super().__init__("remote console is already authenticated")


class NotConnectedError(UsageError):
    def __init__(self):
        super().__init__("remote console is not connected")


class NotAuthenticatedError(UsageError):
    def __init__(self):
        super().__init__("remote console is not authenticated")
