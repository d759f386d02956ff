# source_rcon/const.py
from __future__ import annotations

import enum


class ClientPacketKind(enum.IntEnum):
    """Packet kinds a client may put on the wire (SERVERDATA_*)."""

    # Reserved for multi-packet response checking; never sent.
    CHECK_RESPONSE = 0
    EXECUTE_COMMAND = 2
    AUTH = 3


class ServerPacketKind(enum.IntEnum):
    """Packet kinds a server may reply with."""

    RESPONSE_VALUE = 0
    AUTH_RESPONSE = 2
    # Rust servers send this undocumented kind; it is read and dropped.
    RUST_UNDOCUMENTED = 4


SIZE_FORMAT = "<i"
HEADER_FORMAT = "<ii"  # id, kind
SIZE_FIELD_SIZE = 4
PACKET_HEADER_SIZE = 8
PACKET_TERMINATOR = b"\x00\x00"
PACKET_TERMINATOR_SIZE = len(PACKET_TERMINATOR)

PACKET_MAXIMUM_SIZE = 4096  # excludes the leading size field
PACKET_MAXIMUM_BODY_SIZE = PACKET_MAXIMUM_SIZE - PACKET_HEADER_SIZE - PACKET_TERMINATOR_SIZE
PACKET_MINIMUM_SIZE = PACKET_HEADER_SIZE + PACKET_TERMINATOR_SIZE
RECV_CHUNK_SIZE = 65536  # upper bound for a single recv(), whatever size the peer declares

# Oversized replies are never reassembled, so requests stay well under the limit.
COMMAND_MAXIMUM_SIZE = PACKET_MAXIMUM_BODY_SIZE // 4

AUTH_FAILED_ID = -1
INT32_MAX = 2**31 - 1

DEFAULT_PORT = 27015
DEFAULT_DIAL_TIMEOUT = 5.0     # seconds
DEFAULT_READ_DEADLINE = 5.0
DEFAULT_WRITE_DEADLINE = 5.0

ENCODING = "utf-8"
