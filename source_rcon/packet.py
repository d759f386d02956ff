# source_rcon/packet.py
from __future__ import annotations

import io
import struct
from dataclasses import dataclass
from typing import Protocol

from .const import (
    ENCODING,
    HEADER_FORMAT,
    PACKET_HEADER_SIZE,
    PACKET_MAXIMUM_SIZE,
    PACKET_MINIMUM_SIZE,
    PACKET_TERMINATOR,
    PACKET_TERMINATOR_SIZE,
    SIZE_FIELD_SIZE,
    SIZE_FORMAT,
    RECV_CHUNK_SIZE,
    ClientPacketKind,
    ServerPacketKind,
)
from .errors import (
    ConnectionClosedError,
    InvalidPacketSizeError,
    InvalidPacketTerminatorError,
    InvalidPacketTypeError,
    PacketTooLargeError,
)


class ByteSource(Protocol):
    def recv(self, bufsize: int) -> bytes: ...


class ByteSink(Protocol):
    def sendall(self, data: bytes) -> None: ...


def read_exact(source: ByteSource, n: int) -> bytes:
    """Read exactly ``n`` bytes, looping over short reads."""
    data = bytearray()
    while len(data) < n:
        chunk = source.recv(min(n - len(data), RECV_CHUNK_SIZE))
        if not chunk:
            raise ConnectionClosedError(n, len(data))
        data += chunk
    return bytes(data)


@dataclass(frozen=True, slots=True)
class ClientPacket:
    id: int
    kind: ClientPacketKind
    body: str = ""

    @property
    def payload(self) -> bytes:
        return self.body.encode(ENCODING)

    @property
    def size(self) -> int:
        """Wire size, not counting the leading size field itself."""
        return PACKET_HEADER_SIZE + len(self.payload) + PACKET_TERMINATOR_SIZE

    def to_bytes(self) -> bytes:
        payload = self.payload
        size = PACKET_HEADER_SIZE + len(payload) + PACKET_TERMINATOR_SIZE
        if size > PACKET_MAXIMUM_SIZE:
            raise PacketTooLargeError(size)
        return (
            struct.pack(SIZE_FORMAT, size)
            + struct.pack(HEADER_FORMAT, self.id, int(self.kind))
            + payload
            + PACKET_TERMINATOR
        )

    def write_to(self, sink: ByteSink) -> int:
        raw = self.to_bytes()
        sink.sendall(raw)
        return len(raw)


@dataclass(frozen=True, slots=True)
class ServerPacket:
    size: int
    id: int
    kind: ServerPacketKind
    body_bytes: bytes  # terminator included

    @property
    def body(self) -> str:
        return self.body_bytes[:-PACKET_TERMINATOR_SIZE].decode(ENCODING, "ignore")

    @property
    def ignorable(self) -> bool:
        return self.kind is ServerPacketKind.RUST_UNDOCUMENTED

    @classmethod
    def read_from(cls, source: ByteSource) -> "ServerPacket":
        """Decode one packet from ``source``.

        A Rust type-4 packet is returned like any other, with ``ignorable``
        set, and it is up to the caller to drop it. Unknown kinds and bad
        terminators raise :class:`~source_rcon.errors.FramingError`
        subclasses.
        """
        (size,) = struct.unpack(SIZE_FORMAT, read_exact(source, SIZE_FIELD_SIZE))
        if size < PACKET_MINIMUM_SIZE:
            raise InvalidPacketSizeError(size)

        packet_id, kind = struct.unpack(HEADER_FORMAT, read_exact(source, PACKET_HEADER_SIZE))
        body_bytes = read_exact(source, size - PACKET_HEADER_SIZE)

        tail = body_bytes[-PACKET_TERMINATOR_SIZE:]
        if tail != PACKET_TERMINATOR:
            raise InvalidPacketTerminatorError(tail)

        try:
            server_kind = ServerPacketKind(kind)
        except ValueError:
            raise InvalidPacketTypeError(kind) from None

        return cls(size=size, id=packet_id, kind=server_kind, body_bytes=body_bytes)

    @classmethod
    def from_bytes(cls, raw: bytes) -> "ServerPacket":
        buf = _BufferSource(raw)
        packet = cls.read_from(buf)
        if buf.remaining:
            raise InvalidPacketSizeError(packet.size)
        return packet


class _BufferSource:
    def __init__(self, raw: bytes):
        self._buf = io.BytesIO(raw)
        self._len = len(raw)

    def recv(self, bufsize: int) -> bytes:
        return self._buf.read(bufsize)

    @property
    def remaining(self) -> int:
        return self._len - self._buf.tell()
