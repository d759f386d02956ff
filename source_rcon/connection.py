# source_rcon/connection.py
from __future__ import annotations

import contextlib
import logging
import socket
import threading
import time
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from .const import (
    DEFAULT_DIAL_TIMEOUT,
    DEFAULT_READ_DEADLINE,
    DEFAULT_WRITE_DEADLINE,
    INT32_MAX,
)
from .errors import AlreadyConnectedError, NotConnectedError
from .packet import ClientPacket, ServerPacket
from .util import env_float, parse_address

log = logging.getLogger(__name__)

Address = Union[str, Tuple[str, int]]


def _effective(value: float, default: float) -> Optional[float]:
    """0 means the default, a negative value disables the timeout."""
    if value == 0:
        return default
    if value < 0:
        return None
    return float(value)


@dataclass(frozen=True, slots=True)
class Settings:
    """Timeouts in seconds. 0 selects the 5 s default, negative disables."""

    dial_timeout: float = 0
    read_deadline: float = 0
    write_deadline: float = 0

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            dial_timeout=env_float("RCON_DIAL_TIMEOUT"),
            read_deadline=env_float("RCON_READ_DEADLINE"),
            write_deadline=env_float("RCON_WRITE_DEADLINE"),
        )

    def resolve(self) -> tuple[Optional[float], Optional[float], Optional[float]]:
        return (
            _effective(self.dial_timeout, DEFAULT_DIAL_TIMEOUT),
            _effective(self.read_deadline, DEFAULT_READ_DEADLINE),
            _effective(self.write_deadline, DEFAULT_WRITE_DEADLINE),
        )


class _DeadlineSource:
    """Feeds the decoder from ``sock`` and enforces one deadline for the whole packet."""

    def __init__(self, sock: socket.socket, timeout: Optional[float]):
        self.sock = sock
        self.deadline = None if timeout is None else time.monotonic() + timeout

    def recv(self, bufsize: int) -> bytes:
        if self.deadline is not None:
            remaining = self.deadline - time.monotonic()
            if remaining <= 0:
                raise socket.timeout("timed out")
            self.sock.settimeout(remaining)
        else:
            self.sock.settimeout(None)
        return self.sock.recv(bufsize)


class Connection:
    """Owns the TCP socket, its deadlines and the request id counter.

    ``lock`` serializes whole request/response cycles; the state fields
    below are only mutated while it is held, except by ``close()``, which
    must not wait on the lock so it can wake a reader blocked in recv().
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings()
        self.dial_timeout, self.read_deadline, self.write_deadline = self.settings.resolve()
        self.lock = threading.Lock()
        self.sock: Optional[socket.socket] = None
        self.address: Optional[Tuple[str, int]] = None  # as dialed
        self.authenticated = False
        self._packet_id = 0

    @property
    def connected(self) -> bool:
        return self.sock is not None

    def dial(self, address: Address) -> None:
        with self.lock:
            if self.sock is not None:
                raise AlreadyConnectedError()
            host, port = parse_address(address)
            log.debug("dialing %s:%s (timeout=%s)", host, port, self.dial_timeout)
            self.sock = socket.create_connection((host, port), timeout=self.dial_timeout)
            self.address = (host, port)
            self.authenticated = False

    def close(self) -> None:
        sock, self.sock = self.sock, None
        self.authenticated = False
        if sock is None:
            return
        log.debug("closing connection")
        # wake up a reader blocked in recv() on another thread
        with contextlib.suppress(OSError):
            sock.shutdown(socket.SHUT_RDWR)
        sock.close()

    def _require(self) -> socket.socket:
        if self.sock is None:
            raise NotConnectedError()
        return self.sock

    def local_address(self):
        return self._require().getsockname()

    def remote_address(self):
        return self._require().getpeername()

    def next_id(self) -> int:
        packet_id = self._packet_id
        self._packet_id = 0 if packet_id >= INT32_MAX else packet_id + 1
        return packet_id

    def send(self, packet: ClientPacket) -> int:
        sock = self._require()
        raw = packet.to_bytes()
        sock.settimeout(self.write_deadline)
        sock.sendall(raw)
        log.debug("sent packet id=%d kind=%s size=%d", packet.id, packet.kind.name, packet.size)
        return len(raw)

    def recv_packet(self) -> ServerPacket:
        sock = self._require()
        packet = ServerPacket.read_from(_DeadlineSource(sock, self.read_deadline))
        log.debug("received packet id=%d kind=%s size=%d", packet.id, packet.kind.name, packet.size)
        return packet
