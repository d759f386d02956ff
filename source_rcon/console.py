# source_rcon/console.py
from __future__ import annotations

import logging
from typing import Optional

from .connection import Address, Connection, Settings
from .const import (
    AUTH_FAILED_ID,
    COMMAND_MAXIMUM_SIZE,
    ENCODING,
    ClientPacketKind,
    ServerPacketKind,
)
from .errors import (
    AlreadyAuthenticatedError,
    AuthenticationFailedError,
    CommandEmptyError,
    CommandTooLongError,
    InvalidAuthResponseError,
    InvalidPacketTypeError,
    NotAuthenticatedError,
    NotConnectedError,
    PacketIdMismatchError,
)
from .packet import ClientPacket, ServerPacket

log = logging.getLogger(__name__)


class RemoteConsole:
    """A Source RCON session: one TCP connection, one exchange at a time.

    Usually built with :meth:`open`, which dials and authenticates::

        with RemoteConsole.open("127.0.0.1:27015", "secret") as rc:
            print(rc.execute("status"))

    ``authenticate`` and ``execute`` hold the connection lock for the whole
    send/receive cycle, so a console can be shared between threads, but
    callers queue up behind each other.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.conn = Connection(settings)

    @classmethod
    def open(cls, address: Address, password: str, settings: Optional[Settings] = None) -> "RemoteConsole":
        rc = cls(settings)
        rc.dial(address)
        try:
            rc.authenticate(password)
        except BaseException:
            rc.close()
            raise
        return rc

    def __enter__(self) -> "RemoteConsole":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    @property
    def connected(self) -> bool:
        return self.conn.connected

    @property
    def authenticated(self) -> bool:
        return self.conn.authenticated

    def dial(self, address: Address) -> None:
        self.conn.dial(address)

    def close(self) -> None:
        self.conn.close()

    def local_address(self):
        return self.conn.local_address()

    def remote_address(self):
        return self.conn.remote_address()

    def _read_reply(self) -> ServerPacket:
        packet = self.conn.recv_packet()
        if packet.ignorable:
            # only one, never a loop
            log.debug("dropping undocumented packet id=%d", packet.id)
            packet = self.conn.recv_packet()
            if packet.ignorable:
                raise InvalidPacketTypeError(packet.kind)
        return packet

    def authenticate(self, password: str) -> None:
        with self.conn.lock:
            if self.conn.authenticated:
                raise AlreadyAuthenticatedError()
            if not self.conn.connected:
                raise NotConnectedError()

            request = ClientPacket(self.conn.next_id(), ClientPacketKind.AUTH, password)
            self.conn.send(request)

            reply = self._read_reply()
            if reply.kind is ServerPacketKind.RESPONSE_VALUE:
                # some servers send an empty RESPONSE_VALUE ahead of the real answer
                reply = self.conn.recv_packet()

            if reply.kind is not ServerPacketKind.AUTH_RESPONSE:
                raise InvalidAuthResponseError(reply.kind)
            if reply.id == AUTH_FAILED_ID:
                raise AuthenticationFailedError()
            if reply.id != request.id:
                raise PacketIdMismatchError(request.id, reply.id)

            self.conn.authenticated = True
            log.info("authenticated with %s:%s", *self.conn.address)

    def execute(self, command: str) -> str:
        with self.conn.lock:
            if not command:
                raise CommandEmptyError()
            size = len(command.encode(ENCODING))
            if size > COMMAND_MAXIMUM_SIZE:
                raise CommandTooLongError(size)
            if not self.conn.connected:
                raise NotConnectedError()
            if not self.conn.authenticated:
                raise NotAuthenticatedError()

            request = ClientPacket(self.conn.next_id(), ClientPacketKind.EXECUTE_COMMAND, command)
            self.conn.send(request)

            reply = self._read_reply()
            if reply.id != request.id:
                raise PacketIdMismatchError(request.id, reply.id)
            return reply.body
