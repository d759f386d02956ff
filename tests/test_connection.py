from __future__ import annotations

import socket
import threading
import time

import pytest

from rcon_fakes import read_request
from source_rcon.connection import Connection, Settings
from source_rcon.const import INT32_MAX, ClientPacketKind
from source_rcon.errors import AlreadyConnectedError, NotConnectedError
from source_rcon.packet import ClientPacket


def idle(conn):
    # keep the socket open until the client goes away
    conn.recv(1)


def test_settings_defaults_and_disable():
    assert Settings().resolve() == (5.0, 5.0, 5.0)
    assert Settings(-1, -1, -0.5).resolve() == (None, None, None)
    assert Settings(1, 2.5, 3).resolve() == (1.0, 2.5, 3.0)


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("RCON_DIAL_TIMEOUT", "2")
    monkeypatch.setenv("RCON_READ_DEADLINE", "-1")
    monkeypatch.delenv("RCON_WRITE_DEADLINE", raising=False)
    s = Settings.from_env()
    assert s == Settings(dial_timeout=2.0, read_deadline=-1.0, write_deadline=0.0)
    assert s.resolve() == (2.0, None, 5.0)


def test_settings_from_env_rejects_garbage(monkeypatch):
    monkeypatch.setenv("RCON_READ_DEADLINE", "soon")
    with pytest.raises(ValueError):
        Settings.from_env()


def test_next_id_counts_from_zero():
    conn = Connection()
    assert [conn.next_id() for _ in range(5)] == [0, 1, 2, 3, 4]


def test_next_id_wraps_to_zero():
    conn = Connection()
    conn._packet_id = INT32_MAX
    assert conn.next_id() == INT32_MAX
    assert conn.next_id() == 0


def test_dial_twice_keeps_first_socket(fake_server):
    server = fake_server(idle)
    conn = Connection()
    conn.dial(server.address)
    first = conn.sock
    with pytest.raises(AlreadyConnectedError):
        conn.dial(server.address)
    assert conn.sock is first
    assert conn.connected
    conn.close()


def test_addresses_pass_through(fake_server):
    server = fake_server(idle)
    conn = Connection()
    conn.dial(("127.0.0.1", server.port))
    assert conn.remote_address() == ("127.0.0.1", server.port)
    assert conn.local_address()[0] == "127.0.0.1"
    conn.close()


def test_operations_after_close_fail(fake_server):
    server = fake_server(idle)
    conn = Connection()
    conn.dial(server.address)
    conn.close()
    conn.close()
    assert not conn.connected
    with pytest.raises(NotConnectedError):
        conn.send(ClientPacket(0, ClientPacketKind.AUTH, "pw"))
    with pytest.raises(NotConnectedError):
        conn.recv_packet()
    with pytest.raises(NotConnectedError):
        conn.remote_address()


def test_send_writes_packet(fake_server):
    got = []
    server = fake_server(lambda c: got.append(read_request(c)))
    conn = Connection()
    conn.dial(server.address)
    n = conn.send(ClientPacket(conn.next_id(), ClientPacketKind.EXECUTE_COMMAND, "status"))
    server.join()
    conn.close()
    assert n == 4 + 8 + 6 + 2
    assert got == [(0, 2, "status")]


def test_read_deadline_expires(fake_server):
    release = threading.Event()
    server = fake_server(lambda c: release.wait(5))
    conn = Connection(Settings(read_deadline=0.2))
    conn.dial(server.address)
    try:
        with pytest.raises(socket.timeout):
            conn.recv_packet()
    finally:
        release.set()
        conn.close()


def test_dial_refused():
    # grab a free port, then make sure nothing listens on it
    s = socket.socket()
    s.bind(("127.0.0.1", 0))
    port = s.getsockname()[1]
    s.close()
    conn = Connection(Settings(dial_timeout=1))
    with pytest.raises(OSError):
        conn.dial(("127.0.0.1", port))
    assert not conn.connected


def test_close_wakes_blocked_reader(fake_server):
    release = threading.Event()
    server = fake_server(lambda c: release.wait(5))
    conn = Connection(Settings(read_deadline=-1))
    conn.dial(server.address)
    errors = []

    def reader():
        with conn.lock:
            try:
                conn.recv_packet()
            except OSError as e:
                errors.append(e)

    t = threading.Thread(target=reader)
    t.start()
    time.sleep(0.2)
    conn.close()
    t.join(2)
    release.set()
    assert not t.is_alive()
    assert len(errors) == 1
    assert not conn.connected
