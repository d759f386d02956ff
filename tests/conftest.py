from __future__ import annotations

import pytest

from rcon_fakes import FakeServer


@pytest.fixture
def fake_server():
    servers = []

    def start(handler) -> FakeServer:
        server = FakeServer(handler)
        servers.append(server)
        return server

    yield start
    for s in servers:
        s.close()
