# source_rcon/util.py
from __future__ import annotations

import os
from pathlib import Path
from typing import Optional, Tuple, Union

from .const import DEFAULT_PORT


def parse_address(address: Union[str, Tuple[str, int]], default_port: int = DEFAULT_PORT) -> Tuple[str, int]:
    """Split ``host[:port]`` (or ``[v6]:port``) into a (host, port) pair."""
    if isinstance(address, tuple):
        host, port = address
        return host, int(port)

    address = address.strip()
    if not address:
        raise ValueError("empty address")

    if address.startswith("["):
        host, sep, rest = address[1:].partition("]")
        if not sep:
            raise ValueError(f"unterminated IPv6 address: {address!r}")
        if not rest:
            return host, default_port
        if not rest.startswith(":"):
            raise ValueError(f"bad address: {address!r}")
        return host, _port(rest[1:], address)

    # a bare IPv6 literal has several colons and no port
    if address.count(":") > 1:
        return address, default_port

    host, sep, port = address.partition(":")
    if not sep:
        return host, default_port
    return host or "127.0.0.1", _port(port, address)


def _port(text: str, address: str) -> int:
    try:
        port = int(text)
    except ValueError:
        raise ValueError(f"bad port in address {address!r}") from None
    if not 0 < port < 65536:
        raise ValueError(f"port out of range in address {address!r}")
    return port


def env_float(name: str, default: float = 0.0) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number of seconds, got {raw!r}") from None


def read_properties(path: Path) -> dict:
    props = {}
    if path.exists():
        for line in path.read_text(encoding="utf-8", errors="ignore").splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" in line:
                k, v = line.split("=", 1)
                props[k.strip()] = v.strip()
    return props


def rcon_from_properties(path: Path) -> Tuple[Optional[str], Optional[str]]:
    """Return (address, password) from a Minecraft-style server.properties.

    Either may be None when the file does not set it. RCON disabled via
    ``enable-rcon=false`` is not an error here; the server will just refuse
    the connection.
    """
    props = read_properties(path)
    port = props.get("rcon.port")
    host = props.get("server-ip") or "127.0.0.1"
    if ":" in host:
        host = f"[{host}]"
    address = f"{host}:{port}" if port else None
    return address, props.get("rcon.password") or None
