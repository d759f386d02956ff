# source_rcon/rcon_ui.py
from __future__ import annotations

import asyncio
import contextlib
import logging
import os
from pathlib import Path
from typing import Iterable, Optional

from prompt_toolkit.application import Application
from prompt_toolkit.document import Document
from prompt_toolkit.filters import has_focus
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.layout import HSplit, Layout
from prompt_toolkit.styles import Style
from prompt_toolkit.widgets import Label, TextArea

from .console import RemoteConsole
from .errors import FramingError, RconError

log = logging.getLogger(__name__)

TAIL_BOOT_BYTES = 64_000  # show last ~64KB per file on open
TAIL_POLL = 0.25          # seconds
LOG_TRIM_LIMIT = 2_000_000  # keep last ~2MB in the in-memory text area


async def run_rcon_ui(rc: RemoteConsole, tail: Iterable[Path] = ()) -> None:
    """Fullscreen RCON console: output pane, input bar, optional live log files."""
    host, port = rc.remote_address()[:2]
    tail = list(dict.fromkeys(tail))

    # Output view (not focusable so user can't type into it, but NOT read_only)
    output = TextArea(
        style="class:log",
        focusable=False,
        scrollbar=True,
        wrap_lines=False,
        read_only=False,  # programmatic inserts
    )
    input_field = TextArea(height=1, prompt="> ", multiline=False)
    status = Label(
        text=f"RCON {host}:{port}    (Ctrl-C / Esc to exit)",
        style="class:status",
    )

    kb = KeyBindings()

    @kb.add("enter", filter=has_focus(input_field))
    async def _(event) -> None:
        cmd = (input_field.text or "").strip()
        input_field.buffer.document = Document(text="")
        if not cmd:
            return
        if not rc.connected:
            _append(app, output, "[rcon] not connected.\n")
            return
        try:
            out = await asyncio.to_thread(rc.execute, cmd)
            _append(app, output, f"$ {cmd}\n{out}\n")
        except (FramingError, OSError) as e:
            # the stream is unusable after these
            log.debug("dropping connection after %r", e)
            rc.close()
            _append(app, output, f"[rcon error] {e}\n[rcon] connection closed.\n")
        except RconError as e:
            _append(app, output, f"[rcon error] {e}\n")

    @kb.add("c-c")
    @kb.add("escape")
    def _(event) -> None:
        event.app.exit()

    root = HSplit([status, output, input_field])
    app = Application(
        layout=Layout(root),
        key_bindings=kb,
        full_screen=True,
        style=Style.from_dict(
            {
                "log": "bg:#0e162b #d1d5db",
                "status": "reverse",
            }
        ),
    )

    async def tail_many(paths: list[Path]) -> None:
        # read the last TAIL_BOOT_BYTES of each file once, then follow
        offsets: dict[Path, int] = {}

        for p in paths:
            try:
                with p.open("rb") as f:
                    f.seek(0, os.SEEK_END)
                    end = f.tell()
                    start = max(0, end - TAIL_BOOT_BYTES)
                    f.seek(start)
                    if start > 0:
                        f.readline()  # drop partial first line
                    chunk = f.read()
                    if chunk:
                        _append(app, output, chunk.decode("utf-8", "ignore"))
                    offsets[p] = end
            except FileNotFoundError:
                offsets[p] = 0

        while True:
            for p in paths:
                try:
                    with p.open("rb") as f:
                        f.seek(offsets.get(p, 0))
                        data = f.read()
                        if data:
                            offsets[p] = f.tell()
                            _append(app, output, data.decode("utf-8", "ignore"))
                except FileNotFoundError:
                    # file may appear later
                    pass
            await asyncio.sleep(TAIL_POLL)

    _append(app, output, f"[rcon] connected to {host}:{port}.\n")
    tasks = [asyncio.create_task(tail_many(tail))] if tail else []

    try:
        await app.run_async()
    finally:
        for t in tasks:
            t.cancel()
        for t in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await t


def _append(app: Optional[Application], area: TextArea, text: str) -> None:
    """
    Append text to the TextArea and keep the buffer size bounded.
    """
    buf = area.buffer
    buf.insert_text(text, move_cursor=True)
    if len(buf.text) > LOG_TRIM_LIMIT:
        new_text = buf.text[-LOG_TRIM_LIMIT:]
        buf.document = Document(new_text, cursor_position=len(new_text))
    if app is not None and app.is_running:
        app.invalidate()
