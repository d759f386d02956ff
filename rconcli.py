#!/usr/bin/env python3
from __future__ import annotations
import argparse, asyncio, getpass, logging, os, sys
from pathlib import Path
from typing import Optional
from source_rcon import RemoteConsole, Settings
from source_rcon.errors import FramingError, RconError
from source_rcon.util import rcon_from_properties

# --- connection helpers ------------------------------------------------------

def _settings(args) -> Settings:
    env = Settings.from_env()
    pick = lambda flag, fallback: fallback if flag is None else flag
    return Settings(
        dial_timeout=pick(args.dial_timeout, env.dial_timeout),
        read_deadline=pick(args.read_deadline, env.read_deadline),
        write_deadline=pick(args.write_deadline, env.write_deadline),
    )

def _target(args) -> tuple[str, str]:
    """Flag > --properties file > environment > prompt."""
    prop_addr = prop_pass = None
    if args.properties:
        prop_addr, prop_pass = rcon_from_properties(Path(args.properties))
    address = args.address or prop_addr or os.environ.get("RCON_ADDRESS")
    if not address:
        raise SystemExit("rconcli.py: no address given (argument, --properties or RCON_ADDRESS)")
    password = args.password or prop_pass or os.environ.get("RCON_PASSWORD")
    if password is None:
        password = getpass.getpass("RCON password: ")
    return address, password

def _open(args) -> RemoteConsole:
    address, password = _target(args)
    return RemoteConsole.open(address, password, _settings(args))

# --- exec / shell / console --------------------------------------------------

def do_exec(args):
    with _open(args) as rc:
        print(rc.execute(" ".join(args.command)))

def do_shell(args):
    with _open(args) as rc:
        host, port = rc.remote_address()[:2]
        print(f"Interactive RCON on {host}:{port}. Type /quit to exit.")
        while True:
            try:
                cmd = input("> ").strip()
            except EOFError:
                break
            if cmd.lower() in ("/quit","quit","exit"): break
            if not cmd: continue
            try:
                print(rc.execute(cmd))
            except (FramingError, OSError) as e:
                # stream is unusable, nothing left to talk to
                print(f"[rcon error] {e}")
                return 1
            except RconError as e:
                print(f"[rcon error] {e}")

def do_console(args):
    """Opens the prompt_toolkit RCON console with an input bar and optional log tails."""
    try:
        from source_rcon.rcon_ui import run_rcon_ui
    except ImportError as e:
        print(f"prompt_toolkit UI not available ({e}); falling back to plain RCON.", flush=True)
        return do_shell(args)

    with _open(args) as rc:
        try:
            asyncio.run(run_rcon_ui(rc, [Path(p) for p in args.tail]))
        except KeyboardInterrupt:
            pass

# --- argparse ----------------------------------------------------------------

def _add_common(p: argparse.ArgumentParser, address_required: bool) -> None:
    if address_required:
        p.add_argument("address", help="host[:port], port defaults to 27015")
    else:
        p.add_argument("address", nargs="?", help="host[:port], port defaults to 27015")
    p.add_argument("-p", "--password", help="RCON password (else RCON_PASSWORD or prompt)")
    p.add_argument("--properties", metavar="FILE", help="read rcon.port/rcon.password from a server.properties")
    p.add_argument("--dial-timeout", type=float, metavar="SEC", help="0 = 5s default, negative = none")
    p.add_argument("--read-deadline", type=float, metavar="SEC")
    p.add_argument("--write-deadline", type=float, metavar="SEC")

def build_parser():
    p = argparse.ArgumentParser(prog="rconcli.py", description="Source RCON client.")
    p.add_argument("-v", "--verbose", action="count", default=0, help="-v info, -vv debug")
    sub = p.add_subparsers(dest="cmd", required=True)

    pe = sub.add_parser("exec", help="Run one command and print the reply")
    _add_common(pe, address_required=True)
    pe.add_argument("command", nargs="+")
    pe.set_defaults(func=do_exec)

    ps = sub.add_parser("shell", help="Plain line-by-line RCON prompt")
    _add_common(ps, address_required=False)
    ps.set_defaults(func=do_shell)

    pc = sub.add_parser("console", help="Open RCON console (prompt_toolkit)")
    _add_common(pc, address_required=False)
    pc.add_argument("--tail", action="append", default=[], metavar="FILE", help="follow a log file in the output pane")
    pc.set_defaults(func=do_console)

    return p

def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    args = build_parser().parse_args(argv)
    level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose, logging.DEBUG)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        return args.func(args) or 0
    except (RconError, OSError, ValueError) as e:
        print(f"rconcli.py: {e}", file=sys.stderr)
        return 1

if __name__ == "__main__":
    raise SystemExit(main())
