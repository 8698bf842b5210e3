from __future__ import annotations

import argparse
import logging
import sys
from typing import Callable, TextIO

from .client import FtpClient, GetStatus, RequestRejected, cancel, overwrite
from .constants import MAX_VALID_PORT, MIN_VALID_PORT
from .listing import parse_listing_line
from .request import Command
from .server import FtpServer, ServerConfig, install_interrupt_handler


def _as_port(text: str | None) -> int | None:
    if text is None:
        return None
    text = text.strip()
    if not (text.isascii() and text.isdigit()):
        return None
    port = int(text)
    if MIN_VALID_PORT <= port <= MAX_VALID_PORT:
        return port
    return None


def get_valid_port(
    argued: str | None,
    prompt: Callable[[str], str] = input,
) -> int:
    """Return the argued port if valid, otherwise prompt until a valid one is entered."""
    port = _as_port(argued)
    question = f"Enter a valid port number [{MIN_VALID_PORT} - {MAX_VALID_PORT}]: "
    while port is None:
        port = _as_port(prompt(question))
    return port


def ask_on_conflict(path: str, prompt: Callable[[str], str] = input, out: TextIO = sys.stdout) -> str | None:
    out.write(
        f'The file "{path}" already exists in the directory.\n\n'
        "What would you like to do?\n"
        "1) Overwrite the existing file.\n"
        "2) Change the name of the received file.\n"
        "3) Cancel saving the received file.\n\n"
    )
    choice = prompt("Enter a number [1 - 3]: ").strip()
    while choice not in ("1", "2", "3"):
        choice = prompt("Please select a valid option [1 - 3]: ").strip()

    if choice == "3":
        return None
    if choice == "2":
        name = ""
        while not name.strip():
            name = prompt("Please enter a valid file name: ")
        return name.strip()
    return path


def cmd_serve(args: argparse.Namespace) -> int:
    config = ServerConfig(
        port=get_valid_port(args.port),
        host=args.host,
        root=args.root,
        timeout=args.timeout,
        color=not args.no_color,
    )
    try:
        server = FtpServer.from_config(config)
    except OSError as e:
        raise SystemExit(f"could not listen on {config.host}:{config.port}: {e}") from e

    install_interrupt_handler(server)
    server.serve_forever()
    return 0


def _client(args: argparse.Namespace, **kw) -> FtpClient:
    return FtpClient(
        host=args.host,
        control_port=args.port,
        data_port=args.data_port,
        timeout=args.timeout,
        **kw,
    )


def cmd_list(args: argparse.Namespace) -> int:
    if args.recursive:
        command = Command.LIST_RECURSIVE
    elif args.size:
        command = Command.LIST_WITH_SIZE
    elif args.all:
        command = Command.LIST_ALL
    else:
        command = Command.LIST_SHORT

    try:
        lines = _client(args).list_directory(command)
    except RequestRejected as e:
        print(e)
        return 1
    except OSError as e:
        print(f"Listing from {args.host}:{args.port} failed: {e}")
        return 1

    for line in lines:
        print(parse_listing_line(line, command.includes_size).name if args.plain else line)
    return 0


_CONFLICT_POLICIES = {
    "ask": ask_on_conflict,
    "overwrite": overwrite,
    "cancel": cancel,
}


def cmd_get(args: argparse.Namespace) -> int:
    client = _client(args, resolve_conflict=_CONFLICT_POLICIES[args.on_conflict])
    try:
        result = client.get(args.filename, save_as=args.save_as)
    except RequestRejected as e:
        print(e)
        return 1
    except OSError as e:
        print(f"Fetching \"{args.filename}\" from {args.host}:{args.port} failed: {e}")
        return 1

    if result.status is GetStatus.MISSING:
        for message in result.messages:
            print(message)
        return 1
    if result.status is GetStatus.CANCELLED:
        print("File transfer cancelled.")
        return 0
    print(f'Received "{args.filename}" as "{result.path}" ({result.lines} lines).')
    return 0


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="minftp", description="Minimal line-oriented FTP server and client.")
    p.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    def add_common(x: argparse.ArgumentParser) -> None:
        x.add_argument("--timeout", type=float, default=None, help="seconds before a stalled connection is dropped")

    def add_client(x: argparse.ArgumentParser) -> None:
        add_common(x)
        x.add_argument("host")
        x.add_argument("port", type=int)
        x.add_argument("--data-port", type=int, default=0, help="0 picks a free port")

    serve = sub.add_parser("serve", help="serve the files of a directory")
    add_common(serve)
    serve.add_argument("port", nargs="?", default=None)
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--root", default=".")
    serve.add_argument("--no-color", action="store_true")
    serve.set_defaults(func=cmd_serve)

    ls = sub.add_parser("list", help="list the server's directory")
    add_client(ls)
    mode = ls.add_mutually_exclusive_group()
    mode.add_argument("-a", "--all", action="store_true", help="include hidden entries (-la)")
    mode.add_argument("-s", "--size", action="store_true", help="include hidden entries and sizes (-ll)")
    mode.add_argument("-r", "--recursive", action="store_true", help="recurse into directories (-lr)")
    ls.add_argument("--plain", action="store_true", help="strip colours and sizes")
    ls.set_defaults(func=cmd_list)

    get = sub.add_parser("get", help="fetch a text file")
    add_client(get)
    get.add_argument("filename")
    get.add_argument("--save-as", default=None)
    get.add_argument("--on-conflict", choices=sorted(_CONFLICT_POLICIES), default="ask")
    get.set_defaults(func=cmd_get)

    args = p.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(asctime)s [%(levelname)s] %(message)s")
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
