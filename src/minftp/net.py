from __future__ import annotations

import socket
from typing import Tuple

from .constants import ENCODING, LISTEN_BACKLOG


class ConnectionClosed(ConnectionError):
    pass


class LineChannel:
    """A TCP connection that exchanges newline-terminated text lines."""

    def __init__(self, sock: socket.socket):
        self.sock = sock
        self._reader = sock.makefile("rb")

    @classmethod
    def connecting(cls, host: str, port: int, timeout: float | None = None) -> "LineChannel":
        sock = socket.create_connection((host, port), timeout=timeout)
        return cls(sock)

    @property
    def local_port(self) -> int:
        return self.sock.getsockname()[1]

    @property
    def peer_host(self) -> str:
        return self.sock.getpeername()[0]

    def send_line(self, text: str) -> None:
        self.sock.sendall((text + "\n").encode(ENCODING, "surrogateescape"))

    def recv_line(self, limit: int = -1) -> str | None:
        """Next line without its line ending, or None once the peer has closed."""
        raw = self._reader.readline(limit)
        if not raw:
            return None
        return raw.decode(ENCODING, "surrogateescape").rstrip("\r\n")

    def expect_line(self, limit: int = -1) -> str:
        line = self.recv_line(limit)
        if line is None:
            raise ConnectionClosed("peer closed the connection")
        return line

    def close(self) -> None:
        self._reader.close()
        self.sock.close()


class TcpListener:
    def __init__(self, sock: socket.socket, timeout: float | None = None):
        self.sock = sock
        self.timeout = timeout

    @classmethod
    def listening(
        cls,
        host: str,
        port: int,
        timeout: float | None = None,
        backlog: int = LISTEN_BACKLOG,
    ) -> "TcpListener":
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((host, port))
            sock.listen(backlog)
        except OSError:
            sock.close()
            raise
        return cls(sock, timeout)

    @property
    def port(self) -> int:
        return self.sock.getsockname()[1]

    def accept(self) -> Tuple[LineChannel, str]:
        """Block until a peer connects; the timeout policy applies to the new connection only."""
        conn, addr = self.sock.accept()
        conn.settimeout(self.timeout)
        return LineChannel(conn), addr[0]

    def close(self) -> None:
        # shutdown() wakes a thread blocked in accept() on Linux
        try:
            self.sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        self.sock.close()
