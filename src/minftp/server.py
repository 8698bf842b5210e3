from __future__ import annotations

import logging
import signal
from dataclasses import dataclass

from .constants import MAX_REQUEST_BYTES
from .net import LineChannel, TcpListener
from .request import Command, ValidationError, parse
from .transfer import TransferOrchestrator


@dataclass(frozen=True, slots=True)
class ServerConfig:
    port: int
    host: str = "0.0.0.0"
    root: str = "."
    timeout: float | None = None
    color: bool = True


class FtpServer:
    """Serves control connections one at a time until shut down."""

    def __init__(self, listener: TcpListener, orchestrator: TransferOrchestrator):
        self.listener = listener
        self.orchestrator = orchestrator
        self.running = False

    @classmethod
    def from_config(cls, config: ServerConfig) -> "FtpServer":
        listener = TcpListener.listening(config.host, config.port, timeout=config.timeout)
        orchestrator = TransferOrchestrator(root=config.root, color=config.color, timeout=config.timeout)
        logging.info("Server open on port %d", listener.port)
        return cls(listener, orchestrator)

    @property
    def port(self) -> int:
        return self.listener.port

    def serve_forever(self) -> None:
        self.running = True
        while self.running:
            try:
                self.handle_next()
            except OSError as e:
                if not self.running:
                    break
                logging.error("Connection failed: %s", e)

    def handle_next(self) -> None:
        control, client_host = self.listener.accept()
        logging.info("Connection from %s.", client_host)
        try:
            self.handle_connection(control, client_host)
        finally:
            control.close()

    def handle_connection(self, control: LineChannel, client_host: str) -> None:
        line = control.recv_line(MAX_REQUEST_BYTES)
        if line is None:
            logging.warning("%s closed the control connection without a request.", client_host)
            return

        result = parse(line, control.local_port)
        if isinstance(result, ValidationError):
            logging.info("Rejected request from %s: %s", client_host, result.message)
            control.send_line(result.wire_text)
            return

        if result.command is Command.GET:
            logging.info('File "%s" requested on port %d.', result.filename, result.data_port)
        else:
            logging.info("List directory requested on port %d.", result.data_port)
        self.orchestrator.respond(result, client_host, control)

    def shutdown(self) -> None:
        self.running = False
        self.orchestrator.shutdown()
        self.listener.close()
        logging.info("FTP server stopped.")


def install_interrupt_handler(server: FtpServer) -> None:
    """Route SIGINT to ``server.shutdown()`` and leave the process."""

    def on_interrupt(signum, frame):
        server.shutdown()
        raise SystemExit(0)

    signal.signal(signal.SIGINT, on_interrupt)
