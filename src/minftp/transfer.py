from __future__ import annotations

import enum
import logging
import os
from dataclasses import dataclass
from typing import Callable

from . import fs
from .constants import BAD_MSG, CANCEL_MSG, DONE_MSG, GOOD_MSG
from .listing import format_entry
from .net import LineChannel
from .request import Request

Connector = Callable[[str, int, "float | None"], LineChannel]


class DataConnectionError(ConnectionError):
    pass


class TransferState(enum.Enum):
    AWAITING_DATA_READY = "awaiting-data-ready"
    TRANSFERRING = "transferring"
    DONE = "done"


def _connect(host: str, port: int, timeout: float | None) -> LineChannel:
    return LineChannel.connecting(host, port, timeout=timeout)


@dataclass(slots=True)
class TransferOrchestrator:
    """Answers one validated request over a data connection back to the client.

    The flow per request is: acknowledge on the control connection, wait for
    the client's readiness line, connect to the client's data port, stream the
    listing or file, finish with the done sentinel and close the data
    connection.
    """

    root: str = "."
    color: bool = True
    timeout: float | None = None
    connect: Connector = _connect
    state: TransferState = TransferState.DONE
    data: LineChannel | None = None

    def respond(self, request: Request, client_host: str, control: LineChannel) -> None:
        control.send_line(GOOD_MSG)
        self.state = TransferState.AWAITING_DATA_READY

        try:
            # readiness handshake; the content of the line does not matter
            control.expect_line()
        except OSError:
            self.state = TransferState.DONE
            raise

        try:
            data = self.connect(client_host, request.data_port, self.timeout)
        except OSError as e:
            self.state = TransferState.DONE
            raise DataConnectionError(
                f"data connection to {client_host}:{request.data_port} failed: {e}"
            ) from e

        self.data = data
        self.state = TransferState.TRANSFERRING
        try:
            if request.command.is_listing:
                self._send_listing(request, client_host, data)
            else:
                self._send_file(request, client_host, control, data)
        finally:
            self._close_data()
            logging.info("FTP data connection with %s:%d closed.", client_host, request.data_port)

    def shutdown(self) -> None:
        self._close_data()

    def _close_data(self) -> None:
        data, self.data = self.data, None
        self.state = TransferState.DONE
        if data is not None:
            data.close()

    def _send_listing(self, request: Request, client_host: str, data: LineChannel) -> None:
        command = request.command
        logging.info("Sending directory contents to %s:%d.", client_host, request.data_port)

        if command.recursive:
            entries = fs.list_directory_recursive(self.root, command.includes_hidden, command.includes_size)
        else:
            entries = fs.list_directory(self.root, command.includes_hidden, command.includes_size)

        for entry in entries:
            data.send_line(format_entry(entry, with_size=command.includes_size, color=self.color))
        data.send_line(DONE_MSG)

    def _send_file(self, request: Request, client_host: str, control: LineChannel, data: LineChannel) -> None:
        filename = request.filename or ""
        path = os.path.join(self.root, filename)

        if not fs.file_is_accessible(path):
            logging.info(
                'File "%s" not found. Sending error message to %s:%d',
                filename,
                client_host,
                request.data_port,
            )
            data.send_line(BAD_MSG)
            data.send_line(f'Response: Error - "{filename}" not found')
            data.send_line(DONE_MSG)
            return

        logging.info('File "%s" ready to send to %s:%d.', filename, client_host, request.data_port)
        data.send_line(GOOD_MSG)

        go_ahead = control.recv_line()
        if go_ahead is None:
            logging.warning("Control connection closed before the transfer started; treating it as a cancel.")
        elif CANCEL_MSG in go_ahead:
            logging.info("Receiver cancelled the file transfer.")
        else:
            logging.info('Sending "%s" to %s:%d.', filename, client_host, request.data_port)
            sent = 0
            with fs.open_for_line_reading(path) as f:
                for line in f:
                    data.send_line(line.rstrip("\n"))
                    sent += 1
            logging.debug("sent %d lines of %s", sent, filename)

        data.send_line(DONE_MSG)
