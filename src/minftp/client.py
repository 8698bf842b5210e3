from __future__ import annotations

import enum
import logging
import os
from dataclasses import dataclass, field
from typing import Callable

from .constants import BAD_MSG, CANCEL_MSG, DONE_MSG, ENCODING, GOOD_MSG, READY_MSG
from .net import LineChannel, TcpListener
from .request import Command, Request

# Called with the save path when it already exists. Returns the path to write
# to (the same one to overwrite) or None to cancel the transfer.
ConflictResolver = Callable[[str], "str | None"]


class RequestRejected(Exception):
    pass


class GetStatus(enum.Enum):
    SAVED = "saved"
    MISSING = "missing"
    CANCELLED = "cancelled"


@dataclass(slots=True)
class GetResult:
    status: GetStatus
    path: str | None = None
    lines: int = 0
    messages: list[str] = field(default_factory=list)


def overwrite(path: str) -> str | None:
    return path


def cancel(path: str) -> str | None:
    return None


def _read_until_done(data: LineChannel) -> list[str]:
    lines = []
    while True:
        line = data.expect_line()
        if line == DONE_MSG:
            return lines
        lines.append(line)


@dataclass(slots=True)
class FtpClient:
    host: str
    control_port: int
    data_port: int = 0  # 0 lets the OS pick a free port
    bind_host: str = "0.0.0.0"
    timeout: float | None = None
    resolve_conflict: ConflictResolver = overwrite

    def list_directory(self, command: Command = Command.LIST_SHORT) -> list[str]:
        if not command.is_listing:
            raise ValueError(f"{command.token} is not a listing command")
        return self._exchange(command, None, self._receive_listing)

    def get(self, filename: str, save_as: str | None = None) -> GetResult:
        target = save_as or os.path.basename(filename)

        def receive(control: LineChannel, data: LineChannel) -> GetResult:
            return self._receive_file(control, data, target)

        return self._exchange(Command.GET, filename, receive)

    def _exchange(self, command: Command, filename: str | None, receive):
        listener = TcpListener.listening(self.bind_host, self.data_port, timeout=self.timeout)
        try:
            request = Request(command=command, data_port=listener.port, filename=filename)
            control = LineChannel.connecting(self.host, self.control_port, timeout=self.timeout)
            try:
                control.send_line(request.to_line())
                reply = control.expect_line()
                if reply != GOOD_MSG:
                    raise RequestRejected(reply)

                control.send_line(READY_MSG)
                data, _ = listener.accept()
                try:
                    return receive(control, data)
                finally:
                    data.close()
            finally:
                control.close()
                logging.info("FTP control connection with %s:%d closed.", self.host, self.control_port)
        finally:
            listener.close()

    def _receive_listing(self, control: LineChannel, data: LineChannel) -> list[str]:
        logging.info("Receiving directory structure from %s:%d", self.host, self.control_port)
        return _read_until_done(data)

    def _receive_file(self, control: LineChannel, data: LineChannel, target: str) -> GetResult:
        status = data.expect_line()
        if status == BAD_MSG:
            return GetResult(GetStatus.MISSING, messages=_read_until_done(data))
        if status != GOOD_MSG:
            raise ConnectionError(f"unexpected reply on the data connection: {status!r}")

        path: str | None = target
        if os.path.exists(target):
            path = self.resolve_conflict(target)

        if path is None:
            logging.info("File transfer cancelled.")
            control.send_line(CANCEL_MSG)
            return GetResult(GetStatus.CANCELLED, messages=_read_until_done(data))

        control.send_line(READY_MSG)
        count = 0
        with open(path, "w", encoding=ENCODING, errors="surrogateescape") as out:
            while True:
                line = data.expect_line()
                if line == DONE_MSG:
                    break
                out.write(line + "\n")
                count += 1
        logging.info("File transfer complete.")
        return GetResult(GetStatus.SAVED, path=path, lines=count)
