from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import Union

from .constants import (
    ERROR_PREFIX,
    GET_CMD,
    LIST_ALL_CMD,
    LIST_CMD,
    LIST_RECURSIVE_CMD,
    LIST_WITH_SIZE_CMD,
    MAX_VALID_PORT,
    MIN_VALID_PORT,
)

VALID_MIN_COMPONENTS = 2
VALID_MAX_COMPONENTS = 3

_PORT_RE = re.compile(r"[+-]?[0-9]+")


class Command(enum.Enum):
    LIST_SHORT = LIST_CMD
    LIST_ALL = LIST_ALL_CMD
    LIST_WITH_SIZE = LIST_WITH_SIZE_CMD
    LIST_RECURSIVE = LIST_RECURSIVE_CMD
    GET = GET_CMD

    @property
    def token(self) -> str:
        return self.value

    @property
    def is_listing(self) -> bool:
        return self is not Command.GET

    @property
    def expected_components(self) -> int:
        return 3 if self is Command.GET else 2

    @property
    def includes_hidden(self) -> bool:
        return self in (Command.LIST_ALL, Command.LIST_WITH_SIZE, Command.LIST_RECURSIVE)

    @property
    def includes_size(self) -> bool:
        return self in (Command.LIST_WITH_SIZE, Command.LIST_RECURSIVE)

    @property
    def recursive(self) -> bool:
        return self is Command.LIST_RECURSIVE


class ErrorKind(enum.Enum):
    TOO_FEW_ARGUMENTS = "too-few-arguments"
    TOO_MANY_ARGUMENTS = "too-many-arguments"
    UNKNOWN_COMMAND = "unknown-command"
    COMMAND_ARGUMENT_MISMATCH = "command-argument-mismatch"
    MISSING_FILENAME = "missing-filename"
    DATA_PORT_NOT_NUMERIC = "data-port-not-numeric"
    DATA_PORT_OUT_OF_RANGE = "data-port-out-of-range"
    DATA_PORT_EQUALS_CONTROL_PORT = "data-port-equals-control-port"


@dataclass(frozen=True, slots=True)
class ValidationError:
    kind: ErrorKind
    message: str

    @property
    def wire_text(self) -> str:
        """The line sent back to the client on the control connection."""
        return ERROR_PREFIX + self.message


@dataclass(frozen=True, slots=True)
class Request:
    command: Command
    data_port: int
    filename: str | None = None

    def to_line(self) -> str:
        if self.command is Command.GET:
            return f"{self.command.token} {self.filename} {self.data_port}"
        return f"{self.command.token} {self.data_port}"


ParseResult = Union[Request, ValidationError]

_COMMANDS = {c.token: c for c in Command}
_PORT_RANGE_TEXT = f"{MIN_VALID_PORT}..{MAX_VALID_PORT}"


def _command_list_text() -> str:
    quoted = [f'"{c.token}"' for c in Command]
    return ", ".join(quoted[:-1]) + ", or " + quoted[-1]


def _check_count(components: list[str]) -> ValidationError | None:
    count = len(components)
    if count < VALID_MIN_COMPONENTS:
        return ValidationError(ErrorKind.TOO_FEW_ARGUMENTS, "Too few FTP request arguments were provided.")
    if count > VALID_MAX_COMPONENTS:
        return ValidationError(ErrorKind.TOO_MANY_ARGUMENTS, "Too many FTP request arguments were provided.")
    return None


def _check_command(components: list[str]) -> Command | ValidationError:
    prospect = components[0]
    count = len(components)
    command = _COMMANDS.get(prospect)

    if command is None:
        return ValidationError(
            ErrorKind.UNKNOWN_COMMAND,
            f"An invalid command was provided. Please use {_command_list_text()}.",
        )
    if command.expected_components != count:
        return ValidationError(
            ErrorKind.COMMAND_ARGUMENT_MISMATCH,
            f"Command mismatch: {count} arguments were provided with a command of {prospect}.",
        )
    return command


def _check_data_port(token: str, control_port: int) -> int | ValidationError:
    if not _PORT_RE.fullmatch(token):
        return ValidationError(
            ErrorKind.DATA_PORT_NOT_NUMERIC,
            f"Non-numeric data port argument. Please provide a numeric port in the range: {_PORT_RANGE_TEXT}",
        )

    port = int(token)
    if port < MIN_VALID_PORT or port > MAX_VALID_PORT:
        return ValidationError(
            ErrorKind.DATA_PORT_OUT_OF_RANGE,
            f"Invalid data port argument. Please provide a numeric port in the range: {_PORT_RANGE_TEXT}",
        )
    if port == control_port:
        return ValidationError(
            ErrorKind.DATA_PORT_EQUALS_CONTROL_PORT,
            "Invalid data port argument. The data port should not be the same as the command port.",
        )
    return port


def parse(raw_line: str, control_port: int) -> ParseResult:
    """Validate one raw request line received on the control connection.

    Checks run in a fixed order: component count, command, data port and
    finally the file name, so the first failing check decides which error is
    reported. Nothing is raised; a failure comes back as a ValidationError.
    """
    if not raw_line.strip():
        return ValidationError(
            ErrorKind.TOO_FEW_ARGUMENTS,
            "The FTP request does not appear to have any valid arguments.",
        )

    components = raw_line.split()

    err = _check_count(components)
    if err is not None:
        return err

    command = _check_command(components)
    if isinstance(command, ValidationError):
        return command

    data_port = _check_data_port(components[-1], control_port)
    if isinstance(data_port, ValidationError):
        return data_port

    filename = None
    if command is Command.GET:
        filename = components[1].strip()
        if not filename:
            return ValidationError(ErrorKind.MISSING_FILENAME, "No file name was provided. Please provide one")

    return Request(command=command, data_port=data_port, filename=filename)
