from __future__ import annotations

DONE_MSG = "\\done"
GOOD_MSG = "\\good"
BAD_MSG = "\\bad"
READY_MSG = "\\ready"
CANCEL_MSG = "\\cancel"

LIST_CMD = "-l"
LIST_ALL_CMD = "-la"
LIST_WITH_SIZE_CMD = "-ll"
LIST_RECURSIVE_CMD = "-lr"
GET_CMD = "-g"

MIN_VALID_PORT = 1024
MAX_VALID_PORT = 65535

ERROR_PREFIX = "Error: "
ENCODING = "utf-8"

MAX_REQUEST_BYTES = 1024  # control request lines are read with this limit
LISTEN_BACKLOG = 10
SIZE_COLUMN = 40
