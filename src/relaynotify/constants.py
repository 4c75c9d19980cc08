from __future__ import annotations

HEADER_LENGTH = 5  # int total length + char compression flag
TYPE_TAG_LENGTH = 3

# Object type tags
TAG_ARRAY = "arr"
TAG_BUFFER = "buf"
TAG_CHAR = "chr"
TAG_HASHTABLE = "htb"
TAG_INT = "int"
TAG_LONG = "lon"
TAG_POINTER = "ptr"
TAG_STRING = "str"
TAG_TIME = "tim"

# Message body tags
BODY_STR = "str"
BODY_HDATA = "hda"

NULL_LENGTH = -1
NULL_POINTER = "0"
MAX_NESTING_DEPTH = 64

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

CMD_INIT = "init password={password},compression=off"
CMD_PING = "ping {token}"
CMD_SYNC = "sync * buffer"
CMD_QUIT = "quit"

ID_BUFFER_LINE_ADDED = "_buffer_line_added"
ID_PONG = "_pong"
TAG_NOTIFY_PRIVATE = "notify_private"

DEFAULT_PORT = 9001
DEFAULT_PING_TOKEN = "relaynotify"
DEFAULT_CONNECT_TIMEOUT_S = 10.0
PASSWORD_ENV = "RELAYNOTIFY_PASSWORD"
READ_CHUNK_SIZE = 65536
