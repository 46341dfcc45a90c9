"""Running commands through the i3 window manager's IPC socket."""

from __future__ import annotations

import logging
import socket
import struct
import subprocess

logger = logging.getLogger(__name__)

MAGIC = b"i3-ipc"
RUN_COMMAND = 0
_HEADER = struct.Struct("=6sII")
_MAX_COMMAND_LENGTH = 2**32 - 1
_SUN_PATH_SIZE = 108

_JSON_ESCAPES = {
    '"': '"',
    "\\": "\\",
    "/": "/",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}


class I3Error(RuntimeError):
    """i3 could not be reached or reported a failure."""


class JSONError(ValueError):
    """A JSON string in i3's reply could not be decoded."""


def get_ipc_socket_path() -> str:
    """Ask i3 for the path of its IPC socket.

    Call this early: it raises I3Error when i3 isn't available.
    """
    try:
        completed = subprocess.run(
            ["i3", "--get-socketpath"],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            check=False,
        )
    except OSError as exc:
        raise I3Error(f"Couldn't execute 'i3 --get-socketpath': {exc}") from exc

    status = completed.returncode
    if status < 0:
        raise I3Error(
            "'i3 --get-socketpath' has exited abnormally! "
            "Are you sure that i3 is running?"
        )
    if status != 0:
        raise I3Error(
            f"'i3 --get-socketpath' has exited with exit status {status}! "
            "Are you sure that i3 is running?"
        )
    output = completed.stdout.decode("utf-8", "surrogateescape")
    if not output:
        raise I3Error("Got no output from 'i3 --get-socketpath'!")
    if not output.endswith("\n"):
        raise I3Error("'i3 --get-socketpath': Expected a newline!")
    return output[:-1]


def build_payload(command: str) -> bytes:
    """Return the IPC message that asks i3 to run ``command``."""
    body = command.encode("utf-8")
    if len(body) > _MAX_COMMAND_LENGTH:
        raise I3Error(
            f"Command is too long! (expected <= {_MAX_COMMAND_LENGTH}, "
            f"got {len(body)})"
        )
    return _HEADER.pack(MAGIC, len(body), RUN_COMMAND) + body


def read_json_string(text: str) -> str:
    """Decode a JSON string literal; ``text`` starts after the opening quote.

    Anything after the closing quote is ignored. Unicode escapes are not
    supported and raise JSONError, as does a string without a closing quote.
    """
    result: list[str] = []
    escaping = False
    for char in text:
        if escaping:
            if char == "u":
                raise JSONError("Unicode escapes are not supported.")
            result.append(_JSON_ESCAPES.get(char, ""))
            escaping = False
        elif char == "\\":
            escaping = True
        elif char == '"':
            return "".join(result)
        else:
            result.append(char)
    raise JSONError("Unterminated JSON string.")


def _receive_reply(sock: socket.socket) -> bytes:
    data = bytearray()
    while True:
        if len(data) >= _HEADER.size and data.startswith(MAGIC):
            _, length, _ = _HEADER.unpack_from(data)
            if len(data) >= _HEADER.size + length:
                return bytes(data[_HEADER.size:_HEADER.size + length])
        chunk = sock.recv(4096)
        if not chunk:
            return bytes(data)
        data.extend(chunk)


def exec_command(command: str, socket_path: str) -> None:
    """Have i3 run ``command``; raise I3Error if it reports a failure."""
    if len(socket_path.encode("utf-8", "surrogateescape")) >= _SUN_PATH_SIZE:
        raise I3Error(
            f"Socket address '{socket_path}' is too long! "
            f"(expected < {_SUN_PATH_SIZE}, got {len(socket_path)})"
        )
    payload = build_payload(command)

    try:
        with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
            sock.connect(socket_path)
            sock.sendall(payload)
            reply = _receive_reply(sock)
    except OSError as exc:
        raise I3Error(f"Couldn't communicate with i3: {exc}") from exc

    response = reply.decode("utf-8", "replace")
    logger.debug("i3 IPC response: %s", response)

    if '"success":true' in response:
        return
    if '"success":false' in response:
        where = response.find('"error":')
        if where == -1:
            message = (
                "An error occurred while communicating with i3 "
                f"(executing command '{command}')!"
            )
        else:
            rest = response[where + len('"error":'):].lstrip(" ")
            try:
                if not rest.startswith('"'):
                    raise JSONError("Expected a string.")
                detail = read_json_string(rest[1:])
            except JSONError:
                detail = "received an invalid response."
            message = (
                "An error occurred while communicating with i3 "
                f"(executing command '{command}'): {detail}"
            )
        logger.error("%s", message)
        raise I3Error(message)
    message = (
        "A parsing error occurred while reading i3's response "
        f"(executing command '{command}')!"
    )
    logger.error("%s", message)
    raise I3Error(message)