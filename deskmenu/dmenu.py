"""Running dmenu (or a compatible menu program) and reading the user's choice."""

from __future__ import annotations

import logging
import subprocess

logger = logging.getLogger(__name__)

_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


class DmenuError(RuntimeError):
    """The menu program could not be run or did not finish normally."""


class Dmenu:
    """A menu program started through a shell.

    Entries are written to its standard input one per line; once the input
    is closed with display(), the program shows the menu and the selected
    line is read back with read_choice().
    """

    def __init__(self, command: str, shell: str = "/bin/sh") -> None:
        self.command = command
        self.shell = shell
        self._process: subprocess.Popen[bytes] | None = None

    def _require_process(self) -> subprocess.Popen[bytes]:
        if self._process is None:
            raise DmenuError("Dmenu has not been started; call run() first.")
        return self._process

    def run(self) -> None:
        """Start the menu program so it can receive entries."""
        logger.debug("Running dmenu: %s", self.command)
        try:
            self._process = subprocess.Popen(
                [self.shell, "-c", self.command],
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
            )
        except OSError as exc:
            raise DmenuError(f"Couldn't execute dmenu: {exc}") from exc

    def write(self, entry: str) -> None:
        """Send one menu entry.

        A BrokenPipeError signals that the menu program has gone away.
        """
        process = self._require_process()
        if process.stdin is None or process.stdin.closed:
            raise DmenuError("Dmenu input has already been closed.")
        process.stdin.write(entry.encode(_ENCODING, _ERRORS) + b"\n")

    def display(self) -> None:
        """Close the entry list; the menu program then shows itself."""
        logger.debug("Displaying dmenu.")
        process = self._require_process()
        if process.stdin is not None and not process.stdin.closed:
            process.stdin.close()

    def read_choice(self) -> str:
        """Wait for the menu program and return the chosen line.

        An empty string means that no choice was made (the program exited
        with a non-zero status, usually 1 when the user pressed Escape).
        """
        process = self._require_process()
        if process.stdin is not None and not process.stdin.closed:
            process.stdin.close()
        assert process.stdout is not None
        data = process.stdout.read()
        process.stdout.close()
        status = process.wait()

        if status < 0:
            logger.error("Dmenu exited abnormally!")
            raise DmenuError("Dmenu exited abnormally!")
        if status != 0:
            if status != 1:
                logger.info(
                    "Dmenu has exited with unexpected exit status %d.", status
                )
            return ""

        choice = data.decode(_ENCODING, _ERRORS)
        if choice.endswith("\n"):
            choice = choice[:-1]
        return choice