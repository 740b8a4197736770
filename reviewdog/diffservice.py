"""Sources of the diff that results are filtered by."""

from __future__ import annotations

import subprocess
import threading
from typing import Optional, Sequence


class DiffString:
    """A diff given as text."""

    def __init__(self, diff: str | bytes, strip: int) -> None:
        self._data = diff.encode("utf-8") if isinstance(diff, str) else bytes(diff)
        self.strip = strip

    def diff(self) -> bytes:
        """Return the diff."""
        return self._data


class DiffCmd:
    """A diff produced by running a command; the output is cached."""

    def __init__(self, command: Sequence[str], strip: int) -> None:
        self.command = list(command)
        self.strip = strip
        self._out: Optional[bytes] = None
        self._lock = threading.Lock()

    def diff(self) -> bytes:
        """Run the command once and return its output.

        A non-zero exit status is accepted when there is output, since
        ``git diff`` exits with 1 when differences exist.
        """
        with self._lock:
            if self._out is not None:
                return self._out
            proc = subprocess.run(
                self.command, stdout=subprocess.PIPE, stderr=subprocess.PIPE, check=False
            )
            if proc.returncode != 0 and not proc.stdout:
                raise subprocess.CalledProcessError(
                    proc.returncode, self.command, proc.stdout, proc.stderr
                )
            self._out = proc.stdout
            return self._out


class EmptyDiff:
    """A diff with no content."""

    strip = 0

    def diff(self) -> bytes:
        """Return an empty diff."""
        return b""