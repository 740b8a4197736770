"""Parser for unified diffs, including git's extended headers."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import IO, Optional, Union

_TOKEN_DIFF = "diff"
_TOKEN_OLD_FILE = "---"
_TOKEN_NEW_FILE = "+++"
_TOKEN_START_HUNK = "@@"
_TOKEN_UNCHANGED_LINE = " "
_TOKEN_ADDED_LINE = "+"
_TOKEN_DELETED_LINE = "-"
_TOKEN_NO_NEWLINE_AT_EOF = "\\"

_INT_RE = re.compile(r"[+-]?[0-9]+")
_OCTAL_DIGITS = frozenset(b"01234567")
_SIMPLE_ESCAPES = {
    ord("a"): 0x07,
    ord("b"): 0x08,
    ord("t"): 0x09,
    ord("n"): 0x0A,
    ord("v"): 0x0B,
    ord("f"): 0x0C,
    ord("r"): 0x0D,
    ord('"'): ord('"'),
    ord("\\"): ord("\\"),
}

Source = Union[str, bytes, IO[str], IO[bytes]]


class DiffParseError(ValueError):
    """Base class of errors raised while parsing a diff."""


class NoNewFileError(DiffParseError):
    """A '---' header line was not followed by a '+++' line."""

    def __init__(self) -> None:
        super().__init__("no expected new file line")


class NoHunksError(DiffParseError):
    """A file header was not followed by any hunk."""

    def __init__(self) -> None:
        super().__init__("no expected hunks")


class InvalidHunkRangeError(DiffParseError):
    """A hunk header line ('@@ -l,s +l,s @@') could not be parsed."""

    def __init__(self, invalid: str) -> None:
        super().__init__(f"invalid hunk range: {invalid}")
        self.invalid = invalid


class LineType(enum.IntEnum):
    """Kind of a diff body line."""

    UNCHANGED = 0
    ADDED = 1
    DELETED = 2


@dataclass
class Line:
    """One body line of a hunk.

    ``lnum_diff`` is the position of the line counted from the first hunk
    header of the file; ``lnum_old`` is 0 for added lines and ``lnum_new``
    is 0 for deleted lines.
    """

    type: LineType
    content: str
    lnum_diff: int = 0
    lnum_old: int = 0
    lnum_new: int = 0


@dataclass
class Hunk:
    """A change hunk of a file diff."""

    start_line_old: int = 0
    line_length_old: int = 0
    start_line_new: int = 0
    line_length_new: int = 0
    section: str = ""
    lines: list[Line] = field(default_factory=list)


@dataclass
class FileDiff:
    """The unified diff of a single file."""

    path_old: str = ""
    path_new: str = ""
    time_old: str = ""
    time_new: str = ""
    hunks: list[Hunk] = field(default_factory=list)
    extended: list[str] = field(default_factory=list)


@dataclass
class _HunkRange:
    lold: int
    sold: int
    lnew: int
    snew: int
    section: str = ""


class _Reader:
    """Line reader over a text with lookahead."""

    def __init__(self, text: str) -> None:
        self._text = text
        self._pos = 0

    def peek(self, n: int) -> Optional[str]:
        if self._pos + n > len(self._text):
            return None
        return self._text[self._pos : self._pos + n]

    def readline(self) -> str:
        if self._pos >= len(self._text):
            return ""
        end = self._text.find("\n", self._pos)
        if end == -1:
            line = self._text[self._pos :]
            self._pos = len(self._text)
            return line
        line = self._text[self._pos : end]
        self._pos = end + 1
        if line.endswith("\r"):
            line = line[:-1]
        return line


def _read_source(source: Source) -> str:
    data = source.read() if hasattr(source, "read") else source
    if isinstance(data, (bytes, bytearray)):
        return bytes(data).decode("utf-8", errors="replace")
    return data


def parse_multi_file(source: Source) -> list[FileDiff]:
    """Parse a multi-file unified diff.

    Parsing stops silently at the first file that cannot be parsed; the
    files parsed before it are returned.
    """
    reader = _Reader(_read_source(source))
    files: list[FileDiff] = []
    while True:
        try:
            fd = _parse_file(reader)
        except DiffParseError:
            break
        if fd is None:
            break
        files.append(fd)
    return files


def parse_file(source: Source) -> Optional[FileDiff]:
    """Parse the unified diff of one file; None if there is nothing to parse."""
    return _parse_file(_Reader(_read_source(source)))


def _parse_file(reader: _Reader) -> Optional[FileDiff]:
    fd = FileDiff(extended=_parse_extended_header(reader))
    head = reader.peek(len(_TOKEN_OLD_FILE))
    if head is None:
        return fd if fd.extended else None
    if head.startswith(_TOKEN_OLD_FILE):
        fd.path_old, fd.time_old = _parse_file_header(reader.readline())
        head = reader.peek(len(_TOKEN_NEW_FILE))
        if head is None or not head.startswith(_TOKEN_NEW_FILE):
            raise NoNewFileError()
        fd.path_new, fd.time_new = _parse_file_header(reader.readline())
    fd.hunks = _parse_hunks(reader)
    return fd


def _parse_hunks(reader: _Reader) -> list[Hunk]:
    head = reader.peek(len(_TOKEN_OLD_FILE))
    if head is None:
        raise NoHunksError()
    if not head.startswith(_TOKEN_START_HUNK):
        head = reader.peek(len(_TOKEN_DIFF))
        if head is not None and head.startswith(_TOKEN_DIFF):
            # git diff may contain a file diff without hunks,
            # e.g. when an empty file is deleted.
            return []
        raise NoHunksError()
    parser = _HunkParser(reader)
    hunks: list[Hunk] = []
    while (hunk := parser.parse()) is not None:
        hunks.append(hunk)
    return hunks


def _parse_file_header(line: str) -> tuple[str, str]:
    """Split a '---'/'+++' header line into filename and timestamp."""
    rest = line[len(_TOKEN_OLD_FILE) + 1 :]
    name, tab, timestamp = rest.rpartition("\t")
    if not tab:
        return unquote_c_style(rest), ""
    return unquote_c_style(name), timestamp


def unquote_c_style(text: str) -> str:
    """Undo git's C-style quoting of a path; unquoted text is returned as is."""
    if not text.startswith('"'):
        return text
    if text.endswith('"'):
        text = text[:-1]
    if text.startswith('"'):
        text = text[1:]

    data = text.encode("utf-8", errors="surrogateescape")
    out = bytearray()
    pos = 0
    size = len(data)
    while pos < size:
        ch = data[pos]
        pos += 1
        if ch != ord("\\"):
            out.append(ch)
            continue
        if pos >= size:
            break
        ch = data[pos]
        pos += 1
        if ch in _SIMPLE_ESCAPES:
            out.append(_SIMPLE_ESCAPES[ch])
        elif ord("0") <= ch <= ord("9"):
            octal = data[pos - 1 : pos + 2]
            pos += len(octal) - 1
            if len(octal) < 3:
                out += octal
                break
            if all(b in _OCTAL_DIGITS for b in octal) and int(octal, 8) <= 0xFF:
                out.append(int(octal, 8))
            else:
                out += octal
        else:
            out.append(ch)
    return out.decode("utf-8", errors="replace")


def _parse_extended_header(reader: _Reader) -> list[str]:
    extended: list[str] = []
    head = reader.peek(len(_TOKEN_DIFF))
    if head is None or not head.startswith(_TOKEN_DIFF):
        return extended
    extended.append(reader.readline())
    while True:
        head = reader.peek(len(_TOKEN_DIFF))
        if head is None or head.startswith(_TOKEN_OLD_FILE) or head.startswith(_TOKEN_DIFF):
            break
        extended.append(reader.readline())
    return extended


class _HunkParser:
    """Parses consecutive hunks of one file, tracking the diff position."""

    def __init__(self, reader: _Reader) -> None:
        self._reader = reader
        self._lnum_diff = 0

    def parse(self) -> Optional[Hunk]:
        head = self._reader.peek(len(_TOKEN_START_HUNK))
        if head is None or not head.startswith(_TOKEN_START_HUNK):
            return None
        hr = _parse_hunk_range(self._reader.readline())
        hunk = Hunk(
            start_line_old=hr.lold,
            line_length_old=hr.sold,
            start_line_new=hr.lnew,
            line_length_new=hr.snew,
            section=hr.section,
        )
        lold, lnew = hr.lold, hr.lnew
        while not self._done(lold, lnew, hr):
            token = self._reader.peek(1)
            if token is None:
                break
            if token == _TOKEN_NO_NEWLINE_AT_EOF:
                self._reader.readline()
                continue
            if token not in (_TOKEN_UNCHANGED_LINE, _TOKEN_ADDED_LINE, _TOKEN_DELETED_LINE):
                break
            self._lnum_diff += 1
            content = self._reader.readline()[len(token) :]
            if token == _TOKEN_UNCHANGED_LINE:
                line = Line(LineType.UNCHANGED, content, self._lnum_diff, lold, lnew)
                lold += 1
                lnew += 1
            elif token == _TOKEN_ADDED_LINE:
                line = Line(LineType.ADDED, content, self._lnum_diff, 0, lnew)
                lnew += 1
            else:
                line = Line(LineType.DELETED, content, self._lnum_diff, lold, 0)
                lold += 1
            hunk.lines.append(line)
        # The next hunk header also takes a position.
        self._lnum_diff += 1
        return hunk

    def _done(self, lold: int, lnew: int, hr: _HunkRange) -> bool:
        end = lold >= hr.lold + hr.sold and lnew >= hr.lnew + hr.snew
        head = self._reader.peek(1)
        return head is None or (head != _TOKEN_NO_NEWLINE_AT_EOF and end)


def _parse_hunk_range(rangeline: str) -> _HunkRange:
    """Parse '@@ -lold[,sold] +lnew[,snew] @@[ section]'."""
    parts = rangeline.split(" ", 4)
    if len(parts) < 4 or parts[0] != "@@" or parts[3] != "@@":
        raise InvalidHunkRangeError(rangeline)
    old, new = parts[1], parts[2]
    if not old.startswith("-") or not new.startswith("+"):
        raise InvalidHunkRangeError(rangeline)
    try:
        lold, sold = _parse_ls(old[1:])
        lnew, snew = _parse_ls(new[1:])
    except ValueError:
        raise InvalidHunkRangeError(rangeline) from None
    section = parts[4] if len(parts) == 5 else ""
    return _HunkRange(lold, sold, lnew, snew, section)


def _parse_ls(text: str) -> tuple[int, int]:
    """Parse 'l[,s]'; s defaults to 1."""
    start, comma, length = text.partition(",")
    if not comma:
        return _atoi(start), 1
    return _atoi(start), _atoi(length)


def _atoi(text: str) -> int:
    if not _INT_RE.fullmatch(text):
        raise ValueError(f"invalid integer: {text!r}")
    return int(text)