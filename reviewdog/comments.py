"""Comment services that write review results."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, TextIO


@dataclass
class Comment:
    """A result to post as a review comment."""

    path: str = ""
    line: int = 0
    column: int = 0
    message: str = ""
    original_output: str = ""
    tool_name: str = ""


class _CommentService(Protocol):
    def post(self, comment: Comment) -> Any: ...


class MultiCommentService:
    """Posts each comment to all of the given services, in order."""

    def __init__(self, *services: _CommentService) -> None:
        self._services = list(services)

    def post(self, comment: Comment) -> None:
        """Post the comment to every service; stops at the first error."""
        for service in self._services:
            service.post(comment)

    def flush(self) -> None:
        """Flush every service that supports flushing."""
        for service in self._services:
            flush = getattr(service, "flush", None)
            if callable(flush):
                flush()


class RawCommentWriter:
    """Writes the original tool output of each comment without formatting."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream

    def post(self, comment: Comment) -> None:
        """Write the comment's original output as one entry."""
        print(comment.original_output, file=self._stream)


class UnifiedCommentWriter:
    """Writes comments as '<file>[:<lnum>[:<col>]]: [<tool name>] <message>'."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream

    def post(self, comment: Comment) -> None:
        """Write the comment in the unified format."""
        text = comment.path
        if comment.line > 0:
            text += f":{comment.line}"
            if comment.column > 0:
                text += f":{comment.column}"
        text += f": [{comment.tool_name}] {comment.message}"
        print(text, file=self._stream)