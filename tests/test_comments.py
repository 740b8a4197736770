import io

import pytest

from reviewdog.comments import (
    Comment,
    MultiCommentService,
    RawCommentWriter,
    UnifiedCommentWriter,
)


@pytest.mark.parametrize(
    "comment, want",
    [
        (
            Comment(path="/path/to/file", message="message", tool_name="tool name"),
            "/path/to/file: [tool name] message",
        ),
        (
            Comment(path="/path/to/file", column=14, message="message", tool_name="tool name"),
            "/path/to/file: [tool name] message",
        ),
        (
            Comment(path="/path/to/file", line=14, message="message", tool_name="tool name"),
            "/path/to/file:14: [tool name] message",
        ),
        (
            Comment(
                path="/path/to/file",
                line=14,
                column=7,
                message="line1\nline2",
                tool_name="tool name",
            ),
            "/path/to/file:14:7: [tool name] line1\nline2",
        ),
    ],
)
def test_unified_comment_writer(comment, want):
    buf = io.StringIO()
    UnifiedCommentWriter(buf).post(comment)
    assert buf.getvalue().strip("\n") == want


def test_raw_comment_writer():
    buf = io.StringIO()
    RawCommentWriter(buf).post(Comment(original_output="a\nb", message="ignored"))
    assert buf.getvalue() == "a\nb\n"


def test_multi_comment_service_post():
    buf1 = io.StringIO()
    buf2 = io.StringIO()
    service = MultiCommentService(RawCommentWriter(buf1), RawCommentWriter(buf2))
    want = "line1\nline2"
    service.post(Comment(original_output=want))
    assert buf1.getvalue().strip("\n") == want
    assert buf2.getvalue().strip("\n") == want
    service.flush()
    assert buf1.getvalue().strip("\n") == want


class _FakeBulk:
    def __init__(self):
        self.flushed = False
        self.posted = []

    def post(self, comment):
        self.posted.append(comment)

    def flush(self):
        self.flushed = True


def test_multi_comment_service_flush():
    f1 = _FakeBulk()
    f2 = _FakeBulk()
    MultiCommentService(f1, f2).flush()
    assert f1.flushed and f2.flushed


def test_multi_comment_service_nested_flush():
    inner = _FakeBulk()
    MultiCommentService(MultiCommentService(inner), RawCommentWriter(io.StringIO())).flush()
    assert inner.flushed is True


class _Failing:
    def post(self, comment):
        raise RuntimeError("post failed")


def test_multi_comment_service_stops_at_error():
    after = _FakeBulk()
    service = MultiCommentService(_Failing(), after)
    with pytest.raises(RuntimeError, match="post failed"):
        service.post(Comment(message="m"))
    assert after.posted == []


def test_multi_comment_service_copies_services():
    services = [_FakeBulk()]
    service = MultiCommentService(*services)
    extra = _FakeBulk()
    services.append(extra)
    service.post(Comment(message="m"))
    assert extra.posted == []
    assert services[0].posted == [Comment(message="m")]