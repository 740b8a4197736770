import subprocess
import sys
import threading

import pytest

from reviewdog.diffservice import DiffCmd, DiffString, EmptyDiff

DIFFTEXT = """diff --git a/golint.old.go b/golint.new.go
index 34cacb9..a727dd3 100644
--- a/golint.old.go
+++ b/golint.new.go
@@ -2,6 +2,12 @@ package test
 
 var V int
 
+var NewError1 int
+
 // invalid func comment
 func F() {
 }
+
+// invalid func comment2
+func F2() {
+}
"""


def test_diff_string():
    d = DiffString(DIFFTEXT, 1)
    assert d.diff().decode("utf-8") == DIFFTEXT
    assert d.strip == 1


def _python(code, *args):
    return [sys.executable, "-c", code, *args]


def test_diff_cmd_runs_once_and_caches(tmp_path):
    counter = tmp_path / "counter"
    counter.write_text("")
    code = (
        "import pathlib, sys\n"
        "p = pathlib.Path(sys.argv[1])\n"
        "p.write_text(p.read_text() + 'x')\n"
        "sys.stdout.write('diff output')\n"
    )
    d = DiffCmd(_python(code, str(counter)), 1)
    results = []

    def worker():
        results.append(d.diff())

    threads = [threading.Thread(target=worker) for _ in range(3)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results == [b"diff output"] * 3
    assert counter.read_text() == "x"
    assert d.strip == 1


def test_diff_cmd_nonzero_exit_with_output():
    code = "import sys; sys.stdout.write('changes'); sys.exit(1)"
    assert DiffCmd(_python(code), 0).diff() == b"changes"


def test_diff_cmd_nonzero_exit_without_output():
    code = "import sys; sys.exit(2)"
    with pytest.raises(subprocess.CalledProcessError) as excinfo:
        DiffCmd(_python(code), 0).diff()
    assert excinfo.value.returncode == 2


def test_diff_cmd_missing_program(tmp_path):
    with pytest.raises(OSError):
        DiffCmd([str(tmp_path / "no-such-program")], 0).diff()


def test_empty_diff():
    d = EmptyDiff()
    assert d.diff() == b""
    assert d.strip == 0