import os
import pathlib
import sys
import tempfile
import textwrap

# Keep settings and logs of the test run away from the real home folder
os.environ.setdefault("JSHELLPANEL_HOME", tempfile.mkdtemp(prefix="jshellpanel-test-"))
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

repo_root = pathlib.Path(__file__).resolve().parents[1]
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

import pytest


# Stand-in for jshell: interprets a tiny command language so the real
# process path (temp file, pipes, exit codes) can be exercised without a JDK.
#   print TEXT   -> TEXT on stdout
#   err TEXT     -> TEXT on stderr
#   args         -> the command line options on stdout
#   path         -> the script path on stdout
#   dump         -> every script line, prefixed with "| "
#   sleep SECS   -> pause
#   /exit [N]    -> exit with N (default 0)
# Reaching the end of the script without /exit exits with 99, the way a
# real jshell would keep waiting for input.
FAKE_JSHELL = textwrap.dedent("""\
    #!{python}
    import sys
    import time

    script = sys.argv[-1]
    with open(script, encoding="utf-8") as f:
        lines = f.read().splitlines()
    for line in lines:
        cmd, _, rest = line.strip().partition(" ")
        if cmd.lower() == "/exit":
            sys.exit(int(rest) if rest.strip() else 0)
        elif cmd == "print":
            print(rest, flush=True)
        elif cmd == "err":
            print(rest, file=sys.stderr, flush=True)
        elif cmd == "args":
            print(" ".join(sys.argv[1:-1]), flush=True)
        elif cmd == "dump":
            for l in lines:
                print("| " + l, flush=True)
        elif cmd == "path":
            print(script, flush=True)
        elif cmd == "sleep":
            time.sleep(float(rest))
    sys.exit(99)
""")


@pytest.fixture
def fake_jshell(tmp_path):
    if sys.platform.startswith("win"):
        pytest.skip("fake jshell relies on a shebang line")
    path = tmp_path / "jshell"
    path.write_text(FAKE_JSHELL.format(python=sys.executable), encoding="utf-8")
    path.chmod(0o755)
    return str(path)


@pytest.fixture
def missing_jshell(tmp_path):
    return str(tmp_path / "no-such-dir" / "jshell")


class RecordingOwner:
    """Streaming process owner that keeps every line it is handed."""

    def __init__(self, output_type=None):
        from jshellpanel.process_output import OutputType
        self.output_type = output_type or OutputType.BOTH
        self.lines = []

    def process_output(self, line, stdout):
        self.lines.append((line, stdout))

    def stdout_lines(self):
        return [l for l, out in self.lines if out]

    def stderr_lines(self):
        return [l for l, out in self.lines if not out]


@pytest.fixture
def owner():
    return RecordingOwner()
