import sys

import pytest

from conftest import RecordingOwner
from jshellpanel.process_output import OutputType, StreamingProcessOutput


def _python(code):
    return [sys.executable, "-c", code]


def test_output_type_wants():
    assert OutputType.BOTH.wants(True) and OutputType.BOTH.wants(False)
    assert OutputType.STDOUT.wants(True) and not OutputType.STDOUT.wants(False)
    assert OutputType.STDERR.wants(False) and not OutputType.STDERR.wants(True)


def test_monitor_streams_both_pipes(owner):
    execution = StreamingProcessOutput(owner)
    rc = execution.monitor(_python(
        "import sys\n"
        "print('one', flush=True)\n"
        "print('bad', file=sys.stderr, flush=True)\n"
        "print('two', flush=True)\n"
        "sys.exit(5)\n"
    ))
    assert rc == 5
    assert execution.exit_code == 5
    assert owner.stdout_lines() == ["one", "two"]
    assert owner.stderr_lines() == ["bad"]
    assert not execution.is_running


def test_stderr_only_owner_drains_stdout():
    owner = RecordingOwner(OutputType.STDERR)
    execution = StreamingProcessOutput(owner)
    # enough stdout to fill a pipe buffer if nobody read it
    rc = execution.monitor(_python(
        "import sys\n"
        "sys.stdout.write(('y' * 100 + '\\n') * 2000)\n"
        "print('done', file=sys.stderr)\n"
    ))
    assert rc == 0
    assert owner.lines == [("done", False)]


def test_undecodable_bytes_are_replaced(owner):
    execution = StreamingProcessOutput(owner)
    execution.monitor(_python("import sys; sys.stdout.buffer.write(b'caf\\xe9\\r\\n')"))
    assert owner.stdout_lines() == ["caf\ufffd"]


def test_destroy_before_start_prevents_launch(owner):
    execution = StreamingProcessOutput(owner)
    execution.destroy()
    assert execution.destroyed
    with pytest.raises(RuntimeError):
        execution.monitor(_python("print('never')"))
    assert owner.lines == []


def test_destroy_after_exit_is_harmless(owner):
    execution = StreamingProcessOutput(owner)
    execution.monitor(_python("pass"))
    execution.destroy()
    assert execution.exit_code == 0


def test_missing_executable_raises(owner, missing_jshell):
    with pytest.raises(OSError):
        StreamingProcessOutput(owner).monitor([missing_jshell])
