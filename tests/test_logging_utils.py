import logging
import sys

import pytest

from jshellpanel.logging_utils import StreamToLogger, setup_logging, ui_log


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    saved = list(root.handlers), root.level
    stdout, stderr = sys.stdout, sys.stderr
    yield
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()
    for h in saved[0]:
        root.addHandler(h)
    root.setLevel(saved[1])
    sys.stdout, sys.stderr = stdout, stderr


def test_setup_logging_writes_session_files(tmp_path, restore_logging):
    logger = setup_logging({"debug": True}, "abc123", log_dir=tmp_path, redirect_std=False)
    assert logger.level == logging.DEBUG
    logging.getLogger("jshellpanel.test").info("hello file")
    ui_log("clicked", button="run")
    for h in logging.getLogger().handlers + logging.getLogger("JShellPanel.UI").handlers:
        h.flush()

    latest = (tmp_path / "latest.log").read_text(encoding="utf-8")
    assert "hello file" in latest
    assert "session=abc123" in latest
    assert (tmp_path / "debug.log").exists()
    ui_state = (tmp_path / "ui_state.log").read_text(encoding="utf-8")
    assert 'clicked {"button": "run"}' in ui_state
    assert sys.stdout is not None and not isinstance(sys.stdout, StreamToLogger)


def test_setup_logging_replaces_previous_handlers(tmp_path, restore_logging):
    setup_logging({}, "one", log_dir=tmp_path, redirect_std=False)
    count = len(logging.getLogger().handlers)
    setup_logging({}, "two", log_dir=tmp_path, redirect_std=False)
    assert len(logging.getLogger().handlers) == count
    assert len(logging.getLogger("JShellPanel.UI").handlers) == 1


def test_stream_to_logger_splits_lines(caplog):
    stream = StreamToLogger(logging.getLogger("stdout-test"), logging.INFO)
    with caplog.at_level(logging.INFO, logger="stdout-test"):
        stream.write("first\nsec")
        stream.write("ond\n\n")
        stream.write("tail")
        stream.flush()
    assert [r.getMessage() for r in caplog.records] == ["first", "second", "tail"]
