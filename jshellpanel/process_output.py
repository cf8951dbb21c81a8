"""Run one child process and stream its stdout/stderr line by line to an owner.

The owner is any object exposing ``output_type`` (an :class:`OutputType`) and
``process_output(line, stdout)``.
"""

from __future__ import annotations

import logging
import subprocess
import threading
from enum import Enum
from typing import IO, Dict, List, Optional, Sequence


LOGGER = logging.getLogger(__name__)

# Seconds to wait after terminate() before escalating to kill()
TERMINATE_GRACE = 3.0


class OutputType(Enum):
    STDOUT = "stdout"
    STDERR = "stderr"
    BOTH = "both"

    def wants(self, stdout: bool) -> bool:
        if self is OutputType.BOTH:
            return True
        return (self is OutputType.STDOUT) == bool(stdout)


class StreamingProcessOutput:
    def __init__(self, owner):
        self.owner = owner
        self.proc: Optional[subprocess.Popen] = None
        self.exit_code: Optional[int] = None
        self.destroyed = False
        self._lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        proc = self.proc
        return proc is not None and proc.poll() is None

    def _output_type(self) -> OutputType:
        return getattr(self.owner, "output_type", OutputType.BOTH) or OutputType.BOTH

    def _pump(self, stream: IO[bytes], stdout: bool) -> None:
        try:
            for raw in iter(stream.readline, b""):
                line = raw.decode("utf-8", errors="replace").rstrip("\r\n")
                if self._output_type().wants(stdout):
                    try:
                        self.owner.process_output(line, stdout)
                    except Exception:
                        LOGGER.exception("Output owner failed on line %r", line)
        except (OSError, ValueError) as e:
            # Pipe closed underneath us after destroy()
            LOGGER.debug("Stream reader stopped: %s", e)
        finally:
            stream.close()

    def monitor(self, cmd: Sequence[str], cwd: Optional[str] = None,
                env: Optional[Dict[str, str]] = None) -> int:
        """Start ``cmd`` and block until it exits; returns the exit code."""
        with self._lock:
            if self.destroyed:
                raise RuntimeError("Execution was destroyed before it started")
            self.proc = subprocess.Popen(
                list(cmd),
                cwd=cwd,
                env=env,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        readers: List[threading.Thread] = [
            threading.Thread(target=self._pump, args=(self.proc.stdout, True), daemon=True),
            threading.Thread(target=self._pump, args=(self.proc.stderr, False), daemon=True),
        ]
        for t in readers:
            t.start()
        rc = self.proc.wait()
        for t in readers:
            t.join()
        self.exit_code = rc
        LOGGER.debug("Process exited | rc=%s", rc)
        return rc

    def destroy(self) -> None:
        with self._lock:
            self.destroyed = True
            proc = self.proc
        if proc is None or proc.poll() is not None:
            return
        proc.terminate()
        try:
            proc.wait(timeout=TERMINATE_GRACE)
        except subprocess.TimeoutExpired:
            LOGGER.warning("Process %s ignored terminate, killing", proc.pid)
            proc.kill()
