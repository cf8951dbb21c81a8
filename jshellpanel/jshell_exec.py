"""Execute jshell scripts as a child process.

The script is staged in a temporary ``.jsh`` file, jshell is launched on it
from a background thread and the output is streamed to the configured
owner. Lifecycle changes are published as :class:`ExecEvent` objects and
problems as :class:`ErrorEvent` objects.
"""

from __future__ import annotations

import logging
import os
import shutil
import sys
import tempfile
import threading
from pathlib import Path
from typing import Iterable, List, Optional

from jshellpanel.core import jshell_executable
from jshellpanel.events import ErrorEvent, ExecEvent, ExecEventType, ListenerList
from jshellpanel.process_output import OutputType, StreamingProcessOutput


LOGGER = logging.getLogger(__name__)

EXIT_COMMAND = "/exit"


class JShellExec:
    def __init__(self, executable: Optional[str] = None, class_path: Optional[str] = None):
        self.debug = False
        self.streaming_process_owner = None
        self.class_path = class_path
        self._executable = executable
        self._available: Optional[bool] = None
        self._execution: Optional[StreamingProcessOutput] = None
        self._finished = threading.Event()
        self._finished.set()
        self._state_lock = threading.Lock()
        self._exec_listeners = ListenerList()
        self._error_listeners = ListenerList()
        self.exit_code: Optional[int] = None

    def _debug_msg(self, msg, *args):
        if self.debug:
            LOGGER.debug(msg, *args)

    # --------------- Configuration ---------------
    @property
    def executable(self) -> str:
        return self._executable or jshell_executable()

    @executable.setter
    def executable(self, value: Optional[str]):
        self._executable = value or None
        self._available = None

    def is_available(self) -> bool:
        if self._available is None:
            exe = self.executable
            self._available = Path(exe).is_file() or shutil.which(exe) is not None
        return self._available

    @property
    def output_type(self) -> OutputType:
        if self.streaming_process_owner is not None:
            return self.streaming_process_owner.output_type
        return OutputType.BOTH

    def process_output(self, line: str, stdout: bool) -> None:
        if self.streaming_process_owner is not None:
            self.streaming_process_owner.process_output(line, stdout)
        elif stdout:
            print(line, file=sys.stdout, flush=True)
        else:
            print(line, file=sys.stderr, flush=True)

    def is_running(self) -> bool:
        return self._execution is not None

    # --------------- Execution ---------------
    def build_command(self, script_path, runtime_flags: Optional[Iterable[str]] = None,
                      remote_runtime_flags: Optional[Iterable[str]] = None,
                      compiler_flags: Optional[Iterable[str]] = None) -> List[str]:
        """Assemble the jshell command line.

        Runtime flags get -J (jshell's own VM), remote runtime flags -R (the VM
        executing the code, e.g. -javaagent:...) and compiler flags -C.
        """
        cmd = [self.executable]
        if self.class_path:
            cmd += ["--class-path", self.class_path]
        cmd += ["-J" + f for f in (runtime_flags or [])]
        cmd += ["-R" + f for f in (remote_runtime_flags or [])]
        cmd += ["-C" + f for f in (compiler_flags or [])]
        cmd.append(str(script_path))
        return cmd

    def run_script(self, code: str, runtime_flags: Optional[Iterable[str]] = None,
                   remote_runtime_flags: Optional[Iterable[str]] = None,
                   compiler_flags: Optional[Iterable[str]] = None) -> bool:
        """Start executing ``code``; returns False if the run could not be set up."""
        self.stop_script()

        try:
            fd, tmp_name = tempfile.mkstemp(prefix="jshell-", suffix=".jsh")
            os.close(fd)
            tmp_file = Path(tmp_name)
            self._debug_msg("tmpfile: %s", tmp_file)
        except OSError as e:
            self.show_error_message("Failed to create temporary file for script!\nCannot execute script!", e)
            self.notify_exec_listeners(ExecEvent(self, ExecEventType.SCRIPT_RUN_SETUP_FAILURE))
            return False

        # jshell stays interactive unless told to leave
        if EXIT_COMMAND not in code.lower():
            code += "\n" + EXIT_COMMAND + "\n"

        try:
            tmp_file.write_text(code, encoding="utf-8")
        except OSError as e:
            tmp_file.unlink(missing_ok=True)
            self.show_error_message(f"Failed to write script to temporary file: {tmp_file}\n{e}")
            self.notify_exec_listeners(ExecEvent(self, ExecEventType.SCRIPT_RUN_SETUP_FAILURE))
            return False

        cmd = self.build_command(tmp_file, runtime_flags, remote_runtime_flags, compiler_flags)
        self._debug_msg("Command: %s", cmd)

        execution = StreamingProcessOutput(self)
        finished = threading.Event()
        with self._state_lock:
            self._execution = execution
            self._finished = finished
        self.exit_code = None

        self.notify_exec_listeners(ExecEvent(self, ExecEventType.SCRIPT_RUN))
        worker = threading.Thread(
            target=self._monitor, args=(execution, cmd, tmp_file, finished),
            name="jshell-exec", daemon=True,
        )
        worker.start()
        return True

    def _monitor(self, execution: StreamingProcessOutput, cmd: List[str], tmp_file: Path,
                 finished: threading.Event) -> None:
        try:
            rc = execution.monitor(cmd)
            self.exit_code = rc
            if execution.destroyed:
                self._debug_msg("Stopped run exited with %s", rc)
            elif rc != 0:
                self.notify_exec_listeners(ExecEvent(self, ExecEventType.SCRIPT_RUN_FAILURE))
            else:
                self.notify_exec_listeners(ExecEvent(self, ExecEventType.SCRIPT_RUN_SUCCESS))
        except Exception as e:
            if execution.destroyed:
                self._debug_msg("Run stopped before launch: %s", e)
            else:
                self.show_error_message("Failed to execute script!", e)
                self.notify_exec_listeners(ExecEvent(self, ExecEventType.SCRIPT_RUN_FAILURE))
        finally:
            with self._state_lock:
                if self._execution is execution:
                    self._execution = None
            self.notify_exec_listeners(ExecEvent(self, ExecEventType.SCRIPT_FINISHED))
            try:
                tmp_file.unlink(missing_ok=True)
            except OSError as e:
                LOGGER.warning("Could not delete temporary script %s: %s", tmp_file, e)
            finished.set()

    def run_script_file(self, path, runtime_flags: Optional[Iterable[str]] = None,
                        remote_runtime_flags: Optional[Iterable[str]] = None,
                        compiler_flags: Optional[Iterable[str]] = None) -> bool:
        try:
            code = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            self.show_error_message(f"Failed to read script: {path}", e)
            self.notify_exec_listeners(ExecEvent(self, ExecEventType.SCRIPT_RUN_SETUP_FAILURE))
            return False
        return self.run_script(code, runtime_flags, remote_runtime_flags, compiler_flags)

    def stop_script(self) -> None:
        with self._state_lock:
            execution = self._execution
            self._execution = None
        if execution is not None:
            execution.destroy()
            self.notify_exec_listeners(ExecEvent(self, ExecEventType.SCRIPT_STOP))

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the current run has finished; False on timeout."""
        return self._finished.wait(timeout)

    # --------------- Errors ---------------
    def show_error_message(self, msg: str, exception: Optional[BaseException] = None) -> None:
        if not self._error_listeners:
            if exception is not None:
                LOGGER.error(msg, exc_info=exception)
            else:
                LOGGER.error(msg)
        else:
            self.notify_error_listeners(ErrorEvent(self, msg, exception))

    # --------------- Listeners ---------------
    def add_exec_listener(self, listener) -> None:
        self._exec_listeners.add(listener)

    def remove_exec_listener(self, listener) -> None:
        self._exec_listeners.remove(listener)

    def notify_exec_listeners(self, event: ExecEvent) -> None:
        self._debug_msg("ExecEvent: %s", event)
        self._exec_listeners.notify(event)

    def add_error_listener(self, listener) -> None:
        self._error_listeners.add(listener)

    def remove_error_listener(self, listener) -> None:
        self._error_listeners.remove(listener)

    def notify_error_listeners(self, event: ErrorEvent) -> None:
        self._debug_msg("Error: %s%s", event.message, "\n" + repr(event.exception) if event.has_exception else "")
        self._error_listeners.notify(event)
