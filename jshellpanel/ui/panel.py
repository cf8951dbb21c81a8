import logging
from pathlib import Path

from PySide6.QtCore import Qt, QObject, Signal
from PySide6.QtGui import QColor, QFont, QFontDatabase, QTextCharFormat, QTextCursor
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton, QPlainTextEdit,
    QSplitter, QFileDialog, QMessageBox, QStyle
)

from jshellpanel.events import ExecEventType, ListenerList, PanelEvent, PanelEventType
from jshellpanel.jshell_exec import JShellExec
from jshellpanel.logging_utils import ui_log
from jshellpanel.process_output import OutputType
from jshellpanel.settings_store import DEFAULT_SETTINGS, split_flags
from jshellpanel.theme import BASE_PALETTE
from jshellpanel.ui.highlighter import JavaHighlighter

SCRIPT_FILTER = "JShell script (*.jsh *.jshell);;All files (*)"
OUTPUT_FILTER = "Text file (*.txt);;All files (*)"
UNAVAILABLE_TEXT = "jshell executable not found (Java 9+ only) - scripting disabled!"


class _ExecBridge(QObject):
    """Carries executor callbacks from worker threads onto the UI thread."""
    output = Signal(str, bool)
    exec_event = Signal(object)
    error_event = Signal(object)


class ScriptEditor(QPlainTextEdit):
    """Plain text editor that keeps the indentation of the previous line."""

    def keyPressEvent(self, event):
        if event.key() in (Qt.Key_Return, Qt.Key_Enter) and not event.modifiers():
            line = self.textCursor().block().text()
            indent = line[:len(line) - len(line.lstrip())]
            super().keyPressEvent(event)
            if indent:
                self.insertPlainText(indent)
            return
        if event.key() == Qt.Key_Tab and not event.modifiers():
            self.insertPlainText("  ")
            return
        super().keyPressEvent(event)


class JShellPanel(QWidget):
    """Edit a jshell script, run it and watch its output.

    The top half holds the script editor with Load/Save/Run/Stop, the bottom
    half the output pane with Clear/Save. Exec events from the underlying
    :class:`JShellExec` are re-published to listeners registered here, on the
    UI thread.
    """

    # The panel itself acts as the streaming process owner
    output_type = OutputType.BOTH

    def __init__(self, settings=None, parent=None, jshell_exec=None):
        super().__init__(parent)
        self.settings = {**DEFAULT_SETTINGS, **(settings or {})}
        self.logger = logging.getLogger("JShellPanel.Panel")
        self._output_logger = logging.getLogger("JShellPanel.ScriptOutput")
        self._palette = dict(BASE_PALETTE)
        self._exec_listeners = ListenerList()
        self._panel_listeners = ListenerList()

        self._bridge = _ExecBridge(self)
        self._bridge.output.connect(self._append_output)
        self._bridge.exec_event.connect(self._on_exec_event)
        self._bridge.error_event.connect(self._on_error_event)

        self.exec = jshell_exec or JShellExec()
        self.apply_settings(self.settings)
        self.exec.streaming_process_owner = self
        self.exec.add_exec_listener(self._bridge.exec_event.emit)
        self.exec.add_error_listener(self._bridge.error_event.emit)

        self.text_code = None
        self.text_output = None
        self._build_ui()
        self.update_buttons()

    # --------------- UI skeleton ---------------
    def _build_ui(self):
        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)

        if not self.is_available():
            self.unavailable_label = QLabel(UNAVAILABLE_TEXT)
            self.unavailable_label.setAlignment(Qt.AlignCenter)
            root.addWidget(self.unavailable_label)
            return

        self.splitter = QSplitter(Qt.Vertical)
        self.splitter.setChildrenCollapsible(True)
        root.addWidget(self.splitter)

        mono = QFontDatabase.systemFont(QFontDatabase.FixedFont)

        # code
        code_page = QWidget(); code_v = QVBoxLayout(code_page); code_v.setContentsMargins(4, 4, 4, 4)
        caption = QLabel("JShell"); caption.setObjectName("PaneCaption")
        code_v.addWidget(caption)
        code_row = QHBoxLayout(); code_v.addLayout(code_row, 1)
        self.text_code = ScriptEditor()
        self.text_code.setObjectName("ScriptEditor")
        code_font = QFont(mono); code_font.setPointSize(int(self.settings.get("editor_font_size", 11)))
        self.text_code.setFont(code_font)
        self.text_code.setLineWrapMode(QPlainTextEdit.NoWrap)
        self.text_code.setTabStopDistance(self.text_code.fontMetrics().horizontalAdvance(" ") * 2)
        self.text_code.textChanged.connect(self.update_buttons)
        self.highlighter = JavaHighlighter(self.text_code.document(), self._palette)
        code_row.addWidget(self.text_code, 1)

        style = self.style()
        code_buttons = QVBoxLayout(); code_row.addLayout(code_buttons)
        self.button_script_load = self._tool_button(style.standardIcon(QStyle.SP_DialogOpenButton), "Load script from file", self.load_script)
        self.button_script_save = self._tool_button(style.standardIcon(QStyle.SP_DialogSaveButton), "Save script to file", self.save_script)
        self.button_script_run = self._tool_button(style.standardIcon(QStyle.SP_MediaPlay), "Execute script", self.run_script)
        self.button_script_run.setProperty("accent", True)
        self.button_script_stop = self._tool_button(style.standardIcon(QStyle.SP_MediaStop), "Stop script", self.stop_script)
        for b in (self.button_script_load, self.button_script_save, self.button_script_run, self.button_script_stop):
            code_buttons.addWidget(b)
        code_buttons.addStretch(1)
        self.splitter.addWidget(code_page)

        # output
        out_page = QWidget(); out_v = QVBoxLayout(out_page); out_v.setContentsMargins(4, 4, 4, 4)
        caption = QLabel("Output"); caption.setObjectName("PaneCaption")
        out_v.addWidget(caption)
        out_row = QHBoxLayout(); out_v.addLayout(out_row, 1)
        self.text_output = QPlainTextEdit()
        self.text_output.setObjectName("ScriptOutput")
        self.text_output.setReadOnly(True)
        out_font = QFont(mono); out_font.setPointSize(int(self.settings.get("output_font_size", 10)))
        self.text_output.setFont(out_font)
        self.text_output.textChanged.connect(self.update_buttons)
        out_row.addWidget(self.text_output, 1)

        out_buttons = QVBoxLayout(); out_row.addLayout(out_buttons)
        self.button_output_clear = self._tool_button(style.standardIcon(QStyle.SP_FileIcon), "Clear output", self.clear_output)
        self.button_output_save = self._tool_button(style.standardIcon(QStyle.SP_DialogSaveButton), "Save output to file", self.save_output)
        out_buttons.addWidget(self.button_output_clear)
        out_buttons.addWidget(self.button_output_save)
        out_buttons.addStretch(1)
        self.splitter.addWidget(out_page)

        # editor takes the extra space when the window grows
        self.splitter.setStretchFactor(0, 1)
        self.splitter.setStretchFactor(1, 0)
        self.splitter.setSizes([350, 450])

    def _tool_button(self, icon, tooltip, slot):
        b = QPushButton()
        b.setIcon(icon)
        b.setToolTip(tooltip)
        b.clicked.connect(lambda _=False: slot())
        return b

    # --------------- State ---------------
    def apply_settings(self, settings: dict):
        """Push executable and class path settings into the executor."""
        self.settings.update(settings or {})
        self.exec.executable = self.settings.get("jshell_path") or None
        self.exec.class_path = self.settings.get("class_path") or None
        self.exec.debug = bool(self.settings.get("debug"))

    def set_palette(self, palette: dict):
        self._palette = {**BASE_PALETTE, **(palette or {})}
        if self.text_code is not None:
            self.highlighter.set_palette(self._palette)

    def is_available(self) -> bool:
        return self.exec.is_available()

    def is_running(self) -> bool:
        return self.exec.is_running()

    @property
    def script(self) -> str:
        return self.text_code.toPlainText() if self.text_code is not None else ""

    def set_script(self, text: str):
        if self.text_code is not None:
            self.text_code.setPlainText(text)

    def output_text(self) -> str:
        return self.text_output.toPlainText() if self.text_output is not None else ""

    def update_buttons(self):
        if self.text_code is None or self.text_output is None:
            return
        running = self.is_running()

        # script
        self.button_script_load.setEnabled(not running)
        self.button_script_save.setEnabled(not running)
        self.button_script_run.setEnabled(not running and bool(self.text_code.toPlainText().strip()))
        self.button_script_stop.setEnabled(running)

        # output
        has_output = not self.text_output.document().isEmpty()
        self.button_output_clear.setEnabled(has_output)
        self.button_output_save.setEnabled(has_output)

    # --------------- Listeners ---------------
    def add_exec_listener(self, listener):
        self._exec_listeners.add(listener)

    def remove_exec_listener(self, listener):
        self._exec_listeners.remove(listener)

    def add_panel_listener(self, listener):
        self._panel_listeners.add(listener)

    def remove_panel_listener(self, listener):
        self._panel_listeners.remove(listener)

    def _notify_panel(self, event_type: PanelEventType, path=None):
        event = PanelEvent(self, event_type, str(path) if path else None)
        ui_log('panel_event', type=event_type.name, path=event.path)
        self._panel_listeners.notify(event)

    # --------------- Executor callbacks ---------------
    def process_output(self, line: str, stdout: bool):
        # Called on the reader threads
        self._bridge.output.emit(line, stdout)

    def _append_output(self, line: str, stdout: bool):
        if self.text_output is None:
            return
        fmt = QTextCharFormat()
        if not stdout:
            fmt.setForeground(QColor(self._palette.get('error', BASE_PALETTE['error'])))
        cursor = self.text_output.textCursor()
        cursor.movePosition(QTextCursor.End)
        if not self.text_output.document().isEmpty():
            cursor.insertBlock()
        cursor.insertText(line, fmt)
        self.text_output.setTextCursor(cursor)
        self.text_output.ensureCursorVisible()
        if line.strip():
            self._output_logger.log(logging.INFO if stdout else logging.WARNING, line)

    def _on_exec_event(self, event):
        ui_log('exec_event', type=event.type.name)
        self.update_buttons()
        self._exec_listeners.notify(event)

    def _on_error_event(self, event):
        self.logger.error("%s", event.message, exc_info=event.exception)
        self._append_output(event.message, False)
        if event.has_exception:
            self._append_output(str(event.exception), False)

    def _show_error(self, title: str, msg: str):
        QMessageBox.critical(self, title, msg)

    # --------------- Actions ---------------
    def load_script(self, path=None) -> bool:
        if path is None:
            path, _ = QFileDialog.getOpenFileName(self, "Load script", self.settings.get("last_script_dir", ""), SCRIPT_FILTER)
            if not path:
                return False
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            self.logger.error("Failed to load script %s: %s", path, e)
            self._show_error("Failed loading script", f"Failed to load script from {path}:\n{e}")
            self._notify_panel(PanelEventType.SCRIPT_LOAD_FAILURE, path)
            self.update_buttons()
            return False
        self.set_script(text)
        self.settings["last_script_dir"] = str(path.parent)
        self._notify_panel(PanelEventType.SCRIPT_LOAD_SUCCESS, path)
        self.update_buttons()
        return True

    def save_script(self, path=None) -> bool:
        if path is None:
            path, _ = QFileDialog.getSaveFileName(self, "Save script", self.settings.get("last_script_dir", ""), SCRIPT_FILTER)
            if not path:
                return False
        path = Path(path)
        try:
            path.write_text(self.script, encoding="utf-8")
        except OSError as e:
            self.logger.error("Failed to save script %s: %s", path, e)
            self._show_error("Failed saving script", f"Failed to save script to {path}:\n{e}")
            self._notify_panel(PanelEventType.SCRIPT_SAVE_FAILURE, path)
            self.update_buttons()
            return False
        self.settings["last_script_dir"] = str(path.parent)
        self._notify_panel(PanelEventType.SCRIPT_SAVE_SUCCESS, path)
        self.update_buttons()
        return True

    def run_script(self) -> bool:
        code = self.script
        if not code.strip():
            return False
        ui_log('run_script', chars=len(code))
        started = self.exec.run_script(
            code,
            split_flags(self.settings.get("runtime_flags")),
            split_flags(self.settings.get("remote_runtime_flags")),
            split_flags(self.settings.get("compiler_flags")),
        )
        self.update_buttons()
        return started

    def stop_script(self):
        ui_log('stop_script', running=self.is_running())
        self.exec.stop_script()
        self.update_buttons()

    def clear_output(self):
        if self.text_output is not None:
            self.text_output.clear()
        self._notify_panel(PanelEventType.OUTPUT_CLEARED)
        self.update_buttons()

    def save_output(self, path=None) -> bool:
        if path is None:
            path, _ = QFileDialog.getSaveFileName(self, "Save output", self.settings.get("last_output_dir", ""), OUTPUT_FILTER)
            if not path:
                return False
        path = Path(path)
        text = self.output_text()
        try:
            path.write_text(text + "\n" if text else "", encoding="utf-8")
        except OSError as e:
            self.logger.error("Failed to save output %s: %s", path, e)
            self._show_error("Failed saving output", f"Failed to save output to {path}:\n{e}")
            self._notify_panel(PanelEventType.OUTPUT_SAVE_FAILURE, path)
            self.update_buttons()
            return False
        self.settings["last_output_dir"] = str(path.parent)
        self._notify_panel(PanelEventType.OUTPUT_SAVE_SUCCESS, path)
        self.update_buttons()
        return True
