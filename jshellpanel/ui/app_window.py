import sys
import uuid

from PySide6.QtWidgets import (
    QApplication, QMainWindow, QWidget, QListWidget, QStackedWidget,
    QVBoxLayout, QHBoxLayout, QLabel, QPushButton, QGroupBox, QFormLayout, QLineEdit,
    QCheckBox, QComboBox, QFileDialog, QMessageBox
)

from jshellpanel.core import jshell_executable
from jshellpanel.events import ExecEventType
from jshellpanel.logging_utils import setup_logging, ui_log
from jshellpanel.settings_store import load_settings, save_settings, join_flags, split_flags
from jshellpanel.theme import apply_theme, available_themes
from jshellpanel.ui.panel import JShellPanel

# Status text shown in the top bar per exec event
STATUS_TEXT = {
    ExecEventType.SCRIPT_RUN: ("Running", "#0a7"),
    ExecEventType.SCRIPT_RUN_SUCCESS: ("Finished", "#0a7"),
    ExecEventType.SCRIPT_RUN_FAILURE: ("Failed", "#b3261e"),
    ExecEventType.SCRIPT_RUN_SETUP_FAILURE: ("Setup failed", "#b3261e"),
    ExecEventType.SCRIPT_STOP: ("Stopped", "#b35c00"),
}


class AppWindow(QMainWindow):
    def __init__(self, settings=None, session_id=None, standalone=True):
        super().__init__()
        self.setWindowTitle("JShell")
        self.resize(1200, 900)

        self.settings = settings if settings is not None else load_settings()
        self.session_id = session_id or str(uuid.uuid4())[:8]
        self._standalone = standalone
        self.logger = setup_logging(self.settings, self.session_id) if standalone else None

        self._init_ui()

    # --------------- UI skeleton ---------------
    def _init_ui(self):
        central = QWidget()
        self.setCentralWidget(central)
        root_v = QVBoxLayout(central)

        # Top app bar
        top_bar = QWidget()
        top_bar.setObjectName("TopAppBar")
        top_h = QHBoxLayout(top_bar)
        title = QLabel("JShell")
        title.setObjectName("TopAppTitle")
        top_h.addWidget(title)
        top_h.addStretch(1)

        self.action_label = QLabel("Idle")
        self.action_label.setObjectName("ActionStatus")
        self.action_label.setMinimumWidth(120)
        self._set_action_status("Idle", "#0a7")
        top_h.addWidget(self.action_label)
        top_h.addStretch(1)

        # Quick theme switcher
        self.quick_theme_box = QComboBox()
        self.quick_theme_box.addItems(available_themes())
        self.quick_theme_box.setCurrentText(self.settings.get('theme_file', 'system'))
        self.quick_theme_box.currentTextChanged.connect(self._apply_theme)
        top_h.addWidget(QLabel("Theme:"))
        top_h.addWidget(self.quick_theme_box)
        root_v.addWidget(top_bar)

        content_row = QHBoxLayout()
        root_v.addLayout(content_row, 1)

        self.nav = QListWidget()
        self.nav.setObjectName("NavList")
        self.nav.setMaximumWidth(180)
        content_row.addWidget(self.nav)

        self.stack = QStackedWidget()
        content_row.addWidget(self.stack, 1)

        # Script page
        self.panel = JShellPanel(self.settings, self)
        self.panel.add_exec_listener(self._on_exec_event)
        self.stack.addWidget(self.panel)
        self.nav.addItem("Script")

        # Settings page
        self.settings_tab = QWidget()
        self._build_settings_tab(self.settings_tab)
        self.stack.addWidget(self.settings_tab)
        self.nav.addItem("Settings")

        self.nav.currentRowChanged.connect(self._on_page_changed)
        self.nav.setCurrentRow(0)

        self.statusBar().showMessage(f"jshell: {self.panel.exec.executable}")

    def _on_page_changed(self, idx: int):
        if 0 <= idx < self.stack.count():
            self.stack.setCurrentIndex(idx)
            ui_log('page_changed', idx=idx)

    def _set_action_status(self, text: str, color: str):
        self.action_label.setText(text)
        self.action_label.setStyleSheet(f"font-weight: 600; color: {color};")

    def _on_exec_event(self, event):
        if event.type in STATUS_TEXT:
            self._set_action_status(*STATUS_TEXT[event.type])
        elif event.type is ExecEventType.SCRIPT_FINISHED and self.panel.exec.exit_code is not None:
            self.statusBar().showMessage(f"Exit code: {self.panel.exec.exit_code}")

    def _apply_theme(self, theme_spec: str):
        app = QApplication.instance()
        if app is None:
            return
        palette = apply_theme(app, theme_spec)
        self.panel.set_palette(palette)
        self.settings['theme_file'] = theme_spec

    # --------------- Settings tab ---------------
    def _build_settings_tab(self, parent: QWidget):
        v = QVBoxLayout(parent)
        form_group = QGroupBox("JShell")
        v.addWidget(form_group)
        form = QFormLayout(form_group)

        exe_row = QWidget(); h = QHBoxLayout(exe_row); h.setContentsMargins(0, 0, 0, 0)
        self.set_jshell_path = QLineEdit(self.settings.get("jshell_path", ""))
        self.set_jshell_path.setPlaceholderText(jshell_executable())
        h.addWidget(self.set_jshell_path, 1)
        b = QPushButton("Browse"); b.clicked.connect(lambda: self._browse_file_into(self.set_jshell_path)); h.addWidget(b)
        form.addRow("jshell executable", exe_row)

        self.set_class_path = QLineEdit(self.settings.get("class_path", ""))
        self.set_class_path.setPlaceholderText("lib/a.jar:lib/b.jar")
        form.addRow("Class path", self.set_class_path)

        self.set_runtime_flags = QLineEdit(join_flags(self.settings.get("runtime_flags")))
        self.set_runtime_flags.setToolTip("Passed to jshell's VM, each prefixed with -J (e.g. -verbose)")
        form.addRow("Runtime flags (-J)", self.set_runtime_flags)

        self.set_remote_flags = QLineEdit(join_flags(self.settings.get("remote_runtime_flags")))
        self.set_remote_flags.setToolTip("Passed to the VM running the code, each prefixed with -R (e.g. -javaagent:...)")
        form.addRow("Remote runtime flags (-R)", self.set_remote_flags)

        self.set_compiler_flags = QLineEdit(join_flags(self.settings.get("compiler_flags")))
        self.set_compiler_flags.setToolTip("Passed to the compiler, each prefixed with -C")
        form.addRow("Compiler flags (-C)", self.set_compiler_flags)

        ui_group = QGroupBox("Preferences")
        v.addWidget(ui_group)
        ui_form = QFormLayout(ui_group)
        self.theme_box = QComboBox(); self.theme_box.addItems(available_themes())
        self.theme_box.setCurrentText(self.settings.get('theme_file', 'system'))
        ui_form.addRow("Theme", self.theme_box)
        self.debug_cb = QCheckBox("Enable verbose debug logging (writes to logs/debug.log)")
        self.debug_cb.setChecked(bool(self.settings.get("debug", False)))
        ui_form.addRow("Debug", self.debug_cb)

        btn_row = QWidget(); hb = QHBoxLayout(btn_row); hb.setContentsMargins(0, 0, 0, 0); hb.addStretch(1)
        sb = QPushButton("Save Settings"); sb.clicked.connect(self.on_save_settings); hb.addWidget(sb)
        rb = QPushButton("Reload"); rb.clicked.connect(self.on_reload_settings); hb.addWidget(rb)
        v.addWidget(btn_row)
        v.addStretch(1)

    def _collect_settings(self) -> dict:
        return {
            "jshell_path": self.set_jshell_path.text().strip(),
            "class_path": self.set_class_path.text().strip(),
            "runtime_flags": split_flags(self.set_runtime_flags.text()),
            "remote_runtime_flags": split_flags(self.set_remote_flags.text()),
            "compiler_flags": split_flags(self.set_compiler_flags.text()),
            "theme_file": self.theme_box.currentText(),
            "debug": bool(self.debug_cb.isChecked()),
        }

    def on_save_settings(self):
        try:
            patch = self._collect_settings()
        except ValueError as e:
            QMessageBox.critical(self, "Settings", str(e))
            return
        self.settings.update(patch)
        if save_settings(patch):
            QMessageBox.information(self, "Settings", "Settings saved.")
            self._apply_settings()
        else:
            QMessageBox.critical(self, "Settings", "Could not save settings. See logs.")

    def on_reload_settings(self):
        self.settings = load_settings()
        self.set_jshell_path.setText(self.settings.get('jshell_path', ''))
        self.set_class_path.setText(self.settings.get('class_path', ''))
        self.set_runtime_flags.setText(join_flags(self.settings.get('runtime_flags')))
        self.set_remote_flags.setText(join_flags(self.settings.get('remote_runtime_flags')))
        self.set_compiler_flags.setText(join_flags(self.settings.get('compiler_flags')))
        self.theme_box.setCurrentText(self.settings.get('theme_file', 'system'))
        self.debug_cb.setChecked(bool(self.settings.get('debug', False)))
        self._apply_settings()

    def _apply_settings(self):
        if self._standalone:
            self.logger = setup_logging(self.settings, self.session_id)
        self.panel.apply_settings(self.settings)
        self.quick_theme_box.setCurrentText(self.settings.get('theme_file', 'system'))
        self._apply_theme(self.settings.get('theme_file', 'system'))
        self.statusBar().showMessage(f"jshell: {self.panel.exec.executable}")
        if not self.panel.is_available():
            self.statusBar().showMessage(f"jshell not found: {self.panel.exec.executable} (restart after fixing)")

    # --------------- Utility helpers ---------------
    def _browse_file_into(self, line_edit: QLineEdit):
        path, _ = QFileDialog.getOpenFileName(self, "Select jshell executable", line_edit.text(), "All files (*)")
        if path:
            line_edit.setText(path)

    # --------------- Lifecycle ---------------
    def closeEvent(self, event):
        if self.panel.is_running():
            self.panel.stop_script()
        # Remember the last used folders
        if self._standalone:
            save_settings({
                "last_script_dir": self.panel.settings.get("last_script_dir", ""),
                "last_output_dir": self.panel.settings.get("last_output_dir", ""),
            })
        super().closeEvent(event)


def run(argv=None, settings=None):
    app = QApplication.instance() or QApplication(sys.argv if argv is None else argv)
    settings = settings if settings is not None else load_settings()
    win = AppWindow(settings)
    win._apply_theme(settings.get('theme_file', 'system'))
    win.show()
    return app.exec()
