from PySide6.QtGui import QPalette, QColor
from PySide6.QtWidgets import QApplication

from jshellpanel.core import THEMES_DIR
from jshellpanel.theme_loader import list_theme_files, parse_css_palette

# Baseline palette (light); CSS themes override individual keys
BASE_PALETTE = {
    'bg': '#F5F6F8',
    'surface': '#FFFFFF',
    'text': '#1C1B1F',
    'muted': '#6B7280',
    'primary': '#6750A4',
    'on_primary': '#FFFFFF',
    'secondary': '#625B71',
    'on_secondary': '#FFFFFF',
    'surface_variant': '#E7E0EC',
    'outline': '#79747E',
    'selection_bg': '#EADDFF',
    'selection_fg': '#1C1B1F',
    'entry_bg': '#FFFFFF',
    'code_bg': '#FFFFFF',
    'code_fg': '#1C1B1F',
    'output_bg': '#FAFAFA',
    'output_fg': '#1C1B1F',
    'error': '#B3261E',
    'keyword': '#7F0055',
    'string': '#2A00FF',
    'comment': '#3F7F5F',
    'number': '#125688',
    'command': '#B35C00',
}


def available_themes():
    return ["system"] + list_theme_files()


def resolve_palette(theme_spec: str) -> dict:
    """Return the baseline palette merged with the named theme file, if any."""
    palette = dict(BASE_PALETTE)
    if not theme_spec or theme_spec == 'system':
        return palette
    path = THEMES_DIR / theme_spec
    if not path.is_file():
        return palette
    overrides = parse_css_palette(path)
    palette.update(overrides)
    # Backfill editor colours from the general ones when a theme leaves them out
    for key, fallback in (('code_bg', 'surface'), ('code_fg', 'text'),
                          ('output_bg', 'surface'), ('output_fg', 'text'),
                          ('entry_bg', 'surface')):
        if key not in overrides:
            palette[key] = palette[fallback]
    return palette


def apply_theme(app: QApplication, theme_spec: str):
    """Apply a theme using QPalette + QSS; returns the effective palette dict."""
    palette = resolve_palette(theme_spec)

    qpal = QPalette()
    bg = QColor(palette['bg'])
    surf = QColor(palette['surface'])
    text = QColor(palette['text'])
    qpal.setColor(QPalette.Window, bg)
    qpal.setColor(QPalette.WindowText, text)
    qpal.setColor(QPalette.Base, surf)
    qpal.setColor(QPalette.AlternateBase, bg)
    qpal.setColor(QPalette.ToolTipBase, surf)
    qpal.setColor(QPalette.ToolTipText, text)
    qpal.setColor(QPalette.Text, text)
    qpal.setColor(QPalette.Button, surf)
    qpal.setColor(QPalette.ButtonText, text)
    qpal.setColor(QPalette.Highlight, QColor(palette['selection_bg']))
    qpal.setColor(QPalette.HighlightedText, QColor(palette['selection_fg']))
    app.setPalette(qpal)

    radius = 8
    qss = f"""
    QWidget {{
        font-size: 13px;
        color: {palette['text']};
    }}

    /* Top bar */
    QWidget#TopAppBar {{
        background: {palette['surface']};
        border-bottom: 1px solid {palette['outline']};
        padding: 6px 10px;
    }}
    QLabel#TopAppTitle {{
        font-weight: 600;
        font-size: 15px;
    }}
    QLabel#PaneCaption {{
        font-weight: 600;
        color: {palette['muted']};
    }}

    QGroupBox {{
        border: 1px solid {palette['surface_variant']};
        border-radius: {radius}px;
        margin-top: 12px;
        padding: 8px;
        background: {palette['surface']};
    }}
    QGroupBox::title {{
        subcontrol-origin: margin;
        left: 8px;
        padding: 0 3px;
    }}

    QLineEdit, QComboBox {{
        background: {palette['entry_bg']};
        border: 1px solid {palette['surface_variant']};
        border-radius: {radius}px;
        padding: 4px 6px;
    }}

    /* Script editor and output */
    QPlainTextEdit#ScriptEditor {{
        background: {palette['code_bg']};
        color: {palette['code_fg']};
        border: 1px solid {palette['surface_variant']};
    }}
    QPlainTextEdit#ScriptOutput {{
        background: {palette['output_bg']};
        color: {palette['output_fg']};
        border: 1px solid {palette['surface_variant']};
    }}

    QPushButton {{
        padding: 6px 12px;
        border-radius: {radius}px;
        background: {palette['surface_variant']};
        border: 1px solid {palette['surface_variant']};
    }}
    QPushButton:hover {{
        background: {palette['selection_bg']};
    }}
    QPushButton:disabled {{
        color: {palette['muted']};
    }}
    QPushButton[accent="true"] {{
        background: {palette['primary']};
        color: {palette['on_primary']};
        border: none;
    }}
    QPushButton[accent="true"]:hover {{
        background: {palette['secondary']};
        color: {palette['on_secondary']};
    }}
    """
    app.setStyleSheet(qss)
    return palette
