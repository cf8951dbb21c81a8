from PySide6.QtCore import QRegularExpression
from PySide6.QtGui import QColor, QFont, QSyntaxHighlighter, QTextCharFormat

from jshellpanel.theme import BASE_PALETTE

JAVA_KEYWORDS = (
    "abstract assert boolean break byte case catch char class const continue default do "
    "double else enum extends final finally float for goto if implements import instanceof "
    "int interface long native new package private protected public record return short "
    "static strictfp super switch synchronized this throw throws transient try var void "
    "volatile while yield true false null"
).split()


def _fmt(color: str, bold: bool = False, italic: bool = False) -> QTextCharFormat:
    f = QTextCharFormat()
    f.setForeground(QColor(color))
    if bold:
        f.setFontWeight(QFont.Bold)
    f.setFontItalic(italic)
    return f


class JavaHighlighter(QSyntaxHighlighter):
    """Highlights Java snippets plus jshell's slash commands (/exit, /vars, ...)."""

    def __init__(self, document, palette: dict | None = None):
        super().__init__(document)
        self._comment_start = QRegularExpression(r"/\*")
        self._comment_end = QRegularExpression(r"\*/")
        self.set_palette(palette or BASE_PALETTE)

    def set_palette(self, palette: dict):
        pal = {**BASE_PALETTE, **palette}
        self._comment_fmt = _fmt(pal['comment'], italic=True)
        keyword = _fmt(pal['keyword'], bold=True)
        self._rules = [
            (QRegularExpression(r"\b(" + "|".join(JAVA_KEYWORDS) + r")\b"), keyword),
            (QRegularExpression(r"\b[0-9][0-9_]*(\.[0-9_]+)?[lLfFdD]?\b"), _fmt(pal['number'])),
            (QRegularExpression(r"@\w+"), _fmt(pal['muted'])),
            (QRegularExpression(r'"(\\.|[^"\\])*"'), _fmt(pal['string'])),
            (QRegularExpression(r"'(\\.|[^'\\])'"), _fmt(pal['string'])),
            (QRegularExpression(r"^\s*/[a-zA-Z!?-][^\s]*"), _fmt(pal['command'], bold=True)),
            (QRegularExpression(r"//[^\n]*"), self._comment_fmt),
        ]
        self.rehighlight()

    def highlightBlock(self, text):
        for pattern, fmt in self._rules:
            it = pattern.globalMatch(text)
            while it.hasNext():
                m = it.next()
                self.setFormat(m.capturedStart(), m.capturedLength(), fmt)

        # Block comments may span lines; state 1 means "inside /* */"
        self.setCurrentBlockState(0)
        start = 0
        if self.previousBlockState() != 1:
            m = self._comment_start.match(text)
            start = m.capturedStart() if m.hasMatch() else -1
        while start >= 0:
            end_match = self._comment_end.match(text, start)
            if end_match.hasMatch():
                length = end_match.capturedEnd() - start
            else:
                self.setCurrentBlockState(1)
                length = len(text) - start
            self.setFormat(start, length, self._comment_fmt)
            next_match = self._comment_start.match(text, start + length)
            start = next_match.capturedStart() if next_match.hasMatch() else -1
