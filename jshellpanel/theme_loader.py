import re
from pathlib import Path

from jshellpanel.core import THEMES_DIR


def list_theme_files(themes_dir: Path | None = None):
    themes_dir = Path(themes_dir) if themes_dir is not None else THEMES_DIR
    if not themes_dir.is_dir():
        return []
    return sorted([p.name for p in themes_dir.glob("*.css")])


def parse_css_palette(path: Path) -> dict:
    """Parse a very small CSS subset: reads variables defined in :root { ... }.
    Supported lines inside the block: key: value; comments with // or /* */.
    Leading dashes of custom properties are dropped, inner dashes become
    underscores (--on-surface -> on_surface).
    """
    txt = Path(path).read_text(encoding="utf-8", errors="ignore")
    # Strip /* ... */ comments
    txt = re.sub(r"/\*.*?\*/", "", txt, flags=re.S)
    in_root = False
    pal = {}
    for line in (l.strip() for l in txt.splitlines()):
        if not line or line.startswith("//"):
            continue
        if not in_root:
            if line.lower().startswith(":root") and line.endswith("{"):
                in_root = True
            continue
        if line.startswith("}"):
            break
        if ":" in line:
            key, val = line.split(":", 1)
            key = key.strip().lstrip("-").replace("-", "_")
            val = val.strip().rstrip(";").strip()
            if key:
                pal[key] = val
    return pal
