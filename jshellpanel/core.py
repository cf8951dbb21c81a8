import os
import shutil
import sys
from pathlib import Path

# Core paths
PACKAGE_DIR = Path(__file__).resolve().parent
APP_HOME = Path(os.environ.get("JSHELLPANEL_HOME") or (Path.home() / ".jshellpanel"))
CONFIG_PATH = APP_HOME / "settings.json"
LOG_DIR = APP_HOME / "logs"
THEMES_DIR = PACKAGE_DIR / "themes"

IS_WINDOWS = sys.platform.startswith("win")


def cmd_exists(cmd: str) -> bool:
    return shutil.which(cmd) is not None


def jshell_executable(java_home: str | None = None) -> str:
    """Locate the jshell binary.

    Checks the given Java home, then $JAVA_HOME, then PATH. Falls back to the
    bare executable name so the result is never empty.
    """
    name = "jshell.exe" if IS_WINDOWS else "jshell"
    home = java_home or os.environ.get("JAVA_HOME")
    if home:
        return str(Path(home) / "bin" / name)
    found = shutil.which(name)
    if found:
        return found
    return name
