import json
import logging
import shlex
from pathlib import Path

from jshellpanel.core import CONFIG_PATH

LOGGER = logging.getLogger(__name__)


def _default_script_dir() -> str:
    """Return the folder file dialogs start in.
    Falls back to the current directory when the home folder is unknown.
    """
    try:
        return str(Path.home())
    except Exception:
        return str(Path.cwd())


DEFAULT_SETTINGS = {
    "debug": False,
    "theme_file": "system",
    # Explicit jshell binary. If empty, JAVA_HOME and PATH are searched.
    "jshell_path": "",
    # Passed as --class-path; entries joined with os.pathsep
    "class_path": "",
    # Each list is forwarded with its prefix: -J (jshell VM), -R (remote VM), -C (compiler)
    "runtime_flags": [],
    "remote_runtime_flags": [],
    "compiler_flags": [],
    "last_script_dir": _default_script_dir(),
    "last_output_dir": _default_script_dir(),
    "editor_font_size": 11,
    "output_font_size": 10,
}


def load_settings(path: Path | None = None) -> dict:
    path = Path(path) if path is not None else CONFIG_PATH
    try:
        if path.exists():
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if isinstance(data, dict):
                return {**DEFAULT_SETTINGS, **data}
            LOGGER.warning("Ignoring settings file %s: not a JSON object", path)
    except (OSError, ValueError) as e:
        LOGGER.warning("Could not read settings from %s: %s", path, e)
    return json.loads(json.dumps(DEFAULT_SETTINGS))


def _deep_merge(dst, src):
    # Merge src into dst in-place, returning dst
    if isinstance(dst, dict) and isinstance(src, dict):
        for k, v in src.items():
            if k in dst and isinstance(dst[k], dict) and isinstance(v, dict):
                _deep_merge(dst[k], v)
            else:
                dst[k] = v
        return dst
    # Not both dicts: replace
    return src


def save_settings(settings, path: Path | None = None) -> bool:
    """Persist settings without discarding keys written by other parts of the app.

    - Loads the current on-disk JSON (if any)
    - Deep-merges provided settings into it (dict values merged, others replaced)
    - Writes the merged result atomically
    """
    path = Path(path) if path is not None else CONFIG_PATH
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        current = {}
        if path.exists():
            try:
                with open(path, "r", encoding="utf-8") as rf:
                    current = json.load(rf) or {}
            except ValueError:
                LOGGER.warning("Overwriting unreadable settings file %s", path)
                current = {}
        merged = _deep_merge(current if isinstance(current, dict) else {}, settings or {})
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(merged, f, indent=2)
        tmp_path.replace(path)
        return True
    except OSError:
        # UI layer is responsible for showing errors
        LOGGER.exception("Failed to save settings to %s", path)
        return False


def split_flags(value) -> list:
    """Normalise a flag setting: lists pass through, strings are shell-split."""
    if value is None:
        return []
    if isinstance(value, str):
        return shlex.split(value)
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if str(v)]
    raise TypeError(f"Unsupported flag value: {value!r}")


def join_flags(flags) -> str:
    return " ".join(shlex.quote(f) for f in split_flags(flags))
