import copy
import json
import logging
import os

log = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"
SETTINGS_FILE = "settings.json"
DEFAULT_SETTINGS = {
    "timeout_ms": 30000,
    "verify": True,
    "allow_redirects": True,
    "log_level": "INFO",
    "history_file": "history.json",
}


def config_dir() -> str:
    """Per-user directory holding settings and history."""
    home = os.environ.get("MINI_POSTMAN_HOME")
    if home:
        return os.path.expanduser(home)
    base = os.environ.get("XDG_CONFIG_HOME") or os.path.join(os.path.expanduser("~"), ".config")
    return os.path.join(base, "mini_postman")


def deep_merge(a: dict, b: dict) -> dict:
    out = copy.deepcopy(a)
    for k, v in b.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def load_settings(path: str = None) -> dict:
    path = path or os.path.join(config_dir(), SETTINGS_FILE)
    if not os.path.exists(path):
        return copy.deepcopy(DEFAULT_SETTINGS)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        return deep_merge(DEFAULT_SETTINGS, data)
    except (OSError, ValueError):
        log.exception("Failed to load settings from %s", path)
        return copy.deepcopy(DEFAULT_SETTINGS)


def save_settings(settings: dict, path: str = None):
    path = path or os.path.join(config_dir(), SETTINGS_FILE)
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(settings, f, ensure_ascii=False, indent=2)


def configure_logging(level=None):
    """Console logging in the tool's usual format; history warnings are routed here too."""
    if level is None:
        level = DEFAULT_SETTINGS["log_level"]
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.captureWarnings(True)
