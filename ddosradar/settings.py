import math
import os
import sys
import time

import yaml

CONFIG_DIR = os.path.expanduser("~/.config/ddosradar")
CONFIG_PATH = os.path.join(CONFIG_DIR, "config.yaml")

# Debug logging
DEBUG_LOG_PATH = os.path.join(CONFIG_DIR, "debug.log")

def debug_log(msg):
    """Write a timestamped message to the debug log."""
    try:
        os.makedirs(os.path.dirname(DEBUG_LOG_PATH), exist_ok=True)
        with open(DEBUG_LOG_PATH, "a") as f:
            f.write(f"[{time.strftime('%Y-%m-%d %H:%M:%S')}] {msg}\n")
    except OSError:
        # curses owns the terminal, there is nowhere else to report this
        pass


CONFIG = {
    "lookback_minutes": 360,
    "refresh_interval_minutes": 0,
    "region": "World",
    "theme": 0,
    "request_timeout": 20,
}
DEFAULTS = dict(CONFIG)

def init_config(path=None):
    """Merge the optional YAML config file over the defaults. The file is never written."""
    path = path or CONFIG_PATH
    if not os.path.exists(path):
        return CONFIG
    try:
        with open(path, "r") as f:
            saved = yaml.safe_load(f) or {}
        if not isinstance(saved, dict):
            raise ValueError("top level must be a mapping")
        unknown = set(saved) - set(CONFIG)
        if unknown:
            debug_log(f"CONFIG: Ignoring unknown keys {sorted(unknown)}")
        CONFIG.update({k: v for k, v in saved.items() if k in CONFIG})
        debug_log(f"CONFIG: Loaded {path}")
    except (OSError, ValueError, yaml.YAMLError) as e:
        debug_log(f"CONFIG: Error loading {path}: {e}")
    return CONFIG


def config_number(key, cast=int):
    """CONFIG[key] as a number, or the default when the file held something else."""
    value = CONFIG.get(key, DEFAULTS[key])
    try:
        number = cast(value)
        if not math.isfinite(number):
            raise ValueError(value)
        return number
    except (TypeError, ValueError, OverflowError):
        debug_log(f"CONFIG: {key}={value!r} is not a number, using {DEFAULTS[key]}")
        return DEFAULTS[key]


def find_data_file(filename):
    """Locate a data file: user override in CONFIG_DIR first, then the packaged copy."""
    paths = [
        os.path.join(CONFIG_DIR, filename),
        os.path.join(os.path.dirname(os.path.abspath(__file__)), filename),
    ]
    if getattr(sys, 'frozen', False) and hasattr(sys, '_MEIPASS'):
        paths.append(os.path.join(sys._MEIPASS, filename))
    for p in paths:
        if os.path.exists(p):
            return p
    return None
