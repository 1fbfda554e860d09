"""
Configuration manager.
Holds defaults, overlays user TOML overrides, writes changed values back.
"""

import copy
import logging
import os
from pathlib import Path

import tomlkit
from tomlkit.exceptions import ParseError
from tomlkit.items import Bool

log = logging.getLogger("daynight.config")

CONFIG_FILE = Path(os.environ.get("DAYNIGHT_CONFIG", "daynight.toml"))

DEFAULTS = {
    "overlay": {
        "refresh_interval_ms": 60_000,
        "sample_stride": 2,
        "night_alpha": 90,
    },
    "view": {
        "center_lat": 20.0,
        "center_lon": 0.0,
        "zoom": 1.0,
    },
}

# (min, max) accepted for numeric options; loaded values are clamped
LIMITS = {
    ("overlay", "refresh_interval_ms"): (1000, 24 * 3600 * 1000),
    ("overlay", "sample_stride"): (1, 16),
    ("overlay", "night_alpha"): (0, 255),
    ("view", "center_lat"): (-85.0, 85.0),
    ("view", "center_lon"): (-180.0, 180.0),
    ("view", "zoom"): (1.0, 64.0),
}


def _coerce(section, key, value):
    default = DEFAULTS[section][key]
    # No bools anywhere, no fractions for integer options
    if (isinstance(value, (bool, Bool))
            or (isinstance(default, int) and isinstance(value, float) and not value.is_integer())):
        log.warning("Ignoring bad value for %s.%s: %r", section, key, value)
        return default
    try:
        value = type(default)(value)
    except (TypeError, ValueError):
        log.warning("Ignoring bad value for %s.%s: %r", section, key, value)
        return default
    lo, hi = LIMITS[(section, key)]
    if not lo <= value <= hi:
        clamped = max(lo, min(hi, value))
        log.warning("%s.%s=%r out of range, using %r", section, key, value, clamped)
        return clamped
    return value


class ConfigManager:

    def __init__(self, config_file=None):
        self.config_file = Path(config_file) if config_file is not None else CONFIG_FILE

        # Merged live state (defaults + user overrides)
        self._values = copy.deepcopy(DEFAULTS)

        # User overrides only (what gets written to TOML)
        self._user_overrides = {}

        # Raw tomlkit document (preserves formatting for round-trip)
        self._toml_doc = None

        self._load()

    # --- Loading ---

    def _load(self):
        if not self.config_file.exists():
            return

        try:
            raw = self.config_file.read_text(encoding="utf-8")
            self._toml_doc = tomlkit.parse(raw)
        except (OSError, ParseError) as e:
            log.warning("Config load error in %s: %s", self.config_file, e)
            self._toml_doc = None
            return

        self._apply_toml(self._toml_doc)

    def _apply_toml(self, doc):
        for section, defaults in DEFAULTS.items():
            if section not in doc:
                continue
            for key, val in doc[section].items():
                if key not in defaults:
                    log.warning("Unknown config key %s.%s", section, key)
                    continue
                val = _coerce(section, key, val)
                self._values[section][key] = val
                self._user_overrides.setdefault(section, {})[key] = val

    # --- Read API ---

    def get(self, section: str, key: str):
        return self._values[section][key]

    @property
    def overlay(self) -> dict:
        return dict(self._values["overlay"])

    @property
    def view(self) -> dict:
        return dict(self._values["view"])

    # --- Write API ---

    def set(self, section: str, key: str, value, save: bool = True):
        if section not in DEFAULTS or key not in DEFAULTS[section]:
            raise KeyError(f"{section}.{key}")
        value = _coerce(section, key, value)
        self._values[section][key] = value
        self._user_overrides.setdefault(section, {})[key] = value
        if save:
            self.save()

    def save(self):
        if self._toml_doc is None:
            self._toml_doc = tomlkit.document()
            self._toml_doc.add(tomlkit.comment("daynight user configuration"))
            self._toml_doc.add(tomlkit.comment("Only user-modified values are stored here."))
            self._toml_doc.add(tomlkit.nl())

        for section, values in self._user_overrides.items():
            if section not in self._toml_doc:
                self._toml_doc.add(section, tomlkit.table())
            for key, val in values.items():
                self._toml_doc[section][key] = val

        self.config_file.write_text(tomlkit.dumps(self._toml_doc), encoding="utf-8")
        log.info("Saved configuration to %s", self.config_file)

    def reload(self):
        self._values = copy.deepcopy(DEFAULTS)
        self._user_overrides = {}
        self._toml_doc = None
        self._load()
