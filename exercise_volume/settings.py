"""
Engine settings: defaults, YAML file and environment overrides.

Lookup order (later wins):
    1. DEFAULT_SETTINGS
    2. YAML file (explicit path, $EXERCISE_VOLUME_CONFIG, or ./config.yaml)
    3. EXERCISE_VOLUME_<KEY> environment variables (a .env file is honored)
"""

import math
import os

import yaml
from dotenv import load_dotenv


CONFIG_ENV_VAR = "EXERCISE_VOLUME_CONFIG"
ENV_PREFIX = "EXERCISE_VOLUME_"
DEFAULT_CONFIG_FILE = "config.yaml"

DEFAULT_SETTINGS = {
    # Rolling aggregation
    "rolling_window_days": 7,
    "break_threshold_days": 7,
    "round_digits": 1,
    # Fuzzy tier
    "fuzzy_threshold": 0.4,
    "fuzzy_boost": 1.2,
    "fuzzy_confidence_cap": 0.8,
    # Attribution
    "grouped": True,
    "skip_warmup_sets": True,
}

_BOOL_TRUE = {"1", "true", "yes", "on"}
_BOOL_FALSE = {"0", "false", "no", "off"}


def _coerce(key, value, source):
    """Coerce a raw setting to the type of its default."""
    default = DEFAULT_SETTINGS[key]
    try:
        if isinstance(default, bool):
            if isinstance(value, bool):
                return value
            text = str(value).strip().lower()
            if text in _BOOL_TRUE:
                return True
            if text in _BOOL_FALSE:
                return False
            raise ValueError(value)
        if isinstance(default, int):
            if isinstance(value, float) and not value.is_integer():
                raise ValueError(value)
            return int(value)
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid value {value!r} for setting '{key}' in {source}") from None


def validate_settings(settings):
    """
    Check the numeric settings that would make aggregation meaningless.

    Raises:
        ValueError: non-positive rolling window or negative/NaN thresholds.
    """
    window = settings["rolling_window_days"]
    if (isinstance(window, float) and math.isnan(window)) or window <= 0:
        raise ValueError(f"rolling_window_days must be positive, got {window!r}")
    threshold = settings["break_threshold_days"]
    if (isinstance(threshold, float) and math.isnan(threshold)) or threshold < 0:
        raise ValueError(f"break_threshold_days must be non-negative, got {threshold!r}")
    for key in ("fuzzy_threshold", "fuzzy_boost", "fuzzy_confidence_cap"):
        value = settings[key]
        if math.isnan(value) or value < 0:
            raise ValueError(f"{key} must be a non-negative number, got {value!r}")
    return settings


def _read_yaml(path):
    try:
        with open(path, "r") as f:
            config = yaml.safe_load(f) or {}
    except yaml.YAMLError as err:
        raise ValueError(f"Could not parse settings file {path}: {err}") from err

    if not isinstance(config, dict):
        raise ValueError(f"Settings file {path} must contain a mapping")
    # Allow the settings to live under a top-level "exercise_volume" section
    return config.get("exercise_volume", config)


def load_settings(config_path=None, overrides=None):
    """
    Load engine settings.

    Args:
        config_path: Optional YAML file. Missing files fall back to defaults.
        overrides: Optional dict applied last (useful in tests).

    Returns:
        Validated settings dictionary.
    """
    load_dotenv()
    settings = dict(DEFAULT_SETTINGS)

    path = config_path or os.getenv(CONFIG_ENV_VAR) or DEFAULT_CONFIG_FILE
    if path and os.path.exists(path):
        for key, value in _read_yaml(path).items():
            if key not in DEFAULT_SETTINGS:
                raise ValueError(f"Unknown setting '{key}' in {path}")
            settings[key] = _coerce(key, value, path)

    for key in DEFAULT_SETTINGS:
        env_value = os.getenv(ENV_PREFIX + key.upper())
        if env_value is not None and env_value != "":
            settings[key] = _coerce(key, env_value, ENV_PREFIX + key.upper())

    for key, value in (overrides or {}).items():
        if key not in DEFAULT_SETTINGS:
            raise ValueError(f"Unknown setting '{key}'")
        settings[key] = _coerce(key, value, "overrides")

    return validate_settings(settings)


def resolve_settings(settings=None):
    """
    Merge a partial settings dict over the defaults (no file or env lookup).

    Values are coerced to the type of their default, so "7" and 7 are the same.

    Raises:
        ValueError: unknown key or a value that cannot be coerced.
    """
    merged = dict(DEFAULT_SETTINGS)
    for key, value in (settings or {}).items():
        if key not in DEFAULT_SETTINGS:
            raise ValueError(f"Unknown setting '{key}'")
        merged[key] = _coerce(key, value, "settings")
    return merged
