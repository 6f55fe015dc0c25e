from constants import *
import copy
import yaml
import os

import logging

# Retrieve main logger
logger = logging.getLogger("main")


# Cache variable
_cached_settings = None


def _coerce_env_value(current, raw):
    if isinstance(current, bool):
        return raw.strip().lower() in ("1", "true", "yes", "on")
    if isinstance(current, int):
        try:
            return int(raw)
        except ValueError:
            logger.warning(f"Ignoring non-integer environment value: {raw}")
            return current
    return raw


def apply_env_overrides(settings):
    """Environment variables win over values from settings.yaml"""
    for (section, key), env_name in ENV_OVERRIDES.items():
        raw = os.environ.get(env_name)
        if raw is None or raw == "":
            continue
        current = settings.setdefault(section, {}).get(key)
        settings[section][key] = _coerce_env_value(current, raw)
    return settings


def load_settings(force=False):
    global _cached_settings

    if _cached_settings and not force:
        return _cached_settings

    merged_settings = copy.deepcopy(DEFAULT_SETTINGS)
    if os.path.exists(CONFIG_FILE):
        logger.debug(f"Reading configuration file: {CONFIG_FILE}")
        with open(CONFIG_FILE, "r") as yaml_file:
            settings = yaml.safe_load(yaml_file) or {}

        # Deep merge with defaults to ensure new keys are present
        for section, values in settings.items():
            if isinstance(values, dict) and section in merged_settings and isinstance(merged_settings[section], dict):
                merged_settings[section].update(values)
            else:
                merged_settings[section] = values
    else:
        try:
            os.makedirs(CONFIG_DIR, exist_ok=True)
            with open(CONFIG_FILE, "w") as yaml_file:
                yaml.dump(merged_settings, yaml_file)
        except OSError as e:
            logger.warning(f"Could not write default configuration file {CONFIG_FILE}: {e}")

    _cached_settings = apply_env_overrides(merged_settings)
    return _cached_settings


def get_setting(section, key, default=None):
    value = load_settings().get(section, {}).get(key)
    return default if value is None else value


def stripe_configured():
    return bool(get_setting("stripe", "secret_key"))


def smtp_configured():
    return bool(get_setting("smtp", "host") and get_setting("smtp", "user") and get_setting("smtp", "password"))


def reload_conf():
    """Reload application settings cache"""
    global _cached_settings
    _cached_settings = None
    return load_settings(force=True)
