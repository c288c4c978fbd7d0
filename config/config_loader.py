import json
import os
from datetime import datetime

DEFAULT_CONFIG_PATH = "config/runtime_config.json"

DEFAULT_CONFIG = {
    "engine_url": "http://192.168.4.1",
    "request_timeout": 10,
    "display_delay_ms": 500,
    "output_directory": "logs/",
    "log_file_prefix": "tm_editor_",
    "download_directory": "downloads/",
    "enable_request_log": True
}

# Expected types for validation
CONFIG_SCHEMA = {
    "engine_url": str,
    "request_timeout": (int, float),
    "display_delay_ms": int,
    "output_directory": str,
    "log_file_prefix": str,
    "download_directory": str,
    "enable_request_log": bool
}


def validate_config(config):
    for key, expected_type in CONFIG_SCHEMA.items():
        if key not in config:
            raise ValueError(f"Missing required configuration key: {key}")
        if not isinstance(config[key], expected_type):
            raise TypeError(f"Config key '{key}' expected {expected_type}, got {type(config[key])}.")

    if not config["engine_url"].startswith(("http://", "https://")):
        raise ValueError("engine_url must start with http:// or https://")
    if config["request_timeout"] <= 0:
        raise ValueError("request_timeout must be positive.")
    if config["display_delay_ms"] < 0:
        raise ValueError("display_delay_ms must not be negative.")


def load_config(path=DEFAULT_CONFIG_PATH, verbose=False):
    if not os.path.exists(path):
        raise FileNotFoundError(f"Configuration file not found at: {path}")

    with open(path, "r", encoding="utf-8") as f:
        user_config = json.load(f)

    # Merge defaults with overrides
    config = DEFAULT_CONFIG.copy()
    config.update(user_config)

    # Validate schema
    validate_config(config)

    # Validate output directories
    os.makedirs(config["output_directory"], exist_ok=True)
    os.makedirs(config["download_directory"], exist_ok=True)

    if verbose:
        print(f"[{datetime.now()}] Loaded config:")
        for key, value in config.items():
            print(f"  {key}: {value}")

    return config


def save_config(config, path=DEFAULT_CONFIG_PATH):
    validate_config(config)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=4)
