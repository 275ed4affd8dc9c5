import os
from pathlib import Path
from typing import Optional

import yaml

CONFIG_FILENAME = ".prthreads.yml"

DEFAULT_CONFIG: dict = {
    "repo": None,  # owner/name; None = detect from the origin remote
    "max_length": 300,  # list lines are cut here unless show_full is set
    "show_full": False,
    "show_resolved": False,
    "bot_authors": ["github-actions[bot]", "copilot-pull-request-reviewer[bot]"],
    "request_timeout": 30,  # seconds, per HTTP request
    "api_base_url": "https://api.github.com",  # GitHub Enterprise: https://<host>/api/v3
}


def _read_yaml(path: Path) -> dict:
    if not path.exists():
        return {}
    data = yaml.safe_load(path.read_text()) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a YAML mapping, got {type(data).__name__}.")
    return data


_POSITIVE_INT_KEYS = ("max_length", "request_timeout")


def _positive_int(key: str, value) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{key} must be a whole number, got {value!r}.") from None
    if isinstance(value, bool) or number < 1:
        raise ValueError(f"{key} must be a positive whole number, got {value!r}.")
    return number


def load_config(config_path: str = CONFIG_FILENAME, cli_overrides: Optional[dict] = None) -> dict:
    """
    Merge settings, later sources winning:
      1. DEFAULT_CONFIG
      2. the YAML file at ``config_path`` (skipped when absent)
      3. non-None CLI overrides

    ``github_token`` is always taken from GITHUB_TOKEN / GH_TOKEN, never the file.
    ``max_length`` and ``request_timeout`` are coerced to positive ints; anything
    else raises ValueError.
    """
    config = dict(DEFAULT_CONFIG, bot_authors=list(DEFAULT_CONFIG["bot_authors"]))
    config.update(_read_yaml(Path(config_path)))
    config.update({k: v for k, v in (cli_overrides or {}).items() if v is not None})
    for key in _POSITIVE_INT_KEYS:
        config[key] = _positive_int(key, config[key])
    config["github_token"] = os.environ.get("GITHUB_TOKEN") or os.environ.get("GH_TOKEN")
    return config


def write_config(values: dict, config_path: str = CONFIG_FILENAME) -> Path:
    """Merge ``values`` into the config file, keeping keys it already has."""
    path = Path(config_path)
    merged = {**_read_yaml(path), **values}
    path.write_text(yaml.dump(merged, default_flow_style=False, sort_keys=False))
    return path
