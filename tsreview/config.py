"""Review configuration: thresholds, excludes and per-rule levels.

Settings come from an optional JSON file (``.tsreview.json`` in the scan
root, or an explicit ``--config`` path). Everything has a default, so a
project without a config file is reviewed with the stock rules.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from tsreview.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".tsreview.json"
RULE_LEVELS = ("off", "error", "warning", "note")

THRESHOLD_KEYS = (
    "max_file_lines",
    "max_function_lines",
    "max_nesting_depth",
    "max_relative_depth",
    "max_params",
    "max_switch_cases",
    "max_props",
)


@dataclass
class Config:
    max_file_lines: int = 300
    max_function_lines: int = 50
    max_nesting_depth: int = 3
    max_relative_depth: int = 2
    max_params: int = 3
    max_switch_cases: int = 5
    max_props: int = 7
    exclude: list[str] = field(default_factory=list)
    rules: dict[str, str] = field(default_factory=dict)

    def level(self, rule_id: str, default: str) -> str:
        """Configured level for a rule, or its default severity."""
        return self.rules.get(rule_id, default)


def parse_config(data: dict, known_rules=None) -> Config:
    """Validate a decoded config mapping and build a Config."""
    if not isinstance(data, dict):
        raise ConfigError("config must be a JSON object")
    allowed = set(THRESHOLD_KEYS) | {"exclude", "rules"}
    unknown = sorted(set(data) - allowed)
    if unknown:
        raise ConfigError(f"unknown config key(s): {', '.join(unknown)}")

    config = Config()
    for key in THRESHOLD_KEYS:
        if key not in data:
            continue
        value = data[key]
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise ConfigError(f"{key} must be a positive integer, got {value!r}")
        setattr(config, key, value)

    exclude = data.get("exclude", [])
    if not isinstance(exclude, list) or not all(isinstance(p, str) for p in exclude):
        raise ConfigError("exclude must be a list of glob patterns")
    config.exclude = list(exclude)

    rules = data.get("rules", {})
    if not isinstance(rules, dict):
        raise ConfigError("rules must be an object mapping rule ids to levels")
    for rule_id, level in rules.items():
        if known_rules is not None and rule_id not in known_rules:
            raise ConfigError(f"unknown rule id in config: {rule_id}")
        if level not in RULE_LEVELS:
            raise ConfigError(
                f"invalid level {level!r} for {rule_id}; expected one of {', '.join(RULE_LEVELS)}"
            )
    config.rules = dict(rules)
    return config


def load_config(root: Path, path: Path | None = None, known_rules=None) -> Config:
    """Load the config for a scan root.

    An explicit path must exist. Without one, ``.tsreview.json`` in the root
    is used when present, else the defaults.
    """
    if path is None:
        candidate = root / CONFIG_FILENAME
        if not candidate.is_file():
            logger.debug("no %s in %s, using defaults", CONFIG_FILENAME, root)
            return Config()
        path = candidate
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"cannot read config {path}: {exc}") from exc
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"invalid JSON in {path} (line {exc.lineno}, column {exc.colno}): {exc.msg}") from exc
    config = parse_config(data, known_rules)
    logger.debug("loaded config from %s", path)
    return config
