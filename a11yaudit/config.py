from typing import Any, Dict, List, Optional

import yaml

from .errors import UsageError
from .events import EventLog
from .models import TestConfig, BROWSERS, FAIL_LEVELS
from .scenarios import parse_scenarios

DEFAULTS: Dict[str, Any] = {
    "url": None,
    "baseUrl": None,
    "password": None,
    "outputDir": "./a11y-reports",
    "name": None,
    "browser": "chromium",
    "headless": True,
    "exclude": [],
    "failOn": "serious",
    "treatIncompleteAsViolations": False,
    "scenarios": [],
    "axeSource": TestConfig.axe_source,
    "logFile": None,
    "summaryReport": None,
    "verbose": False,
}

# Config file key -> TestConfig field
FIELD_NAMES = {
    "url": "url",
    "baseUrl": "base_url",
    "password": "password",
    "outputDir": "output_dir",
    "name": "name",
    "browser": "browser",
    "headless": "headless",
    "exclude": "exclude",
    "failOn": "fail_on",
    "treatIncompleteAsViolations": "treat_incomplete_as_violations",
    "scenarios": "scenarios",
    "axeSource": "axe_source",
    "logFile": "log_file",
    "summaryReport": "summary_report",
    "verbose": "verbose",
}


def load_config_file(path: str) -> Dict[str, Any]:
    """Reads a YAML or JSON config file (JSON is valid YAML)."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise UsageError(f"Failed to load config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise UsageError(f"Failed to parse config file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise UsageError(f"Config file {path} must contain a mapping at the top level")
    return data


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in ("false", "0", "no", "off", "")
    return bool(value)


def _as_selectors(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return [str(s).strip() for s in value if str(s).strip()]


def merge_layers(file_values: Optional[Dict[str, Any]] = None,
                 overrides: Optional[Dict[str, Any]] = None,
                 log: Optional[EventLog] = None) -> Dict[str, Any]:
    """
    defaults < file < overrides. A layer only contributes keys it actually
    sets (None means "unset"); an empty override list does not hide the file's.
    """
    merged = dict(DEFAULTS)
    for layer_name, layer in (("file", file_values or {}), ("override", overrides or {})):
        for key, value in layer.items():
            if key not in DEFAULTS:
                if log:
                    log.warning("CONFIG_KEY_IGNORED", f"Unknown {layer_name} config key '{key}' ignored", key=key)
                continue
            if value is None or (isinstance(value, (list, tuple)) and not value):
                continue
            merged[key] = value
    return merged


def resolve_config(file_values: Optional[Dict[str, Any]] = None,
                   overrides: Optional[Dict[str, Any]] = None,
                   log: Optional[EventLog] = None) -> TestConfig:
    merged = merge_layers(file_values, overrides, log)

    browser = str(merged["browser"]).lower()
    if browser not in BROWSERS:
        raise UsageError(f"Unsupported browser '{merged['browser']}' (expected one of: {', '.join(BROWSERS)})")

    fail_on = str(merged["failOn"]).lower()
    if fail_on not in FAIL_LEVELS:
        raise UsageError(f"Unsupported failOn '{merged['failOn']}' (expected one of: {', '.join(FAIL_LEVELS)})")

    values = {FIELD_NAMES[k]: v for k, v in merged.items()}
    values.update(
        browser=browser,
        fail_on=fail_on,
        headless=_as_bool(merged["headless"]),
        treat_incomplete_as_violations=_as_bool(merged["treatIncompleteAsViolations"]),
        verbose=_as_bool(merged["verbose"]),
        exclude=tuple(_as_selectors(merged["exclude"])),
        scenarios=parse_scenarios(merged["scenarios"], log),
        output_dir=str(merged["outputDir"]),
    )
    config = TestConfig(**values)
    validate_config(config)
    return config


def validate_config(config: TestConfig):
    """Fails fast when there is nothing to test."""
    if not config.url and not config.base_url and not config.scenarios:
        raise UsageError("--url or --config with scenarios is required")
    if config.scenarios and not (config.base_url or config.url):
        raise UsageError("Scenarios need a 'baseUrl' (or 'url') to resolve their paths against")
