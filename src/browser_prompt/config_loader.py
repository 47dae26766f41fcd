"""Configuration loading (read-only TOML snapshot per session)."""

from __future__ import annotations

import os
import re
import time
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from browser_prompt.errors import Error, ErrorType, Result
from browser_prompt.models import AppRule

# =============================================================================
# Paths
# =============================================================================

CONFIG_DIR = Path("~/.config/browser-prompt").expanduser()
PREFERENCES_PATH = CONFIG_DIR / "preferences.toml"
CONFIG_PATH_ENV = "BROWSER_PROMPT_CONFIG"

# Default configuration - an empty prompt until the user lists browsers
DEFAULT_CONFIG = {
    "browsers": [],
    "hidden_browsers": [],
    "apps": [],
    "shortcuts": {},
    "copy": {
        "close_after_copy": False,
        "alternative_shortcut": False,  # Cmd+C instead of Cmd+Option+C
    },
    "dispatch": {
        "abort_on_rewrite_error": True,
    },
}


@dataclass(frozen=True)
class PromptConfig:
    """Immutable configuration snapshot for one prompt session."""
    browsers: tuple[str, ...] = ()
    hidden_browsers: frozenset[str] = frozenset()
    apps: tuple[AppRule, ...] = ()
    shortcuts: dict[str, str] = field(default_factory=dict)
    close_after_copy: bool = False
    alternative_shortcut: bool = False
    abort_on_rewrite_error: bool = True


def default_config_path() -> Path:
    """Config path, honouring the BROWSER_PROMPT_CONFIG override."""
    override = os.environ.get(CONFIG_PATH_ENV)
    if override:
        return Path(override).expanduser()
    return PREFERENCES_PATH


def extract_toml_error_context(error: tomllib.TOMLDecodeError, file_path: Path) -> dict:
    """
    Extract line context from TOML parse error.

    Returns:
        Dict with line_number, line_content, and formatted_message
    """
    error_str = str(error)
    line_number = None
    line_content = None

    # Common formats: "line 15", "at line 15", "(line 15)"
    line_match = re.search(r'line\s+(\d+)', error_str, re.IGNORECASE)
    if line_match:
        line_number = int(line_match.group(1))

    if line_number and file_path.exists():
        try:
            with open(file_path, "r") as f:
                lines = f.readlines()
                if 0 < line_number <= len(lines):
                    line_content = lines[line_number - 1].rstrip()
        except OSError:
            pass

    if line_number:
        formatted = f"Error on line {line_number}"
        if line_content:
            display_line = line_content[:50] + "..." if len(line_content) > 50 else line_content
            formatted += f": {display_line}"
        formatted += f"\n\nDetails: {error_str}"
    else:
        formatted = f"TOML parse error: {error_str}"

    return {
        "line_number": line_number,
        "line_content": line_content,
        "formatted_message": formatted,
        "raw_error": error_str
    }


def deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base dictionary."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _string_list(raw: dict, key: str) -> list[str]:
    value = raw.get(key, [])
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"'{key}' must be a list of strings")
    return value


def _parse_apps(raw_apps) -> list[AppRule]:
    if not isinstance(raw_apps, list):
        raise ValueError("'apps' must be an array of tables")

    rules = []
    for i, entry in enumerate(raw_apps):
        if not isinstance(entry, dict) or not isinstance(entry.get("app"), str) or not entry["app"]:
            raise ValueError(f"apps[{i}] needs an 'app' path")
        host = entry.get("host", "")
        scheme_override = entry.get("scheme_override", "")
        if not isinstance(host, str) or not isinstance(scheme_override, str):
            raise ValueError(f"apps[{i}]: 'host' and 'scheme_override' must be strings")
        rules.append(AppRule(
            app=entry["app"],
            host=host.strip(),
            scheme_override=scheme_override.strip(),
        ))
    return rules


def _parse_shortcuts(raw_shortcuts) -> dict[str, str]:
    if not isinstance(raw_shortcuts, dict):
        raise ValueError("'shortcuts' must be a table of bundle id = key")

    shortcuts = {}
    for bundle_id, key in raw_shortcuts.items():
        if not isinstance(key, str) or len(key) != 1:
            logger.warning(
                "Ignoring shortcut - must be a single character",
                operation="load_config",
                status="skip",
                bundle_id=bundle_id,
                shortcut=key
            )
            continue
        shortcuts[bundle_id] = key
    return shortcuts


def parse_config(raw: dict) -> PromptConfig:
    """
    Build a PromptConfig from a merged config dict.

    Raises:
        ValueError: If a key has the wrong shape
    """
    merged = deep_merge(DEFAULT_CONFIG, raw)
    return PromptConfig(
        browsers=tuple(_string_list(merged, "browsers")),
        hidden_browsers=frozenset(_string_list(merged, "hidden_browsers")),
        apps=tuple(_parse_apps(merged["apps"])),
        shortcuts=_parse_shortcuts(merged["shortcuts"]),
        close_after_copy=bool(merged["copy"].get("close_after_copy", False)),
        alternative_shortcut=bool(merged["copy"].get("alternative_shortcut", False)),
        abort_on_rewrite_error=bool(merged["dispatch"].get("abort_on_rewrite_error", True)),
    )


def load_config(config_path: Path | None = None) -> Result[PromptConfig]:
    """
    Load configuration from a TOML file with defaults fallback.

    A missing file is not an error: the defaults (no browsers) are returned.

    Args:
        config_path: Path to preferences.toml (default: default_config_path())

    Returns:
        Result[PromptConfig]: Ok with the snapshot, or Err with error details
    """
    config_path = config_path or default_config_path()
    start_time = time.perf_counter()

    if not config_path.exists():
        logger.debug(
            "Config file does not exist, using defaults",
            operation="load_config",
            status="default",
            config_path=str(config_path)
        )
        return Result.ok(parse_config({}))

    try:
        with open(config_path, "rb") as f:
            user_config = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        error_context = extract_toml_error_context(e, config_path)
        logger.error(
            "Invalid TOML syntax in configuration file",
            operation="load_config",
            status="failed",
            file=str(config_path),
            line_number=error_context["line_number"],
            line_content=error_context["line_content"],
            error=error_context["formatted_message"]
        )
        return Result.err(Error(
            error_type=ErrorType.PARSE_ERROR,
            message=error_context["formatted_message"],
            context={"config_path": str(config_path), "line_number": error_context["line_number"]},
            original_exception=e
        ))
    except OSError as e:
        logger.error(
            "Could not read configuration file",
            operation="load_config",
            status="failed",
            file=str(config_path),
            error=str(e)
        )
        return Result.err(Error(
            error_type=ErrorType.FILE_NOT_FOUND,
            message=f"Could not read config file: {config_path}",
            context={"config_path": str(config_path)},
            original_exception=e
        ))

    try:
        config = parse_config(user_config)
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        logger.error(
            "Invalid configuration structure",
            operation="load_config",
            status="failed",
            file=str(config_path),
            error=str(e),
            error_type=type(e).__name__
        )
        return Result.err(Error(
            error_type=ErrorType.VALIDATION_ERROR,
            message=f"Invalid configuration: {e}",
            context={"config_path": str(config_path)},
            original_exception=e
        ))

    duration_ms = int((time.perf_counter() - start_time) * 1000)
    logger.debug(
        "Config loaded successfully",
        operation="load_config",
        status="success",
        config_path=str(config_path),
        metrics={
            "browsers_count": len(config.browsers),
            "hidden_count": len(config.hidden_browsers),
            "apps_count": len(config.apps),
            "shortcuts_count": len(config.shortcuts),
            "duration_ms": duration_ms,
        }
    )
    return Result.ok(config)
