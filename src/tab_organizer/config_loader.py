# =============================================================================
# Configuration Loading
# =============================================================================

import copy
import os
import re
import time
import tomllib
from pathlib import Path

from loguru import logger

from .errors import Error, ErrorType, Result

CONFIG_DIR = Path("~/.config/tab-organizer").expanduser()
CONFIG_PATH = CONFIG_DIR / "config.toml"
CONFIG_ENV_VAR = "TAB_ORGANIZER_CONFIG"

# Default configuration - used as-is when no config file exists
DEFAULT_CONFIG = {
    "organize": {
        # Fixed-delay fallback between duplicate removal and sorting,
        # used when the host offers no settle hook.
        "settle_time": 0.05,
    },
    "layout": {
        "arrangement_name": "Tab Organizer",  # "" disables arrangement saving
    },
    "notifications": {
        "enabled": True,
        "title": "Tab Organizer",
    },
    "logging": {
        "level": "INFO",
    },
}


def get_config_path() -> Path:
    """Return the config path, honouring the TAB_ORGANIZER_CONFIG override."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return CONFIG_PATH


def extract_toml_error_context(error: tomllib.TOMLDecodeError, file_path: Path) -> dict:
    """
    Extract line context from TOML parse error.

    Args:
        error: The TOMLDecodeError exception
        file_path: Path to the TOML file

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
    result = copy.deepcopy(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def validate_config(config: dict) -> Result[dict]:
    """Check the values the organizer relies on."""
    for section in DEFAULT_CONFIG:
        if not isinstance(config.get(section), dict):
            return Result.err(Error(
                error_type=ErrorType.VALIDATION_ERROR,
                message=f"[{section}] must be a table, got {config.get(section)!r}",
                context={"key": section}
            ))

    level = config["logging"].get("level")
    try:
        logger.level(level)
    except (ValueError, TypeError):
        return Result.err(Error(
            error_type=ErrorType.VALIDATION_ERROR,
            message=f"logging.level must be a loguru level name, got {level!r}",
            context={"key": "logging.level"}
        ))

    settle_time = config["organize"].get("settle_time")
    if isinstance(settle_time, bool) or not isinstance(settle_time, (int, float)) or settle_time < 0:
        return Result.err(Error(
            error_type=ErrorType.VALIDATION_ERROR,
            message=f"organize.settle_time must be a non-negative number, got {settle_time!r}",
            context={"key": "organize.settle_time"}
        ))

    arrangement_name = config["layout"].get("arrangement_name")
    if not isinstance(arrangement_name, str):
        return Result.err(Error(
            error_type=ErrorType.VALIDATION_ERROR,
            message=f"layout.arrangement_name must be a string, got {arrangement_name!r}",
            context={"key": "layout.arrangement_name"}
        ))

    return Result.ok(config)


def load_config_from_path(config_path: Path) -> Result[dict]:
    """
    Load configuration from specified TOML file with defaults fallback.

    Args:
        config_path: Path to the TOML file

    Returns:
        Result[dict]: Ok with merged config, or Err with error details
    """
    start_time = time.perf_counter()
    logger.debug(
        "Loading config from path",
        operation="load_config_from_path",
        status="started",
        config_path=str(config_path)
    )

    if not config_path.exists():
        return Result.err(Error(
            error_type=ErrorType.FILE_NOT_FOUND,
            message=f"Config file not found: {config_path}",
            context={"config_path": str(config_path)}
        ))

    try:
        with open(config_path, "rb") as f:
            user_config = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        error_context = extract_toml_error_context(e, config_path)
        logger.error(
            "Invalid TOML syntax in configuration file",
            operation="load_config_from_path",
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
        return Result.err(Error(
            error_type=ErrorType.FILE_NOT_FOUND,
            message=f"Could not read config file: {e}",
            context={"config_path": str(config_path)},
            original_exception=e
        ))

    merged = deep_merge(DEFAULT_CONFIG, user_config)
    validated = validate_config(merged)
    if validated.is_err():
        return validated

    duration_ms = int((time.perf_counter() - start_time) * 1000)
    logger.debug(
        "Config loaded successfully",
        operation="load_config_from_path",
        status="success",
        config_path=str(config_path),
        metrics={"duration_ms": duration_ms}
    )
    return Result.ok(merged)


def load_config() -> dict:
    """
    Load the user configuration, falling back to defaults.

    A missing file is normal. An unreadable or invalid file is logged
    and the defaults are used instead.

    Returns:
        dict: Merged configuration
    """
    config_path = get_config_path()
    if not config_path.exists():
        logger.debug(
            "Config file does not exist, using defaults",
            operation="load_config",
            status="default",
            file=str(config_path)
        )
        return copy.deepcopy(DEFAULT_CONFIG)

    result = load_config_from_path(config_path)
    if result.is_err():
        logger.warning(
            "Using default configuration",
            operation="load_config",
            status="fallback",
            file=str(config_path),
            error_type=result.error.error_type.value,
            error=result.error.message
        )
        return copy.deepcopy(DEFAULT_CONFIG)

    return result.value
