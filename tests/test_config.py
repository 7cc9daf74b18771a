"""Tests for configuration loading."""
import tomllib

from tab_organizer.config_loader import (
    CONFIG_ENV_VAR,
    DEFAULT_CONFIG,
    deep_merge,
    extract_toml_error_context,
    load_config,
    load_config_from_path,
)
from tab_organizer.errors import ErrorType


def test_missing_file_uses_defaults(tmp_path, monkeypatch):
    monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "absent.toml"))

    config = load_config()

    assert config == DEFAULT_CONFIG
    assert config is not DEFAULT_CONFIG


def test_user_values_merged_over_defaults(tmp_path, monkeypatch):
    config_file = tmp_path / "config.toml"
    config_file.write_text('[organize]\nsettle_time = 0.5\n\n[notifications]\nenabled = false\n')
    monkeypatch.setenv(CONFIG_ENV_VAR, str(config_file))

    config = load_config()

    assert config["organize"]["settle_time"] == 0.5
    assert config["notifications"]["enabled"] is False
    assert config["notifications"]["title"] == "Tab Organizer"
    assert config["layout"]["arrangement_name"] == "Tab Organizer"


def test_invalid_toml_falls_back_to_defaults(tmp_path, monkeypatch):
    config_file = tmp_path / "config.toml"
    config_file.write_text("[organize\nsettle_time = 1\n")
    monkeypatch.setenv(CONFIG_ENV_VAR, str(config_file))

    assert load_config() == DEFAULT_CONFIG


def test_parse_error_result(tmp_path):
    config_file = tmp_path / "config.toml"
    config_file.write_text("[organize]\nsettle_time = = 1\n")

    result = load_config_from_path(config_file)

    assert result.is_err()
    assert result.error.error_type == ErrorType.PARSE_ERROR


def test_negative_settle_time_rejected(tmp_path):
    config_file = tmp_path / "config.toml"
    config_file.write_text("[organize]\nsettle_time = -1\n")

    result = load_config_from_path(config_file)

    assert result.is_err()
    assert result.error.error_type == ErrorType.VALIDATION_ERROR


def test_missing_path_result(tmp_path):
    result = load_config_from_path(tmp_path / "nope.toml")

    assert result.error.error_type == ErrorType.FILE_NOT_FOUND


def test_deep_merge_keeps_nested_defaults():
    merged = deep_merge({"a": {"x": 1, "y": 2}, "b": 1}, {"a": {"y": 3}})

    assert merged == {"a": {"x": 1, "y": 3}, "b": 1}


def test_toml_error_context_reports_line(tmp_path):
    config_file = tmp_path / "config.toml"
    config_file.write_text("[layout]\narrangement_name = \n")
    try:
        tomllib.loads(config_file.read_text())
    except tomllib.TOMLDecodeError as e:
        context = extract_toml_error_context(e, config_file)

    assert context["line_number"] == 2
    assert context["line_content"] == "arrangement_name ="
    assert context["formatted_message"].startswith("Error on line 2")


def test_non_table_section_falls_back_to_defaults(tmp_path, monkeypatch):
    config_file = tmp_path / "config.toml"
    config_file.write_text("organize = 1\n")
    monkeypatch.setenv(CONFIG_ENV_VAR, str(config_file))

    result = load_config_from_path(config_file)

    assert result.is_err()
    assert result.error.error_type == ErrorType.VALIDATION_ERROR
    assert load_config() == DEFAULT_CONFIG


def test_unknown_logging_level_falls_back_to_defaults(tmp_path, monkeypatch):
    config_file = tmp_path / "config.toml"
    config_file.write_text('[logging]\nlevel = "LOUD"\n')
    monkeypatch.setenv(CONFIG_ENV_VAR, str(config_file))

    result = load_config_from_path(config_file)

    assert result.is_err()
    assert result.error.context == {"key": "logging.level"}
    assert load_config()["logging"]["level"] == "INFO"


def test_known_logging_level_accepted(tmp_path):
    config_file = tmp_path / "config.toml"
    config_file.write_text('[logging]\nlevel = "DEBUG"\n')

    assert load_config_from_path(config_file).value["logging"]["level"] == "DEBUG"


def test_loaded_config_does_not_share_state_with_defaults(tmp_path, monkeypatch):
    config_file = tmp_path / "config.toml"
    config_file.write_text("[organize]\nsettle_time = 0.5\n")
    monkeypatch.setenv(CONFIG_ENV_VAR, str(config_file))

    config = load_config()
    config["layout"]["arrangement_name"] = "changed"
    config["notifications"]["enabled"] = False

    assert DEFAULT_CONFIG["layout"]["arrangement_name"] == "Tab Organizer"
    assert DEFAULT_CONFIG["notifications"]["enabled"] is True
    assert load_config()["layout"]["arrangement_name"] == "Tab Organizer"
