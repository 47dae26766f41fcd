import pytest

from browser_prompt.config_loader import (
    deep_merge,
    default_config_path,
    load_config,
    parse_config,
    PREFERENCES_PATH,
)
from browser_prompt.errors import ErrorType
from browser_prompt.models import AppRule

SAMPLE = '''
browsers = ["/Applications/Safari.app", "/Applications/Firefox.app"]
hidden_browsers = ["/Applications/Firefox.app"]

[[apps]]
app = "/Applications/Notion.app"
host = "notion.so"
scheme_override = "notion"

[[apps]]
app = "/Applications/Slack.app"

[shortcuts]
"com.apple.Safari" = "s"
"org.mozilla.firefox" = "fx"

[copy]
close_after_copy = true
'''


def test_missing_file_gives_defaults(tmp_path):
    result = load_config(tmp_path / "nope.toml")
    assert result.is_ok()
    config = result.value
    assert config.browsers == ()
    assert config.apps == ()
    assert config.close_after_copy is False
    assert config.abort_on_rewrite_error is True


def test_loads_full_config(tmp_path):
    path = tmp_path / "preferences.toml"
    path.write_text(SAMPLE)

    result = load_config(path)

    assert result.is_ok()
    config = result.value
    assert config.browsers == ("/Applications/Safari.app", "/Applications/Firefox.app")
    assert config.hidden_browsers == frozenset({"/Applications/Firefox.app"})
    assert config.apps == (
        AppRule(app="/Applications/Notion.app", host="notion.so", scheme_override="notion"),
        AppRule(app="/Applications/Slack.app"),
    )
    # multi-character shortcut dropped
    assert config.shortcuts == {"com.apple.Safari": "s"}
    assert config.close_after_copy is True
    assert config.alternative_shortcut is False


def test_invalid_toml_reports_line(tmp_path):
    path = tmp_path / "preferences.toml"
    path.write_text('browsers = ["/Applications/Safari.app"\nhidden_browsers = 3\n')

    result = load_config(path)

    assert result.is_err()
    assert result.error.error_type is ErrorType.PARSE_ERROR
    assert result.error.context["config_path"] == str(path)


def test_wrong_shape_is_validation_error(tmp_path):
    path = tmp_path / "preferences.toml"
    path.write_text('browsers = "/Applications/Safari.app"\n')

    result = load_config(path)

    assert result.is_err()
    assert result.error.error_type is ErrorType.VALIDATION_ERROR


def test_app_rule_without_app_is_rejected():
    with pytest.raises(ValueError, match=r"apps\[0\]"):
        parse_config({"apps": [{"host": "example.com"}]})


def test_deep_merge_keeps_nested_defaults():
    merged = deep_merge({"copy": {"a": 1, "b": 2}}, {"copy": {"b": 3}})
    assert merged == {"copy": {"a": 1, "b": 3}}


def test_config_path_env_override(monkeypatch, tmp_path):
    monkeypatch.delenv("BROWSER_PROMPT_CONFIG", raising=False)
    assert default_config_path() == PREFERENCES_PATH

    monkeypatch.setenv("BROWSER_PROMPT_CONFIG", str(tmp_path / "alt.toml"))
    assert default_config_path() == tmp_path / "alt.toml"
