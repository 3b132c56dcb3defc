"""Unit tests for configuration management."""

from pathlib import Path

import pytest

from symtag.config import (
    ConfigError,
    ConfigManager,
    SymtagConfig,
    env_to_overrides,
    flatten_for_env,
    resolve_with_precedence,
)


def _fresh_manager(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> ConfigManager:
    monkeypatch.setenv("HOME", str(tmp_path))
    return ConfigManager(env={})


def test_defaults_name_the_original_roots() -> None:
    config = SymtagConfig()

    assert config.paths.items_root == "all"
    assert config.paths.tags_root == "tags"
    assert config.launcher.command is None


def test_load_without_file_does_not_create_it(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)

    config = manager.load()

    assert config == SymtagConfig()
    assert not manager.config_path.exists()


def test_ensure_exists_creates_default_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)

    path = manager.ensure_exists()

    assert path == tmp_path / ".symtag" / "config.yaml"
    text = path.read_text(encoding="utf-8")
    assert "symtag configuration file" in text
    assert "Last updated:" in text
    assert manager.load(include_env=False) == SymtagConfig()


def test_resolve_with_precedence_respects_order(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.save({"paths": {"items_root": "~/files", "tags_root": "~/labels"}})

    env = {"SYMTAG__PATHS__TAGS_ROOT": "/env/tags", "SYMTAG__LOGGING__LEVEL": "debug"}
    cli = {"paths.tags_root": "/cli/tags"}

    config = manager.load(cli_overrides=cli, env_overrides=env)

    assert config.paths.items_root == "~/files"
    assert config.paths.tags_root == "/cli/tags"
    assert config.logging.level == "DEBUG"


def test_env_to_overrides_parses_yaml_scalars() -> None:
    overrides = env_to_overrides(
        {"SYMTAG__CLI__QUIET_DEFAULT": "true", "OTHER": "x", "SYMTAG__": "ignored"}
    )

    assert overrides == {"cli": {"quiet_default": True}}


def test_invalid_yaml_raises_config_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.ensure_exists()

    manager.config_path.write_text("- not-a-mapping", encoding="utf-8")

    with pytest.raises(ConfigError):
        manager.load()


def test_flatten_for_env_round_trips_defaults() -> None:
    flat = flatten_for_env(SymtagConfig())

    assert flat["SYMTAG__PATHS__ITEMS_ROOT"] == "all"
    assert flat["SYMTAG__LAUNCHER__COMMAND"] == "null"
    assert flat["SYMTAG__CLI__QUIET_DEFAULT"] == "False"


@pytest.mark.parametrize(
    "overrides",
    [
        {"logging": {"level": "chatty"}},
        {"paths": {"unknown": "x"}},
        {"cli": {"quiet_default": "not-a-bool"}},
    ],
)
def test_resolve_with_precedence_invalid_value_raises(overrides: dict) -> None:
    with pytest.raises(ConfigError):
        resolve_with_precedence(defaults=SymtagConfig(), file_overrides=overrides)
