"""Unit tests for configuration management."""

from pathlib import Path

import pytest

from changeversion.config import (
    ConfigError,
    ConfigManager,
    CvConfig,
    flatten_for_env,
    resolve_with_precedence,
)


def _fresh_manager(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> ConfigManager:
    monkeypatch.setenv("HOME", str(tmp_path))
    return ConfigManager()


def test_ensure_exists_creates_default_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)

    path = manager.ensure_exists()

    assert path == tmp_path / ".config" / "changeversion" / "config.yaml"
    text = path.read_text(encoding="utf-8")
    assert "ChangeVersion configuration file" in text
    assert "Last updated:" in text

    config = manager.load(include_env=False)
    assert isinstance(config, CvConfig)
    assert config.repository.control_dirname == ".cv"


def test_load_without_file_uses_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)

    config = manager.load(include_env=False)

    assert config == CvConfig()
    assert not manager.config_path.exists()


def test_resolve_with_precedence_respects_order(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.ensure_exists()

    manager.save({"remote": {"timeout_seconds": 12}, "commit": {"empty_commit": "reject"}})

    env = {"CV__REMOTE__TIMEOUT_SECONDS": "7.5", "CV__CLI__SHOW_TIMESTAMPS": "false"}
    cli = {"remote.timeout_seconds": 3}

    config = manager.load(cli_overrides=cli, env_overrides=env)

    assert config.commit.empty_commit == "reject"
    assert config.cli.show_timestamps is False
    # CLI overrides take precedence over environment
    assert config.remote.timeout_seconds == pytest.approx(3)


def test_environment_overrides_from_constructor(tmp_path: Path) -> None:
    manager = ConfigManager(
        config_path=tmp_path / "config.yaml",
        env={"CV__REPOSITORY__CONTROL_DIRNAME": ".history", "UNRELATED": "x"},
    )

    config = manager.load()

    assert config.repository.control_dirname == ".history"


def test_invalid_yaml_raises_config_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.ensure_exists()

    manager.config_path.write_text("- not-a-mapping", encoding="utf-8")

    with pytest.raises(ConfigError):
        manager.load()


def test_flatten_for_env_round_trips_defaults() -> None:
    flat = flatten_for_env(CvConfig())

    assert flat["CV__REPOSITORY__IGNORE_FILENAME"] == ".cvignore"
    assert flat["CV__COMMIT__EMPTY_COMMIT"] == "prompt"
    assert flat["CV__LOGGING__FILE_LOGGING"] == "true"


@pytest.mark.parametrize(
    "overrides",
    [
        {"remote": {"timeout_seconds": "not-a-number"}},
        {"commit": {"empty_commit": "sometimes"}},
        {"repository": {"unknown_key": 1}},
    ],
)
def test_resolve_with_precedence_invalid_value_raises(overrides: dict) -> None:
    with pytest.raises(ConfigError):
        resolve_with_precedence(defaults=CvConfig(), file_overrides=overrides)
