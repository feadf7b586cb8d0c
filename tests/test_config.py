from pathlib import Path

import pytest

from study_notes_assistant.config import AppConfig, load_config


@pytest.fixture(autouse=True)
def _no_env_override(monkeypatch):
    monkeypatch.delenv("STUDY_NOTES_DIR", raising=False)


def test_missing_config_file_uses_defaults(tmp_path):
    cfg = load_config(tmp_path / "config.yaml")

    assert cfg == AppConfig()
    assert cfg.max_notes == 100


def test_config_file_values(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("notes_dir: my_notes\nmax_notes: 10\nlog_level: DEBUG\n", encoding="utf-8")

    cfg = load_config(path)

    assert cfg.notes_dir == Path("my_notes")
    assert cfg.max_notes == 10
    assert cfg.log_level == "DEBUG"


def test_invalid_config_exits(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("max_notes: 500\n", encoding="utf-8")

    with pytest.raises(SystemExit):
        load_config(path)


def test_env_overrides_notes_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("STUDY_NOTES_DIR", str(tmp_path / "env_notes"))

    cfg = load_config(tmp_path / "config.yaml")

    assert cfg.notes_dir == tmp_path / "env_notes"
