"""Tests for DraftlineConfig, TOML loading and env overrides."""

from pathlib import Path

import pytest
from draftline.config import DraftlineConfig, load_config
from draftline.render.markdown import RenderEngine

ENV_VARS = (
    "DRAFTLINE_AUTOSAVE_DELAY",
    "DRAFTLINE_AUTOSAVE_ENABLED",
    "DRAFTLINE_HISTORY_LIMIT",
    "DRAFTLINE_RENDER_ENGINE",
    "DRAFTLINE_UNSUBSCRIBE_URL",
    "DRAFTLINE_FOOTER_TEXT",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, tmp_path):
    """Isolate tests from the caller's environment and config files."""
    for key in ENV_VARS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("draftline.config.GLOBAL_CONFIG_PATH", tmp_path / "absent.toml")


class TestDefaults:
    def test_editor(self):
        cfg = DraftlineConfig()
        assert cfg.editor.history_limit == 50
        assert cfg.editor.words_per_minute == 200

    def test_autosave(self):
        cfg = DraftlineConfig()
        assert cfg.autosave.enabled is True
        assert cfg.autosave.delay_seconds == 30.0

    def test_render(self):
        cfg = DraftlineConfig()
        assert cfg.render.engine == RenderEngine.BASIC
        assert cfg.render.allow_iframes is False

    def test_email(self):
        cfg = DraftlineConfig()
        assert cfg.email.unsubscribe_url == "#"
        assert cfg.email.unsubscribe_text == "Unsubscribe"


class TestLoadConfig:
    def test_no_file_gives_defaults(self):
        assert load_config() == DraftlineConfig()

    def test_explicit_path(self, tmp_path: Path):
        path = tmp_path / "custom.toml"
        path.write_text(
            '[autosave]\ndelay_seconds = 5\n\n[render]\nengine = "markdown"\n',
            encoding="utf-8",
        )
        cfg = load_config(path)
        assert cfg.autosave.delay_seconds == 5.0
        assert cfg.render.engine == RenderEngine.MARKDOWN

    def test_missing_explicit_path(self, tmp_path: Path, caplog):
        cfg = load_config(tmp_path / "nope.toml")
        assert cfg == DraftlineConfig()
        assert "Config file not found" in caplog.text

    def test_cwd_file_discovered(self, tmp_path: Path):
        (tmp_path / ".draftline.toml").write_text(
            "[editor]\nhistory_limit = 10\n", encoding="utf-8"
        )
        assert load_config().editor.history_limit == 10

    def test_corrupt_toml_gives_defaults(self, tmp_path: Path, caplog):
        path = tmp_path / "bad.toml"
        path.write_text("[editor\nhistory_limit = ", encoding="utf-8")
        assert load_config(path) == DraftlineConfig()
        assert "Failed to parse" in caplog.text

    def test_invalid_value_rejected(self, tmp_path: Path):
        path = tmp_path / "bad.toml"
        path.write_text("[autosave]\ndelay_seconds = 0\n", encoding="utf-8")
        with pytest.raises(ValueError):
            load_config(path)


class TestEnvOverrides:
    def test_env_beats_toml(self, tmp_path: Path, monkeypatch):
        path = tmp_path / "c.toml"
        path.write_text("[autosave]\ndelay_seconds = 5\n", encoding="utf-8")
        monkeypatch.setenv("DRAFTLINE_AUTOSAVE_DELAY", "2.5")
        assert load_config(path).autosave.delay_seconds == 2.5

    def test_enabled_flag(self, monkeypatch):
        monkeypatch.setenv("DRAFTLINE_AUTOSAVE_ENABLED", "false")
        assert load_config().autosave.enabled is False

    def test_email_settings(self, monkeypatch):
        monkeypatch.setenv("DRAFTLINE_UNSUBSCRIBE_URL", "https://example.com/u")
        monkeypatch.setenv("DRAFTLINE_FOOTER_TEXT", "Bye")
        cfg = load_config()
        assert cfg.email.unsubscribe_url == "https://example.com/u"
        assert cfg.email.footer_text == "Bye"

    def test_engine_and_history(self, monkeypatch):
        monkeypatch.setenv("DRAFTLINE_RENDER_ENGINE", "markdown")
        monkeypatch.setenv("DRAFTLINE_HISTORY_LIMIT", "7")
        cfg = load_config()
        assert cfg.render.engine == RenderEngine.MARKDOWN
        assert cfg.editor.history_limit == 7
