"""Unified configuration loaded from .draftline.toml and env vars.

Loading order: defaults → TOML file → env vars.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, Field

from draftline.autosave import DEFAULT_AUTOSAVE_DELAY
from draftline.editor.history import DEFAULT_HISTORY_LIMIT
from draftline.render.email import DEFAULT_FOOTER_TEXT, DEFAULT_UNSUBSCRIBE_TEXT
from draftline.render.markdown import RenderEngine

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".draftline.toml"
GLOBAL_CONFIG_PATH = Path.home() / ".config" / "draftline" / "config.toml"


class EditorSectionConfig(BaseModel):
    """[editor] section."""

    history_limit: int = Field(default=DEFAULT_HISTORY_LIMIT, ge=1)
    words_per_minute: int = Field(default=200, ge=1)


class AutosaveSectionConfig(BaseModel):
    """[autosave] section."""

    enabled: bool = True
    delay_seconds: float = Field(default=DEFAULT_AUTOSAVE_DELAY, gt=0)


class RenderSectionConfig(BaseModel):
    """[render] section."""

    engine: RenderEngine = RenderEngine.BASIC
    allow_iframes: bool = False


class EmailSectionConfig(BaseModel):
    """[email] section."""

    footer_text: str = DEFAULT_FOOTER_TEXT
    unsubscribe_url: str = "#"
    unsubscribe_text: str = DEFAULT_UNSUBSCRIBE_TEXT


class DraftlineConfig(BaseModel):
    """Top-level configuration for the editing pipeline."""

    editor: EditorSectionConfig = Field(default_factory=EditorSectionConfig)
    autosave: AutosaveSectionConfig = Field(default_factory=AutosaveSectionConfig)
    render: RenderSectionConfig = Field(default_factory=RenderSectionConfig)
    email: EmailSectionConfig = Field(default_factory=EmailSectionConfig)


def load_config(path: str | Path | None = None) -> DraftlineConfig:
    """Load configuration from a TOML file.

    Search order:
    1. Explicit path (if provided)
    2. .draftline.toml in CWD
    3. ~/.config/draftline/config.toml

    Then overlay environment variables.

    Args:
        path: Explicit path to a TOML file.

    Returns:
        Merged DraftlineConfig.
    """
    data: dict[str, object] = {}

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        for candidate in (Path(".") / CONFIG_FILENAME, GLOBAL_CONFIG_PATH):
            if candidate.exists():
                data = _load_toml(candidate)
                logger.info("Loaded config from %s", candidate)
                break

    config = DraftlineConfig.model_validate(data) if data else DraftlineConfig()
    return _apply_env_vars(config)


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: DraftlineConfig) -> DraftlineConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, tuple[str, str]] = {
        "DRAFTLINE_AUTOSAVE_DELAY": ("autosave", "delay_seconds"),
        "DRAFTLINE_HISTORY_LIMIT": ("editor", "history_limit"),
        "DRAFTLINE_RENDER_ENGINE": ("render", "engine"),
        "DRAFTLINE_UNSUBSCRIBE_URL": ("email", "unsubscribe_url"),
        "DRAFTLINE_FOOTER_TEXT": ("email", "footer_text"),
    }

    for env_var, (section, field) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[section][field] = value

    enabled_raw = os.environ.get("DRAFTLINE_AUTOSAVE_ENABLED")
    if enabled_raw is not None:
        data["autosave"]["enabled"] = enabled_raw.lower() in ("true", "1", "yes")

    return DraftlineConfig.model_validate(data)
