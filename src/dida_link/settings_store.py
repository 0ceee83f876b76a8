"""Plugin settings record and its storage."""

import logging
from pathlib import Path
from typing import Protocol

import yaml
from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)


class PluginSettings(BaseModel):
    """Flat settings record shown in the settings panel."""

    username: str = ""
    password: str = ""
    token: str = ""
    enable_input_prompt: bool = False
    enable_task_link: bool = False
    enable_selection_to_task_link: bool = False
    enable_line_to_task_link: bool = False
    enable_frontmatter_task_link: bool = False
    enable_frontmatter_project_link: bool = False


class ConfigStore(Protocol):
    """Protocol for loading and saving plugin settings."""

    def load(self) -> PluginSettings:
        """Load settings, falling back to defaults for missing keys."""
        ...

    def save(self, settings: PluginSettings) -> None:
        """Persist settings."""
        ...


class YamlConfigStore:
    """Settings stored as a YAML mapping in a single file."""

    def __init__(self, path: str | Path) -> None:
        """Initialize store with settings file path."""
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> PluginSettings:
        """Load settings; stored keys override defaults, unknown keys are ignored."""
        if not self._path.exists():
            return PluginSettings()

        try:
            data = yaml.safe_load(self._path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in settings file {self._path}") from e

        if not isinstance(data, dict):
            logger.warning(f"[ConfigStore] Ignoring non-mapping settings in {self._path}")
            return PluginSettings()

        known = {k: v for k, v in data.items() if k in PluginSettings.model_fields}
        try:
            return PluginSettings(**known)
        except ValidationError as e:
            raise ValueError(f"Invalid settings in {self._path}: {e}") from e

    def save(self, settings: PluginSettings) -> None:
        """Write settings to the YAML file."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        text = yaml.safe_dump(settings.model_dump(), default_flow_style=False, sort_keys=False)
        self._path.write_text(text, encoding="utf-8")
