"""Configuration for Dida365 Link."""

from dataclasses import dataclass

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from dida_link.dida.client import API_BASE_URL


@dataclass
class VaultConfig:
    """Configuration for a single Obsidian vault."""

    name: str
    vault_path: str
    vault_name: str  # For obsidian:// URLs


class Config(BaseSettings):
    """Service configuration, overridable with DIDA_LINK_* environment variables."""

    model_config = SettingsConfigDict(env_prefix="DIDA_LINK_")

    vaults: list[VaultConfig] = Field(default_factory=list)
    settings_file: str = Field(default="~/.config/dida-link/settings.yaml")
    api_base_url: str = Field(default=API_BASE_URL)
    http_timeout: float = Field(default=30.0)
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8365)

    def get_vault(self, name: str) -> VaultConfig | None:
        """Get vault config by name."""
        for vault in self.vaults:
            if vault.name == name:
                return vault
        return None
