"""Dependency injection factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import httpx
from fastapi import FastAPI

from dida_link.config import Config, VaultConfig
from dida_link.dida.client import DidaClient
from dida_link.dida.session import Session
from dida_link.obsidian.frontmatter import MarkdownFrontmatterEditor
from dida_link.settings_store import ConfigStore, YamlConfigStore

logger = logging.getLogger(__name__)

# Global config instance for dependency injection
_config: Config | None = None

# Global settings store
_config_store: ConfigStore | None = None

# HTTP transport override (tests inject httpx.MockTransport)
_transport: httpx.AsyncBaseTransport | None = None


def get_config() -> Config:
    """Get or create Config instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def get_config_store() -> ConfigStore:
    """Get or create the plugin settings store."""
    global _config_store
    if _config_store is None:
        path = Path(get_config().settings_file).expanduser()
        _config_store = YamlConfigStore(path)
        logger.info(f"[Factory] Settings file: {path}")
    return _config_store


def get_vault_config(vault_name: str) -> VaultConfig:
    """Get vault config by name."""
    config = get_config()
    vault = config.get_vault(vault_name)
    if not vault:
        raise ValueError(f"Unknown vault: {vault_name}")
    return vault


def get_frontmatter_editor(vault: VaultConfig) -> MarkdownFrontmatterEditor | None:
    """Create frontmatter editor for a vault, None when the vault is not reachable."""
    if not Path(vault.vault_path).is_dir():
        logger.warning(f"[Factory] Vault folder not found: {vault.vault_path}")
        return None
    return MarkdownFrontmatterEditor(vault.vault_path)


def create_http_client() -> httpx.AsyncClient:
    """Create HTTP client for Dida365 requests."""
    config = get_config()
    return httpx.AsyncClient(timeout=httpx.Timeout(config.http_timeout), transport=_transport)


@asynccontextmanager
async def dida_client() -> AsyncIterator[DidaClient]:
    """Yield a signed-on client bound to the stored session."""
    config = get_config()
    session = await Session.from_store(get_config_store())
    async with create_http_client() as http:
        yield await DidaClient.of(session, http, config.api_base_url)


def create_app() -> FastAPI:
    """Create FastAPI application (composition root)."""
    from dida_link.api.commands import router as commands_router
    from dida_link.api.items import router as items_router
    from dida_link.api.settings import router as settings_router

    app = FastAPI(
        title="Dida365 Link",
        description="Link notes to Dida365 projects and tasks",
        version="0.1.0",
    )

    app.include_router(commands_router, prefix="/api")
    app.include_router(items_router, prefix="/api")
    app.include_router(settings_router, prefix="/api")

    return app
