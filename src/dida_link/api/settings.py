"""Settings panel endpoints."""

import asyncio
import logging

from fastapi import APIRouter, HTTPException

from dida_link.api.models import SettingsResponse, SettingsUpdate, VaultResponse, VerifyRequest
from dida_link.dida.client import DidaClient
from dida_link.errors import AuthError, DidaLinkError
from dida_link.factory import create_http_client, get_config, get_config_store
from dida_link.settings_store import ConfigStore, PluginSettings

logger = logging.getLogger(__name__)

router = APIRouter()


async def _load_settings(store: ConfigStore) -> PluginSettings:
    """Load settings, reporting a broken settings file as a bad request."""
    try:
        return await asyncio.to_thread(store.load)
    except ValueError as e:
        logger.error(f"Loading settings failed: {e}")
        raise HTTPException(status_code=400, detail=str(e)) from e


def _to_response(settings: PluginSettings) -> SettingsResponse:
    return SettingsResponse(
        username=settings.username,
        has_token=bool(settings.token.strip()),
        enable_input_prompt=settings.enable_input_prompt,
        enable_task_link=settings.enable_task_link,
        enable_selection_to_task_link=settings.enable_selection_to_task_link,
        enable_line_to_task_link=settings.enable_line_to_task_link,
        enable_frontmatter_task_link=settings.enable_frontmatter_task_link,
        enable_frontmatter_project_link=settings.enable_frontmatter_project_link,
    )


@router.get("/settings", response_model=SettingsResponse)
async def get_settings() -> SettingsResponse:
    """Get current settings without secrets."""
    settings = await _load_settings(get_config_store())
    return _to_response(settings)


@router.put("/settings", response_model=SettingsResponse)
async def update_settings(request: SettingsUpdate) -> SettingsResponse:
    """Update settings. Changing credentials discards the stored token."""
    store = get_config_store()
    settings = await _load_settings(store)

    changes = request.model_dump(exclude_none=True)
    credentials_changed = any(
        key in changes and changes[key] != getattr(settings, key) for key in ("username", "password")
    )
    if credentials_changed:
        changes["token"] = ""
        logger.info("Credentials changed, token cleared")

    updated = settings.model_copy(update=changes)
    await asyncio.to_thread(store.save, updated)
    return _to_response(updated)


@router.post("/settings/verify")
async def verify_credentials(request: VerifyRequest | None = None) -> dict[str, str]:
    """Verify credentials against Dida365 without storing the token.

    Raises:
        HTTPException: 401 if credentials are rejected, 502 if Dida365 fails
    """
    settings = await _load_settings(get_config_store())
    username = request.username if request and request.username is not None else settings.username
    password = request.password if request and request.password is not None else settings.password

    try:
        async with create_http_client() as http:
            await DidaClient.verify(username, password, http, get_config().api_base_url)
    except AuthError as e:
        raise HTTPException(status_code=401, detail=f"Verify credentials failed: {e}") from e
    except DidaLinkError as e:
        raise HTTPException(status_code=502, detail=f"Verify credentials failed: {e}") from e

    return {"status": "success", "message": "Verify credentials success!"}


@router.get("/vaults", response_model=list[VaultResponse])
async def list_vaults() -> list[VaultResponse]:
    """List all configured vaults."""
    config = get_config()
    return [
        VaultResponse(name=vault.name, vault_path=vault.vault_path, vault_name=vault.vault_name)
        for vault in config.vaults
    ]
