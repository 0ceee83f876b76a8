"""Command API endpoints."""

import asyncio
import logging

from fastapi import APIRouter, HTTPException

from dida_link.api.adapters import CollectingNotifier, RequestPrompter, buffer_for
from dida_link.api.models import CommandRequest, CommandResponse, EditModel, ItemResponse
from dida_link.commands import COMMANDS, LinkCommands
from dida_link.editor.context import EditorContext
from dida_link.errors import AuthError, DidaLinkError, PreconditionError
from dida_link.factory import (
    dida_client,
    get_config_store,
    get_frontmatter_editor,
    get_vault_config,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/commands/{command}", response_model=CommandResponse)
async def run_command(command: str, request: CommandRequest) -> CommandResponse:
    """Run an editor command against the supplied editor state.

    Args:
        command: One of create-project, create-task, link-project, link-task
        request: Editor state and prompt answers

    Returns:
        Buffer edits to apply and notices to show

    Raises:
        HTTPException: 404 for unknown command/vault/note, 400 when the
            command cannot run, 401/502 when Dida365 fails
    """
    action = COMMANDS.get(command)
    if action is None:
        raise HTTPException(status_code=404, detail=f"Unknown command: {command}")

    try:
        vault = get_vault_config(request.vault)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    logger.info(f"run_command: command={command}, vault={request.vault}, path={request.path}")

    buffer = buffer_for(request, vault)
    notifier = CollectingNotifier()

    try:
        settings = await asyncio.to_thread(get_config_store().load)
        async with dida_client() as client:
            commands = LinkCommands(
                client=client,
                settings=settings,
                context=EditorContext(buffer, get_frontmatter_editor(vault)),
                prompter=RequestPrompter(request.title, request.query, request.choice),
                notifier=notifier,
            )
            item = await action(commands)

    except PreconditionError as e:
        logger.info(f"Command {command} not run: {e}")
        raise HTTPException(status_code=400, detail=str(e)) from e
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except AuthError as e:
        logger.error(f"Command {command} failed: {e}")
        raise HTTPException(status_code=401, detail=f"Dida365 sign-on failed: {e}") from e
    except DidaLinkError as e:
        logger.error(f"Command {command} failed: {e}")
        raise HTTPException(status_code=502, detail=f"Dida365 request failed: {e}") from e
    except ValueError as e:
        logger.error(f"Command {command} failed: {e}")
        raise HTTPException(status_code=400, detail=str(e)) from e

    return CommandResponse(
        command=command,
        item=ItemResponse.from_item(item),
        text=buffer.text,
        edits=[EditModel.from_edit(edit) for edit in buffer.edits],
        notices=notifier.notices,
    )
