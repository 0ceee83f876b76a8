"""Editor capabilities backed by a command request."""

import logging
from collections.abc import Awaitable, Callable
from pathlib import PurePosixPath
from urllib.parse import quote

from dida_link.api.models import CommandRequest
from dida_link.config import VaultConfig
from dida_link.editor.buffer import BufferEditor
from dida_link.editor.ports import Document, T

logger = logging.getLogger(__name__)


def obsidian_url(vault: VaultConfig, path: str) -> str:
    """Build Obsidian URL: obsidian://open?vault=VaultName&file=Path/To/File.md"""
    return f"obsidian://open?vault={quote(vault.vault_name)}&file={quote(path)}"


def document_for(vault: VaultConfig, path: str | None) -> Document | None:
    """Document identity for a vault-relative note path."""
    if not path:
        return None
    return Document(path=path, basename=PurePosixPath(path).stem, url=obsidian_url(vault, path))


def buffer_for(request: CommandRequest, vault: VaultConfig) -> BufferEditor:
    """Create buffer editor from the request's editor state."""
    selection = request.selection
    return BufferEditor(
        text=request.text,
        document=document_for(vault, request.path),
        cursor=request.cursor.to_position(),
        selection_from=selection.start.to_position() if selection else None,
        selection_to=selection.end.to_position() if selection else None,
    )


class RequestPrompter:
    """Answers prompts with values the editor-side shim already collected."""

    def __init__(self, title: str | None, query: str | None, choice: str | None) -> None:
        """Initialize with prompt answers from the request."""
        self._title = title
        self._query = query
        self._choice = choice

    async def input(self, label: str, value: str) -> str | None:
        if self._title is None:
            return value
        logger.debug(f"[Prompter] {label}: {self._title}")
        return self._title

    async def choose(self, suggest: Callable[[str], Awaitable[list[T]]]) -> T | None:
        suggestions = await suggest(self._query or "")
        if self._choice is None:
            return suggestions[0] if suggestions else None
        for item in suggestions:
            if item.id == self._choice:
                return item
        return None


class CollectingNotifier:
    """Collects notices to return with the command response."""

    def __init__(self) -> None:
        self.notices: list[str] = []

    def notify(self, message: str) -> None:
        logger.info(f"[Notice] {message}")
        self.notices.append(message)
