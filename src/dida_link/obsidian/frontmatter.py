"""Frontmatter editing for notes in an Obsidian vault."""

import asyncio
import logging
import re
from pathlib import Path
from typing import Any

import yaml

from dida_link.editor.ports import Document

logger = logging.getLogger(__name__)

# Frontmatter between --- markers at the start of the file
_FRONTMATTER = re.compile(r"^(---\s*\n)(.*?)(\n---)", re.DOTALL)
_EMPTY_FRONTMATTER = re.compile(r"^---\s*\n---")


def set_frontmatter_property(content: str, key: str, value: Any) -> str:
    """Return content with `key` added to or overwritten in its frontmatter.

    A frontmatter block is created when the content has none.

    Raises:
        ValueError: If the existing frontmatter is not a YAML mapping
    """
    data: dict[Any, Any] = {}
    empty = _EMPTY_FRONTMATTER.match(content)
    match = None if empty else _FRONTMATTER.match(content)
    if empty:
        rest = content[empty.end() :]
    elif match:
        try:
            data = yaml.safe_load(match.group(2)) or {}
        except yaml.YAMLError as e:
            raise ValueError("Invalid YAML in frontmatter") from e
        if not isinstance(data, dict):
            raise ValueError("Frontmatter is not a mapping")
        rest = content[match.end() :]
    else:
        rest = "\n" + content

    data[key] = value

    new_frontmatter = yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)
    return f"---\n{new_frontmatter}---" + rest


class MarkdownFrontmatterEditor:
    """Edits frontmatter of markdown files under a vault root."""

    def __init__(self, vault_path: str) -> None:
        """Initialize editor with vault root path."""
        self._vault_path = Path(vault_path)

    def update_file(self, path: str, key: str, value: Any) -> None:
        """Set a frontmatter key in a vault file (path relative to the vault)."""
        file_path = self._vault_path / path
        if not file_path.exists():
            raise FileNotFoundError(f"Note not found: {path}")

        # Try UTF-8 first, fallback to latin-1 for non-UTF-8 files
        try:
            content = file_path.read_text(encoding="utf-8")
            encoding = "utf-8"
        except UnicodeDecodeError:
            content = file_path.read_text(encoding="latin-1")
            encoding = "latin-1"

        try:
            new_content = set_frontmatter_property(content, key, value)
        except ValueError as e:
            raise ValueError(f"{e} in note {path}") from e

        # Write back with same encoding
        file_path.write_text(new_content, encoding=encoding)
        logger.debug(f"[Frontmatter] {path}: {key} = {value}")

    async def set_property(self, document: Document, key: str, value: str) -> None:
        """Add or overwrite a key in the document's frontmatter on disk."""
        await asyncio.to_thread(self.update_file, document.path, key, value)
