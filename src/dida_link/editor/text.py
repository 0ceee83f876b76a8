"""Text ranges in the active document."""

import re
from dataclasses import dataclass

from dida_link.editor.ports import Document, DocumentEditor, Position
from dida_link.util import is_blank_string

# Leading whitespace plus one heading, bullet or bullet with task box
_PREFIX_SYMBOLS = re.compile(r"^\s*(?:#{1,6}\s|[-*+]\s(?:\[[ xX]\]\s)?)?")
_EXTERNAL_LINK = re.compile(r"\[[^\]]*\]\([^)]+\)")
_INTERNAL_LINK = re.compile(r"\[\[([^\]]+)\]\]")


def end_position(start: Position, text: str) -> Position:
    """Position right after text inserted at start."""
    lines = text.split("\n")
    if len(lines) == 1:
        return Position(start.line, start.ch + len(text))
    return Position(start.line + len(lines) - 1, len(lines[-1]))


@dataclass(frozen=True)
class EditorText:
    """A piece of document text and where it starts."""

    document: Document
    text: str
    position: Position
    editor: DocumentEditor

    @property
    def end(self) -> Position:
        return end_position(self.position, self.text)

    def strip_prefix_symbols(self) -> "EditorText":
        """Remove leading Markdown heading, list and task box symbols."""
        stripped = _PREFIX_SYMBOLS.sub("", self.text, count=1)
        shift = len(self.text) - len(stripped)
        position = Position(self.position.line, self.position.ch + shift)
        return EditorText(self.document, stripped, position, self.editor)

    def is_empty(self) -> bool:
        return is_blank_string(self.text)

    def contains_link(self) -> bool:
        return self.contains_internal_link() or self.contains_external_link()

    def contains_external_link(self) -> bool:
        return _EXTERNAL_LINK.search(self.text) is not None

    def contains_internal_link(self) -> bool:
        return _INTERNAL_LINK.search(self.text) is not None

    def add_link(self, link: str) -> "EditorText":
        """Replace the text with a Markdown link to `link`."""
        replacement = f"[{self.text}]({link})"
        self.editor.replace_range(replacement, self.position, self.end)
        return EditorText(self.document, replacement, self.position, self.editor)
