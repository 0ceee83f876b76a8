"""Capability interfaces the commands depend on."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Literal, Protocol, TypeVar


@dataclass(frozen=True)
class Position:
    """Zero-based line and character offset in a document."""

    line: int
    ch: int


@dataclass(frozen=True)
class Document:
    """Identity of the active document."""

    path: str  # Relative to the vault root
    basename: str  # Filename without .md
    url: str  # Shareable link back to the note


class Choice(Protocol):
    """Item offered to the user for selection."""

    @property
    def id(self) -> str: ...

    @property
    def title(self) -> str: ...


T = TypeVar("T", bound=Choice)


class DocumentEditor(Protocol):
    """Protocol for reading and editing the active document."""

    def get_active_document(self) -> Document | None:
        """Return the active document, or None when nothing is open."""
        ...

    def get_selection(self) -> str:
        """Return the selected text (empty when nothing is selected)."""
        ...

    def get_cursor(self, which: Literal["head", "from", "to"] = "head") -> Position:
        """Return cursor head, or the start/end of the selection."""
        ...

    def get_line(self, line: int) -> str:
        """Return the text of a line."""
        ...

    def replace_range(self, text: str, start: Position, end: Position | None = None) -> None:
        """Replace text between start and end (insert at start when end is None)."""
        ...


class FrontmatterEditor(Protocol):
    """Protocol for editing a document's metadata block."""

    async def set_property(self, document: Document, key: str, value: str) -> None:
        """Add or overwrite a key in the document frontmatter."""
        ...


class Prompter(Protocol):
    """Protocol for asking the user for input."""

    async def choose(self, suggest: Callable[[str], Awaitable[list[T]]]) -> T | None:
        """Let the user pick one item from suggestions for their query."""
        ...

    async def input(self, label: str, value: str) -> str | None:
        """Let the user edit a value. None means cancelled."""
        ...


class Notifier(Protocol):
    """Protocol for transient user notifications."""

    def notify(self, message: str) -> None:
        """Show a notice."""
        ...
