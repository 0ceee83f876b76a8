"""In-memory document editor recording its edits."""

from dataclasses import dataclass
from typing import Literal

from dida_link.editor.ports import Document, Position


@dataclass(frozen=True)
class Edit:
    """A replace-range edit, positions relative to the text before the edit."""

    start: Position
    end: Position
    text: str


class BufferEditor:
    """DocumentEditor over a text buffer supplied by the editor-side shim."""

    def __init__(
        self,
        text: str,
        document: Document | None,
        cursor: Position,
        selection_from: Position | None = None,
        selection_to: Position | None = None,
    ) -> None:
        """Initialize buffer.

        Args:
            text: Full document text
            document: Active document, None when nothing is open
            cursor: Cursor head position
            selection_from: One end of the selection, None when nothing is selected
            selection_to: Other end of the selection, either order
        """
        # "from" is always the earlier end
        if (
            selection_from is not None
            and selection_to is not None
            and (selection_to.line, selection_to.ch) < (selection_from.line, selection_from.ch)
        ):
            selection_from, selection_to = selection_to, selection_from
        self.text = text
        self.edits: list[Edit] = []
        self._document = document
        self._cursor = cursor
        self._selection_from = selection_from
        self._selection_to = selection_to

    def _lines(self) -> list[str]:
        return self.text.split("\n")

    def _offset(self, position: Position) -> int:
        """Convert position to string offset, clamped to the buffer."""
        lines = self._lines()
        line = min(max(position.line, 0), len(lines) - 1)
        ch = min(max(position.ch, 0), len(lines[line]))
        return sum(len(lines[i]) + 1 for i in range(line)) + ch

    def get_active_document(self) -> Document | None:
        return self._document

    def get_selection(self) -> str:
        if self._selection_from is None or self._selection_to is None:
            return ""
        start = self._offset(self._selection_from)
        end = self._offset(self._selection_to)
        return self.text[min(start, end) : max(start, end)]

    def get_cursor(self, which: Literal["head", "from", "to"] = "head") -> Position:
        if which == "from" and self._selection_from is not None:
            return self._selection_from
        if which == "to" and self._selection_to is not None:
            return self._selection_to
        return self._cursor

    def get_line(self, line: int) -> str:
        lines = self._lines()
        if 0 <= line < len(lines):
            return lines[line]
        return ""

    def replace_range(self, text: str, start: Position, end: Position | None = None) -> None:
        end = end or start
        start_offset = self._offset(start)
        end_offset = self._offset(end)
        self.text = self.text[:start_offset] + text + self.text[end_offset:]
        self.edits.append(Edit(start=start, end=end, text=text))
