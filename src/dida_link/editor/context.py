"""Editor context for commands."""

import logging

from dida_link.editor.ports import Document, DocumentEditor, FrontmatterEditor, Position
from dida_link.editor.text import EditorText
from dida_link.errors import PreconditionError

logger = logging.getLogger(__name__)


class EditorContext:
    """Reads editor state and writes links back into the active document."""

    def __init__(self, editor: DocumentEditor, frontmatter: FrontmatterEditor | None = None) -> None:
        """Initialize with editor and optional frontmatter capability."""
        self.editor = editor
        self._frontmatter = frontmatter

    def get_file(self) -> Document:
        """Get the active document.

        Raises:
            PreconditionError: If no document is active
        """
        document = self.editor.get_active_document()
        if document is None:
            raise PreconditionError("Please select a file first")
        return document

    def get_selection(self) -> EditorText:
        return EditorText(
            self.get_file(),
            self.editor.get_selection(),
            self.editor.get_cursor("from"),
            self.editor,
        )

    def get_current_line(self) -> EditorText:
        cursor = self.editor.get_cursor()
        line = self.editor.get_line(cursor.line)
        return EditorText(self.get_file(), line, Position(cursor.line, 0), self.editor)

    def insert_text_at_cursor(self, text: str) -> None:
        self.editor.replace_range(text, self.editor.get_cursor())

    async def add_frontmatter_property(self, key: str, value: str) -> None:
        """Add or overwrite a frontmatter key on the active document.

        Raises:
            PreconditionError: If frontmatter editing is not available
        """
        if self._frontmatter is None:
            raise PreconditionError("Frontmatter editing is not available for this document")
        document = self.get_file()
        await self._frontmatter.set_property(document, key, value)
        logger.info(f"Set frontmatter {key} on {document.path}")
