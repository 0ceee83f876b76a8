"""Domain models for Dida365 projects and tasks."""

from dataclasses import dataclass, field

from dida_link.dida.links import INBOX_SEGMENT, project_link, task_link

INBOX_TITLE = "Inbox"


@dataclass
class Project:
    """Dida365 project (task list)."""

    id: str
    title: str
    is_inbox: bool = False  # Inbox is addressed by a fixed URL segment

    @property
    def link(self) -> str:
        """Web link derived from the project id."""
        return project_link(INBOX_SEGMENT if self.is_inbox else self.id)


@dataclass
class Task:
    """Dida365 task."""

    id: str
    title: str
    content: str = ""  # Free text, may embed a back-link to the note
    tags: list[str] = field(default_factory=list)  # Insertion order kept for display
    project_id: str | None = None  # None means inbox

    @property
    def link(self) -> str:
        """Web link derived from task id and project id."""
        return task_link(self.id, self.project_id)

    def add_tag(self, tag: str) -> None:
        """Append tag unless already present."""
        if tag not in self.tags:
            self.tags.append(tag)
