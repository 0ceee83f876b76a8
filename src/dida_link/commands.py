"""Editor commands linking notes to Dida365 projects and tasks."""

import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

from dida_link.dida.client import DidaClient
from dida_link.dida.models import Project, Task
from dida_link.editor.context import EditorContext
from dida_link.editor.ports import Choice, Notifier, Prompter
from dida_link.editor.text import EditorText
from dida_link.errors import PreconditionError
from dida_link.settings_store import PluginSettings
from dida_link.util import include_ignore_case, is_blank_string

logger = logging.getLogger(__name__)

NOTE_TAG = "Obsidian"
TASK_FRONTMATTER_KEY = "dida-task"
PROJECT_FRONTMATTER_KEY = "dida-project"

T = TypeVar("T", bound=Choice)


def suggest_by_title(items: Sequence[T]) -> Callable[[str], Awaitable[list[T]]]:
    """Build a suggestion function: nothing for a blank query, else title matches."""

    async def suggest(query: str) -> list[T]:
        if is_blank_string(query):
            return []
        return [item for item in items if include_ignore_case(item.title, query)]

    return suggest


def note_link(url: str) -> str:
    """Markdown back-link to the note, embedded in task content."""
    return f"[{NOTE_TAG}]({url})"


class LinkCommands:
    """The four editor commands, written against capability interfaces only."""

    def __init__(
        self,
        client: DidaClient,
        settings: PluginSettings,
        context: EditorContext,
        prompter: Prompter,
        notifier: Notifier,
    ) -> None:
        """Initialize commands with client, settings and editor capabilities."""
        self._client = client
        self._settings = settings
        self._ctx = context
        self._prompter = prompter
        self._notifier = notifier

    async def create_project(self) -> Project:
        """Create a project named after the active note."""
        document = self._ctx.get_file()
        title = await self._resolve_title("Project Title", document.basename)

        project = await self._client.create_project(title)

        if self._settings.enable_task_link:
            await self._write_project_link(project.link)

        self._notifier.notify(f'Project "{project.title}" created')
        return project

    async def create_task(self) -> Task:
        """Create a task from the selection, current line or note name."""
        document = self._ctx.get_file()
        line = self._ctx.get_current_line().strip_prefix_symbols()
        selection = self._ctx.get_selection()

        default_title = document.basename
        if not selection.is_empty():
            default_title = selection.text
        elif not line.is_empty():
            default_title = line.text
        title = await self._resolve_title("Task Title", default_title)

        task = await self._client.create_task(
            title=title,
            tags=[NOTE_TAG],
            content=note_link(document.url),
        )

        if self._settings.enable_task_link:
            await self._write_task_link(task.link, selection, line)

        self._notifier.notify(f'Task "{task.title}" created')
        return task

    async def link_project(self) -> Project:
        """Link the active note to an existing project."""
        self._ctx.get_file()
        projects = await self._client.list_projects()
        project = await self._prompter.choose(suggest_by_title(projects))
        if project is None:
            raise PreconditionError("No project selected")

        if self._settings.enable_task_link:
            await self._write_project_link(project.link)

        self._notifier.notify(f'Project "{project.title}" linked')
        return project

    async def link_task(self) -> Task:
        """Link the active note to an existing task, adding a back-link to it."""
        document = self._ctx.get_file()
        tasks = await self._client.list_tasks()
        task = await self._prompter.choose(suggest_by_title(tasks))
        if task is None:
            raise PreconditionError("No task selected")

        task.add_tag(NOTE_TAG)
        task.content = f"{note_link(document.url)}\n{task.content}"
        task = await self._client.update_task(task)

        if self._settings.enable_task_link:
            await self._write_task_link(
                task.link, self._ctx.get_selection(), self._ctx.get_current_line()
            )

        self._notifier.notify(f'Task "{task.title}" linked')
        return task

    async def _resolve_title(self, label: str, default: str) -> str:
        if not self._settings.enable_input_prompt:
            return default
        title = await self._prompter.input(label, default)
        if title is None or is_blank_string(title):
            raise PreconditionError(f"{label} is required")
        return title

    async def _write_task_link(self, link: str, selection: EditorText, line: EditorText) -> None:
        """Write task link into the selection, the line, the frontmatter or at the cursor."""
        if self._settings.enable_selection_to_task_link and not selection.is_empty():
            selection.add_link(link)
        elif self._settings.enable_line_to_task_link and not line.is_empty():
            line.add_link(link)
        elif self._settings.enable_frontmatter_task_link:
            await self._ctx.add_frontmatter_property(TASK_FRONTMATTER_KEY, link)
        else:
            self._ctx.insert_text_at_cursor(f"[{TASK_FRONTMATTER_KEY}]({link})")

    async def _write_project_link(self, link: str) -> None:
        if self._settings.enable_frontmatter_project_link:
            await self._ctx.add_frontmatter_property(PROJECT_FRONTMATTER_KEY, link)


COMMANDS: dict[str, Callable[[LinkCommands], Awaitable[Project | Task]]] = {
    "create-project": LinkCommands.create_project,
    "create-task": LinkCommands.create_task,
    "link-project": LinkCommands.link_project,
    "link-task": LinkCommands.link_task,
}
