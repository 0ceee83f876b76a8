"""API models for Dida365 Link."""

from pydantic import BaseModel, Field

from dida_link.dida.models import Project, Task
from dida_link.editor.buffer import Edit
from dida_link.editor.ports import Position


class PositionModel(BaseModel):
    """Zero-based line/character position."""

    line: int = Field(default=0, ge=0)
    ch: int = Field(default=0, ge=0)

    def to_position(self) -> Position:
        return Position(self.line, self.ch)


class SelectionModel(BaseModel):
    """Selected range in the editor."""

    start: PositionModel
    end: PositionModel


class CommandRequest(BaseModel):
    """Editor state plus prompt answers for one command."""

    vault: str
    path: str | None = None  # Note path relative to the vault, None when no note is open
    text: str = ""  # Full buffer text
    cursor: PositionModel = Field(default_factory=PositionModel)
    selection: SelectionModel | None = None
    title: str | None = None  # Answer to the title prompt, default title when None
    query: str | None = None  # Query typed into the chooser
    choice: str | None = None  # Id of the chosen project/task, first match when None


class EditModel(BaseModel):
    """Replace-range edit to apply to the buffer, in order."""

    start: PositionModel
    end: PositionModel
    text: str

    @classmethod
    def from_edit(cls, edit: Edit) -> "EditModel":
        return cls(
            start=PositionModel(line=edit.start.line, ch=edit.start.ch),
            end=PositionModel(line=edit.end.line, ch=edit.end.ch),
            text=edit.text,
        )


class ItemResponse(BaseModel):
    """Project or task summary."""

    id: str
    title: str
    link: str
    project_id: str | None = None
    tags: list[str] | None = None

    @classmethod
    def from_item(cls, item: Project | Task) -> "ItemResponse":
        if isinstance(item, Task):
            return cls(
                id=item.id,
                title=item.title,
                link=item.link,
                project_id=item.project_id,
                tags=list(item.tags),
            )
        return cls(id=item.id, title=item.title, link=item.link)


class CommandResponse(BaseModel):
    """Result of a command."""

    command: str
    item: ItemResponse
    text: str  # Buffer text after all edits
    edits: list[EditModel]
    notices: list[str]


class SettingsResponse(BaseModel):
    """Settings as shown in the settings panel (secrets omitted)."""

    username: str
    has_token: bool
    enable_input_prompt: bool
    enable_task_link: bool
    enable_selection_to_task_link: bool
    enable_line_to_task_link: bool
    enable_frontmatter_task_link: bool
    enable_frontmatter_project_link: bool


class SettingsUpdate(BaseModel):
    """Partial settings update."""

    username: str | None = None
    password: str | None = None
    enable_input_prompt: bool | None = None
    enable_task_link: bool | None = None
    enable_selection_to_task_link: bool | None = None
    enable_line_to_task_link: bool | None = None
    enable_frontmatter_task_link: bool | None = None
    enable_frontmatter_project_link: bool | None = None


class VerifyRequest(BaseModel):
    """Credentials to verify; stored ones are used for missing fields."""

    username: str | None = None
    password: str | None = None


class VaultResponse(BaseModel):
    """API response model for vault."""

    name: str
    vault_path: str
    vault_name: str
