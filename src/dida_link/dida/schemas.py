"""Response schemas for the Dida365 private API.

Each endpoint's JSON body is validated against one of these models. Unknown
fields are ignored; missing required fields raise pydantic's ValidationError,
which the client turns into ApiError.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, RootModel, field_validator


class _Schema(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class SignOnResponse(_Schema):
    """POST /user/signon."""

    token: str

    @field_validator("token")
    @classmethod
    def _token_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("token is blank")
        return value


class BatchAddResponse(_Schema):
    """POST /batch/project and POST /batch/task (add)."""

    id2etag: dict[str, str]

    @field_validator("id2etag")
    @classmethod
    def _not_empty(cls, value: dict[str, str]) -> dict[str, str]:
        if not value:
            raise ValueError("id2etag is empty")
        return value

    def first_id(self) -> str:
        """Return the generated id of the single added item."""
        return next(iter(self.id2etag))


class PreferencesResponse(_Schema):
    """GET /user/preferences/settings."""

    default_project_id: str = Field(alias="defaultProjectId")


class ProjectItem(_Schema):
    """Element of GET /projects."""

    id: str
    name: str


class ProjectListResponse(RootModel[list[ProjectItem]]):
    """GET /projects."""


class TaskItem(_Schema):
    """Task as returned by sync and search endpoints."""

    id: str
    title: str = ""
    content: str = ""
    tags: list[str] = Field(default_factory=list)
    project_id: str | None = Field(default=None, alias="projectId")

    @field_validator("title", "content", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("tags", mode="before")
    @classmethod
    def _none_to_list(cls, value: Any) -> Any:
        return [] if value is None else value


class TaskListResponse(RootModel[list[TaskItem]]):
    """GET /search/task."""


class SyncTaskBean(_Schema):
    update: list[TaskItem] = Field(default_factory=list)


class SyncResponse(_Schema):
    """GET /batch/check/0."""

    sync_task_bean: SyncTaskBean = Field(alias="syncTaskBean")
