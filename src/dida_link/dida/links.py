"""Dida365 web app link templates."""

from dida_link.util import is_blank_string

WEB_BASE_URL = "https://dida365.com/webapp"
INBOX_SEGMENT = "inbox"


def project_link(project_id: str) -> str:
    """Build web link for a project."""
    return f"{WEB_BASE_URL}/#p/{project_id}/tasks"


def task_link(task_id: str, project_id: str | None = None) -> str:
    """Build web link for a task; blank project id means inbox."""
    if is_blank_string(project_id):
        return f"{WEB_BASE_URL}/#p/{INBOX_SEGMENT}/tasks/{task_id}"
    return f"{WEB_BASE_URL}/#p/{project_id}/tasks/{task_id}"
