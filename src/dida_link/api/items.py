"""Project and task lookup endpoints, used by the editor-side chooser."""

import logging

from fastapi import APIRouter, HTTPException

from dida_link.api.models import ItemResponse
from dida_link.commands import suggest_by_title
from dida_link.errors import AuthError, DidaLinkError
from dida_link.factory import dida_client

logger = logging.getLogger(__name__)

router = APIRouter()


def _dida_http_error(e: DidaLinkError | ValueError) -> HTTPException:
    logger.error(f"Dida365 lookup failed: {e}")
    if isinstance(e, ValueError):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, AuthError):
        return HTTPException(status_code=401, detail=f"Dida365 sign-on failed: {e}")
    return HTTPException(status_code=502, detail=f"Dida365 request failed: {e}")


@router.get("/projects", response_model=list[ItemResponse])
async def list_projects(query: str = "") -> list[ItemResponse]:
    """List projects whose title contains the query (none for a blank query)."""
    try:
        async with dida_client() as client:
            projects = await client.list_projects()
            matches = await suggest_by_title(projects)(query)
    except (DidaLinkError, ValueError) as e:
        raise _dida_http_error(e) from e
    return [ItemResponse.from_item(project) for project in matches]


@router.get("/projects/inbox", response_model=ItemResponse)
async def get_inbox_project() -> ItemResponse:
    """Get the inbox project."""
    try:
        async with dida_client() as client:
            project = await client.get_inbox_project()
    except (DidaLinkError, ValueError) as e:
        raise _dida_http_error(e) from e
    return ItemResponse.from_item(project)


@router.get("/tasks", response_model=list[ItemResponse])
async def list_tasks(query: str = "") -> list[ItemResponse]:
    """List open tasks whose title contains the query (none for a blank query)."""
    try:
        async with dida_client() as client:
            tasks = await client.list_tasks()
            matches = await suggest_by_title(tasks)(query)
    except (DidaLinkError, ValueError) as e:
        raise _dida_http_error(e) from e
    return [ItemResponse.from_item(task) for task in matches]


@router.get("/tasks/search", response_model=list[ItemResponse])
async def search_tasks(keywords: str) -> list[ItemResponse]:
    """Search open tasks with the Dida365 keyword search."""
    try:
        async with dida_client() as client:
            tasks = await client.search_tasks(keywords)
    except (DidaLinkError, ValueError) as e:
        raise _dida_http_error(e) from e
    return [ItemResponse.from_item(task) for task in tasks]
