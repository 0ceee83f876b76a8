"""Dida365 private API client."""

import logging
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from dida_link.dida.models import INBOX_TITLE, Project, Task
from dida_link.dida.schemas import (
    BatchAddResponse,
    PreferencesResponse,
    ProjectListResponse,
    SignOnResponse,
    SyncResponse,
    TaskItem,
    TaskListResponse,
)
from dida_link.dida.session import Session
from dida_link.errors import ApiError, AuthError, DidaLinkError, NetworkError
from dida_link.util import is_blank_string

logger = logging.getLogger(__name__)

API_BASE_URL = "https://api.dida365.com/api/v2"

# Device identification expected by the web API
HEADER_X_DEVICE = (
    '{"platform":"web","os":"macOS 10.15.7","device":"Chrome 114.0.0.0","name":"",'
    '"version":4562,"id":"64217d45c3630d2326189adc","channel":"website","campaign":"",'
    '"websocket":""}'
)

SchemaT = TypeVar("SchemaT", bound=BaseModel)


async def _send(
    http: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    headers: dict[str, str],
    params: dict[str, Any] | None = None,
    json_body: Any = None,
) -> httpx.Response:
    """Send request and map transport/HTTP failures to NetworkError/AuthError."""
    try:
        response = await http.request(method, url, params=params, json=json_body, headers=headers)
    except httpx.TimeoutException as e:
        raise NetworkError(f"{method} {url} timed out") from e
    except httpx.TransportError as e:
        raise NetworkError(f"{method} {url} failed: {e}") from e

    if response.status_code in (401, 403):
        raise AuthError(
            f"{method} {url} rejected: HTTP {response.status_code}",
            status_code=response.status_code,
        )
    if response.status_code >= 400:
        raise NetworkError(
            f"{method} {url} failed: HTTP {response.status_code}",
            status_code=response.status_code,
        )
    return response


def _parse(response: httpx.Response, schema: type[SchemaT]) -> SchemaT:
    """Validate JSON body against schema, raising ApiError on mismatch."""
    try:
        payload = response.json()
    except ValueError as e:
        raise ApiError(f"{response.request.url.path}: response is not JSON") from e
    try:
        return schema.model_validate(payload)
    except ValidationError as e:
        raise ApiError(f"{response.request.url.path}: unexpected response shape: {e}") from e


def _to_task(item: TaskItem) -> Task:
    return Task(
        id=item.id,
        title=item.title,
        content=item.content,
        tags=list(item.tags),
        project_id=item.project_id or None,
    )


async def sign_on(
    http: httpx.AsyncClient, username: str, password: str, api_base_url: str = API_BASE_URL
) -> str:
    """Exchange credentials for a token.

    Raises:
        AuthError: Credentials rejected
        NetworkError: Transport or HTTP failure
        ApiError: Response carries no token
    """
    response = await _send(
        http,
        "POST",
        f"{api_base_url.rstrip('/')}/user/signon",
        headers={"Content-Type": "application/json"},
        params={"wc": "true", "remember": "true"},
        json_body={"username": username, "password": password},
    )
    return _parse(response, SignOnResponse).token


class DidaClient:
    """Client bound to one Session, re-authenticating once on failure.

    Use `await DidaClient.of(session, http)` rather than the constructor so a
    blank token is exchanged for a fresh one before the first call.
    """

    def __init__(
        self, session: Session, http: httpx.AsyncClient, api_base_url: str = API_BASE_URL
    ) -> None:
        """Initialize client with session and HTTP client."""
        self.session = session
        self._http = http
        self._api_base_url = api_base_url.rstrip("/")
        # Relogins performed, by the failure kind that triggered them
        self.relogins: dict[str, int] = {"auth": 0, "network": 0}

    @classmethod
    async def of(
        cls, session: Session, http: httpx.AsyncClient, api_base_url: str = API_BASE_URL
    ) -> "DidaClient":
        """Create client, signing on first when the session has no token."""
        client = cls(session, http, api_base_url)
        if is_blank_string(session.token):
            await client.login()
        return client

    @staticmethod
    async def verify(
        username: str, password: str, http: httpx.AsyncClient, api_base_url: str = API_BASE_URL
    ) -> str:
        """Verify credentials without touching any session. Returns the token."""
        return await sign_on(http, username, password, api_base_url)

    async def sign_on(self, username: str, password: str) -> str:
        """Exchange credentials for a token."""
        return await sign_on(self._http, username, password, self._api_base_url)

    async def login(self) -> None:
        """Sign on with session credentials, store and persist the new token."""
        token = await self.sign_on(self.session.username, self.session.password)
        self.session.token = token
        await self.session.persist()
        logger.info(f"[DidaClient] Signed on as {self.session.username}")

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-device": HEADER_X_DEVICE,
            "cookie": f"t={self.session.token}",
        }

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json_body: Any = None,
    ) -> httpx.Response:
        return await _send(
            self._http,
            method,
            f"{self._api_base_url}{path}",
            headers=self._headers(),
            params=params,
            json_body=json_body,
        )

    async def _retry_request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json_body: Any = None,
    ) -> httpx.Response:
        """Send authenticated request; on failure sign on again and retry once.

        The second failure propagates unchanged. If signing on fails, the
        original request failure propagates with the sign-on failure as cause.
        """
        try:
            return await self._request(method, path, params, json_body)
        except NetworkError as e:
            branch = "auth" if isinstance(e, AuthError) else "network"
            self.relogins[branch] += 1
            logger.warning(f"[DidaClient] {method} {path} failed ({branch}): {e}; retrying after login")
            try:
                await self.login()
            except DidaLinkError as login_error:
                logger.error(f"[DidaClient] Login before retry failed: {login_error}")
                raise e from login_error
        return await self._request(method, path, params, json_body)

    async def create_project(self, title: str) -> Project:
        """Create a project and return it with its generated id."""
        response = await self._retry_request("POST", "/batch/project", json_body={"add": [{"name": title}]})
        project_id = _parse(response, BatchAddResponse).first_id()
        logger.info(f"[DidaClient] Created project {project_id}: {title}")
        return Project(id=project_id, title=title)

    async def get_inbox_project(self) -> Project:
        """Get the user's inbox project."""
        response = await self._retry_request(
            "GET", "/user/preferences/settings", params={"includeWeb": "true"}
        )
        prefs = _parse(response, PreferencesResponse)
        return Project(id=prefs.default_project_id, title=INBOX_TITLE, is_inbox=True)

    async def list_projects(self) -> list[Project]:
        """List all projects."""
        response = await self._retry_request("GET", "/projects")
        items = _parse(response, ProjectListResponse).root
        return [Project(id=item.id, title=item.name) for item in items]

    async def create_task(
        self,
        title: str,
        tags: list[str],
        content: str | None = None,
        project_id: str | None = None,
    ) -> Task:
        """Create a task; without project id it goes to the inbox.

        The returned task always carries a concrete project id: when none was
        given, the inbox project id is fetched after creation.
        """
        item: dict[str, Any] = {"title": title, "tags": list(tags)}
        if content is not None:
            item["content"] = content
        if not is_blank_string(project_id):
            item["projectId"] = project_id

        response = await self._retry_request("POST", "/batch/task", json_body={"add": [item]})
        task_id = _parse(response, BatchAddResponse).first_id()
        logger.info(f"[DidaClient] Created task {task_id}: {title}")

        if is_blank_string(project_id):
            project_id = (await self.get_inbox_project()).id

        return Task(
            id=task_id,
            title=title,
            content=content or "",
            tags=list(tags),
            project_id=project_id,
        )

    async def update_task(self, task: Task) -> Task:
        """Update all task fields. The response body is not inspected."""
        item = {
            "id": task.id,
            "content": task.content,
            "title": task.title,
            "tags": list(task.tags),
            "projectId": task.project_id,
        }
        await self._retry_request("POST", "/batch/task", json_body={"update": [item]})
        logger.info(f"[DidaClient] Updated task {task.id}")
        return task

    async def list_tasks(self) -> list[Task]:
        """List open tasks from the full sync snapshot."""
        response = await self._retry_request("GET", "/batch/check/0")
        items = _parse(response, SyncResponse).sync_task_bean.update
        return [_to_task(item) for item in items]

    async def search_tasks(self, keyword: str) -> list[Task]:
        """Search open tasks by keyword."""
        response = await self._retry_request(
            "GET", "/search/task", params={"keywords": keyword, "status": 0}
        )
        items = _parse(response, TaskListResponse).root
        return [_to_task(item) for item in items]
