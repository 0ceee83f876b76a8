"""Test fixtures for Dida365 Link."""

import json
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

import httpx
import pytest

from dida_link.dida.session import Session
from dida_link.editor.ports import Document

API_PREFIX = "/api/v2"


class FakeDida:
    """In-memory stand-in for the Dida365 private API."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.sign_on_count = 0
        self.valid_token = ""
        self.reject_sign_on = False
        self.fail_next: list[int] = []  # Statuses for the next authenticated requests
        self.routes: dict[tuple[str, str], Any] = {
            ("POST", "/batch/project"): {"id2etag": {"abc123": "etag1"}, "id2error": {}},
            ("GET", "/user/preferences/settings"): {
                "defaultProjectId": "inbox115",
                "timeZone": "Asia/Shanghai",
            },
            ("GET", "/projects"): [
                {"id": "p1", "name": "Notes", "color": None},
                {"id": "p2", "name": "Work"},
            ],
            ("POST", "/batch/task"): self._batch_task,
            ("GET", "/batch/check/0"): {
                "checkPoint": 1,
                "syncTaskBean": {
                    "update": [
                        {
                            "id": "t1",
                            "title": "Buy milk",
                            "content": "",
                            "tags": ["home"],
                            "projectId": "p9",
                        },
                        {
                            "id": "t2",
                            "title": "Write report",
                            "content": None,
                            "tags": None,
                            "projectId": "p1",
                        },
                    ]
                },
            },
            ("GET", "/search/task"): [
                {"id": "t1", "title": "Buy milk", "content": "", "tags": [], "projectId": "p9"}
            ],
        }

    def _batch_task(self, request: httpx.Request) -> Any:
        body = json.loads(request.content)
        if "add" in body:
            return {"id2etag": {"t100": "etag100"}, "id2error": {}}
        return {}

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix(API_PREFIX)

        if path == "/user/signon":
            if self.reject_sign_on:
                return httpx.Response(401, json={"errorCode": "username_password_not_match"})
            self.sign_on_count += 1
            self.valid_token = f"token-{self.sign_on_count}"
            return httpx.Response(200, json={"token": self.valid_token, "userId": "u1"})

        if self.fail_next:
            return httpx.Response(self.fail_next.pop(0))

        if request.headers.get("cookie") != f"t={self.valid_token}":
            return httpx.Response(401, json={"errorCode": "user_not_sign_on"})

        route = self.routes.get((request.method, path))
        if route is None:
            return httpx.Response(404)
        body = route(request) if callable(route) else route
        return httpx.Response(200, json=body)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def bodies(self, method: str, path: str) -> list[Any]:
        """JSON bodies of requests sent to an endpoint."""
        return [
            json.loads(r.content)
            for r in self.requests
            if r.method == method and r.url.path == API_PREFIX + path
        ]

    def paths(self) -> list[str]:
        return [r.url.path.removeprefix(API_PREFIX) for r in self.requests]


@pytest.fixture
def fake_dida() -> FakeDida:
    """Fake Dida365 API."""
    return FakeDida()


@pytest.fixture
def http(fake_dida: FakeDida) -> httpx.AsyncClient:
    """HTTP client routed to the fake API."""
    return httpx.AsyncClient(transport=fake_dida.transport())


@pytest.fixture
def saved_tokens() -> list[str]:
    """Tokens passed to the session save callback, in order."""
    return []


@pytest.fixture
def make_session(saved_tokens: list[str]) -> Callable[[str], Session]:
    """Factory for sessions whose persist records the token."""

    async def save(session: Session) -> None:
        saved_tokens.append(session.token)

    def factory(token: str = "") -> Session:
        return Session("user@example.com", "secret", token, save=save)

    return factory


class FakePrompter:
    """Prompter answering with preset values and recording what was asked."""

    def __init__(self) -> None:
        self.title: str | None = None
        self.query = ""
        self.choice_index = 0
        self.inputs: list[tuple[str, str]] = []
        self.suggestions: list[Any] = []

    async def input(self, label: str, value: str) -> str | None:
        self.inputs.append((label, value))
        return self.title

    async def choose(self, suggest: Callable[[str], Awaitable[list[Any]]]) -> Any:
        self.suggestions = await suggest(self.query)
        if len(self.suggestions) <= self.choice_index:
            return None
        return self.suggestions[self.choice_index]


class FakeNotifier:
    def __init__(self) -> None:
        self.notices: list[str] = []

    def notify(self, message: str) -> None:
        self.notices.append(message)


class FakeFrontmatter:
    """Frontmatter capability recording properties per document path."""

    def __init__(self) -> None:
        self.properties: dict[str, dict[str, str]] = {}

    async def set_property(self, document: Document, key: str, value: str) -> None:
        self.properties.setdefault(document.path, {})[key] = value


@pytest.fixture
def prompter() -> FakePrompter:
    return FakePrompter()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def frontmatter() -> FakeFrontmatter:
    return FakeFrontmatter()


@pytest.fixture
def note() -> Document:
    """Active note identity."""
    return Document(
        path="Projects/Weekly Review.md",
        basename="Weekly Review",
        url="obsidian://open?vault=Personal&file=Projects%2FWeekly%20Review.md",
    )


@pytest.fixture
def tmp_vault(tmp_path: Path) -> Path:
    """Create temporary Obsidian vault structure."""
    vault = tmp_path / "vault"
    (vault / "Projects").mkdir(parents=True)
    return vault


@pytest.fixture
def sample_note_file(tmp_vault: Path) -> Path:
    """Create a sample note with frontmatter."""
    note_file = tmp_vault / "Projects" / "Weekly Review.md"

    content = """---
status: in_progress
tags:
  - review
---
# Weekly Review

- [ ] Plan next sprint
Call the plumber

---

Notes below the rule.
"""

    note_file.write_text(content)
    return note_file
