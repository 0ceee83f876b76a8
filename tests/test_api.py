"""Tests for API endpoints."""

from pathlib import Path

import pytest
import yaml
from fastapi.testclient import TestClient

from dida_link.config import Config, VaultConfig
from dida_link.dida.links import WEB_BASE_URL
from dida_link.factory import create_app
from dida_link.settings_store import PluginSettings, YamlConfigStore

TEXT = "# Weekly Review\n- [ ] Plan next sprint\nCall the plumber"
NOTE_PATH = "Projects/Weekly Review.md"
NOTE_URL = "obsidian://open?vault=Personal&file=Projects/Weekly%20Review.md"


@pytest.fixture
def store(tmp_path: Path) -> YamlConfigStore:
    """Settings store with credentials and linking enabled."""
    store = YamlConfigStore(tmp_path / "settings.yaml")
    store.save(
        PluginSettings(
            username="user@example.com",
            password="secret",
            enable_task_link=True,
            enable_line_to_task_link=True,
            enable_frontmatter_project_link=True,
        )
    )
    return store


@pytest.fixture
def test_client(
    tmp_vault: Path,
    tmp_path: Path,
    sample_note_file: Path,
    store: YamlConfigStore,
    fake_dida,
    monkeypatch: pytest.MonkeyPatch,
) -> TestClient:
    """Create test client with test vault, settings file and fake Dida365."""
    test_config = Config(
        vaults=[
            VaultConfig(name="Personal", vault_path=str(tmp_vault), vault_name="Personal"),
            VaultConfig(
                name="Offline", vault_path=str(tmp_path / "missing"), vault_name="Offline"
            ),
        ],
        settings_file=str(store.path),
    )

    # Override factory globals
    monkeypatch.setattr("dida_link.factory._config", test_config)
    monkeypatch.setattr("dida_link.factory._config_store", store)
    monkeypatch.setattr("dida_link.factory._transport", fake_dida.transport())

    return TestClient(create_app())


def _command(test_client: TestClient, command: str, **body):
    payload = {"vault": "Personal", "path": NOTE_PATH, "text": TEXT, **body}
    return test_client.post(f"/api/commands/{command}", json=payload)


def _frontmatter(note_file: Path) -> dict:
    _, block, _ = note_file.read_text().split("---\n", 2)
    return yaml.safe_load(block)


def test_create_task_links_current_line(
    test_client: TestClient, fake_dida, store: YamlConfigStore
) -> None:
    """Test POST /api/commands/create-task returns the line edit."""
    response = _command(test_client, "create-task", cursor={"line": 1, "ch": 4})

    assert response.status_code == 200
    result = response.json()
    link = f"{WEB_BASE_URL}/#p/inbox115/tasks/t100"
    assert result["command"] == "create-task"
    assert result["item"]["id"] == "t100"
    assert result["item"]["link"] == link
    assert result["item"]["tags"] == ["Obsidian"]
    assert result["text"].split("\n")[1] == f"- [ ] [Plan next sprint]({link})"
    assert result["edits"] == [
        {
            "start": {"line": 1, "ch": 6},
            "end": {"line": 1, "ch": 22},
            "text": f"[Plan next sprint]({link})",
        }
    ]
    assert result["notices"] == ['Task "Plan next sprint" created']

    body = fake_dida.bodies("POST", "/batch/task")[0]["add"][0]
    assert body["content"] == f"[Obsidian]({NOTE_URL})"

    # Token from sign-on is kept for the next run
    assert store.load().token == "token-1"


def test_create_task_with_title_answer(test_client: TestClient) -> None:
    """Test title answer is used when the input prompt is enabled."""
    test_client.put("/api/settings", json={"enable_input_prompt": True})

    response = _command(test_client, "create-task", cursor={"line": 2, "ch": 0}, title="Fix sink")

    assert response.status_code == 200
    assert response.json()["item"]["title"] == "Fix sink"


def test_create_project_writes_frontmatter(
    test_client: TestClient, sample_note_file: Path
) -> None:
    """Test project link is written into the note on disk."""
    response = _command(test_client, "create-project")

    assert response.status_code == 200
    result = response.json()
    assert result["item"] == {
        "id": "abc123",
        "title": "Weekly Review",
        "link": f"{WEB_BASE_URL}/#p/abc123/tasks",
        "project_id": None,
        "tags": None,
    }
    assert result["edits"] == []
    data = _frontmatter(sample_note_file)
    assert data["dida-project"] == f"{WEB_BASE_URL}/#p/abc123/tasks"
    assert data["status"] == "in_progress"


def test_link_project_by_choice(test_client: TestClient, sample_note_file: Path) -> None:
    """Test chosen project id is picked among matches."""
    response = _command(test_client, "link-project", query="o", choice="p2")

    assert response.status_code == 200
    assert response.json()["item"]["title"] == "Work"
    assert _frontmatter(sample_note_file)["dida-project"] == f"{WEB_BASE_URL}/#p/p2/tasks"


def test_link_project_without_query(test_client: TestClient) -> None:
    """Test missing chooser query is a bad request."""
    response = _command(test_client, "link-project")

    assert response.status_code == 400
    assert response.json()["detail"] == "No project selected"


def test_link_task(test_client: TestClient, fake_dida) -> None:
    """Test linking a task updates it and links the current line."""
    response = _command(test_client, "link-task", cursor={"line": 2, "ch": 0}, query="milk")

    assert response.status_code == 200
    link = f"{WEB_BASE_URL}/#p/p9/tasks/t1"
    assert response.json()["text"].split("\n")[2] == f"[Call the plumber]({link})"
    update = fake_dida.bodies("POST", "/batch/task")[0]["update"][0]
    assert update["tags"] == ["home", "Obsidian"]


def test_unknown_command(test_client: TestClient) -> None:
    """Test unknown command returns 404."""
    response = _command(test_client, "delete-task")

    assert response.status_code == 404


def test_unknown_vault(test_client: TestClient) -> None:
    """Test unknown vault returns 404."""
    response = _command(test_client, "create-task", vault="Nope")

    assert response.status_code == 404
    assert "Unknown vault" in response.json()["detail"]


def test_command_without_active_note(test_client: TestClient) -> None:
    """Test command without a note path returns 400."""
    response = _command(test_client, "create-task", path=None)

    assert response.status_code == 400
    assert response.json()["detail"] == "Please select a file first"


def test_create_project_missing_note(test_client: TestClient) -> None:
    """Test frontmatter write to a note missing on disk returns 404."""
    response = _command(test_client, "create-project", path="Missing.md")

    assert response.status_code == 404


def test_create_project_offline_vault(test_client: TestClient) -> None:
    """Test frontmatter link in a vault without a folder returns 400."""
    response = _command(test_client, "create-project", vault="Offline")

    assert response.status_code == 400


def test_command_sign_on_rejected(test_client: TestClient, fake_dida) -> None:
    """Test rejected credentials return 401."""
    fake_dida.reject_sign_on = True

    response = _command(test_client, "create-project")

    assert response.status_code == 401


def test_command_dida_unavailable(test_client: TestClient, fake_dida) -> None:
    """Test repeated Dida365 failure returns 502 after one relogin."""
    fake_dida.fail_next = [500, 500]

    response = _command(test_client, "create-project")

    assert response.status_code == 502
    assert fake_dida.sign_on_count == 2


def test_get_settings_hides_secrets(test_client: TestClient) -> None:
    """Test GET /api/settings."""
    response = test_client.get("/api/settings")

    assert response.status_code == 200
    settings = response.json()
    assert settings["username"] == "user@example.com"
    assert settings["has_token"] is False
    assert settings["enable_task_link"] is True
    assert "password" not in settings
    assert "token" not in settings


def test_update_settings_toggle_keeps_token(
    test_client: TestClient, store: YamlConfigStore
) -> None:
    """Test toggling a switch keeps the token."""
    store.save(store.load().model_copy(update={"token": "kept"}))

    response = test_client.put("/api/settings", json={"enable_frontmatter_task_link": True})

    assert response.status_code == 200
    assert response.json()["enable_frontmatter_task_link"] is True
    assert store.load().token == "kept"


def test_update_settings_credentials_clear_token(
    test_client: TestClient, store: YamlConfigStore
) -> None:
    """Test changing credentials discards the token."""
    store.save(store.load().model_copy(update={"token": "old"}))

    response = test_client.put("/api/settings", json={"password": "changed"})

    assert response.status_code == 200
    assert response.json()["has_token"] is False
    stored = store.load()
    assert stored.password == "changed"
    assert stored.token == ""


def test_verify_credentials(test_client: TestClient, store: YamlConfigStore) -> None:
    """Test POST /api/settings/verify with stored credentials."""
    response = test_client.post("/api/settings/verify")

    assert response.status_code == 200
    assert response.json() == {"status": "success", "message": "Verify credentials success!"}
    assert store.load().token == ""


def test_verify_credentials_rejected(test_client: TestClient, fake_dida) -> None:
    """Test rejected credentials return 401."""
    fake_dida.reject_sign_on = True

    response = test_client.post(
        "/api/settings/verify", json={"username": "other@example.com", "password": "wrong"}
    )

    assert response.status_code == 401
    assert response.json()["detail"].startswith("Verify credentials failed")


def test_list_vaults(test_client: TestClient) -> None:
    """Test GET /api/vaults."""
    response = test_client.get("/api/vaults")

    assert response.status_code == 200
    assert [vault["name"] for vault in response.json()] == ["Personal", "Offline"]


def test_list_projects_by_query(test_client: TestClient) -> None:
    """Test GET /api/projects filters by title."""
    response = test_client.get("/api/projects?query=WORK")

    assert response.status_code == 200
    assert [p["id"] for p in response.json()] == ["p2"]
    assert test_client.get("/api/projects").json() == []


def test_get_inbox_project(test_client: TestClient) -> None:
    """Test GET /api/projects/inbox."""
    response = test_client.get("/api/projects/inbox")

    assert response.status_code == 200
    assert response.json()["id"] == "inbox115"
    assert response.json()["link"] == f"{WEB_BASE_URL}/#p/inbox/tasks"


def test_list_and_search_tasks(test_client: TestClient, fake_dida) -> None:
    """Test task lookups."""
    listed = test_client.get("/api/tasks?query=report").json()
    assert [t["id"] for t in listed] == ["t2"]
    assert listed[0]["tags"] == []

    searched = test_client.get("/api/tasks/search?keywords=milk")
    assert searched.status_code == 200
    assert searched.json()[0]["link"] == f"{WEB_BASE_URL}/#p/p9/tasks/t1"


def test_lookup_sign_on_rejected(test_client: TestClient, fake_dida) -> None:
    """Test lookups map rejected sign-on to 401."""
    fake_dida.reject_sign_on = True

    assert test_client.get("/api/projects/inbox").status_code == 401


def test_command_reversed_selection(test_client: TestClient) -> None:
    """Test a right-to-left selection is replaced by the task link."""
    test_client.put("/api/settings", json={"enable_selection_to_task_link": True})

    response = _command(
        test_client,
        "create-task",
        cursor={"line": 2, "ch": 9},
        selection={"start": {"line": 2, "ch": 16}, "end": {"line": 2, "ch": 9}},
    )

    assert response.status_code == 200
    link = f"{WEB_BASE_URL}/#p/inbox115/tasks/t100"
    assert response.json()["item"]["title"] == "plumber"
    assert response.json()["text"].split("\n")[2] == f"Call the [plumber]({link})"


@pytest.mark.parametrize(
    ("method", "url"),
    [
        ("get", "/api/settings"),
        ("put", "/api/settings"),
        ("post", "/api/settings/verify"),
        ("get", "/api/projects?query=work"),
        ("get", "/api/projects/inbox"),
        ("get", "/api/tasks?query=milk"),
        ("get", "/api/tasks/search?keywords=milk"),
    ],
)
def test_broken_settings_file(
    test_client: TestClient, store: YamlConfigStore, method: str, url: str
) -> None:
    """Test endpoints report an unreadable settings file as a bad request."""
    store.path.write_text("username: [unclosed\n")

    if method == "put":
        response = test_client.put(url, json={"enable_task_link": False})
    else:
        response = getattr(test_client, method)(url)

    assert response.status_code == 400
    assert "Invalid YAML" in response.json()["detail"]


def test_command_with_broken_settings_file(test_client: TestClient, store: YamlConfigStore) -> None:
    """Test commands report an unreadable settings file as a bad request."""
    store.path.write_text("username: [unclosed\n")

    response = _command(test_client, "create-task", cursor={"line": 2, "ch": 0})

    assert response.status_code == 400
    assert "Invalid YAML" in response.json()["detail"]
