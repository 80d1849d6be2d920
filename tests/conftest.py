"""
Pytest configuration and shared fixtures.

Provides an in-memory ClickUp server (served through httpx.MockTransport),
a client wired to it, a spec document factory, and isolation of config and
environment state between tests.
"""

import json
import re
from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
import pytest

from spectrack.core.clickup import ClickUpClient
from spectrack.core.config import clear_cache
from spectrack.core.ids import parse_spec_id

# ==============================================================================
# Fake ClickUp API
# ==============================================================================


class FakeClickUpServer:
    """
    Stateful stand-in for the ClickUp API v2.

    Implements the endpoints spectrack uses. Every request is recorded in
    ``calls`` as ``(method, path, json_body)``. Responses queued with
    ``queue()`` are returned before any routing, in order.
    """

    def __init__(self) -> None:
        self.teams: list[dict[str, Any]] = [{"id": 1, "name": "Acme"}]
        self.spaces: dict[str, list[dict[str, Any]]] = {
            "1": [{"id": "901", "name": "Engineering"}, {"id": "902", "name": "Ops"}]
        }
        self.folders: dict[str, list[dict[str, Any]]] = {}
        self.lists: dict[str, list[dict[str, Any]]] = {}
        self.items: dict[str, dict[str, Any]] = {}
        self.fields: dict[str, list[dict[str, Any]]] = {}
        self.calls: list[tuple[str, str, Any]] = []
        self.page_size: int | None = None
        self._queued: list[httpx.Response] = []
        self._next_id = 100

    # -- seeding ---------------------------------------------------------

    def _new_id(self) -> str:
        self._next_id += 1
        return f"id{self._next_id}"

    def add_folder(self, name: str, space_id: str = "901") -> str:
        folder_id = self._new_id()
        self.folders.setdefault(space_id, []).append({"id": folder_id, "name": name})
        return folder_id

    def add_list(self, folder_id: str, name: str) -> str:
        list_id = self._new_id()
        self.lists.setdefault(folder_id, []).append({"id": list_id, "name": name})
        return list_id

    def add_field(self, list_id: str, name: str, field_type: str = "short_text") -> str:
        field_id = f"fld-{self._new_id()}"
        self.fields.setdefault(list_id, []).append(
            {"id": field_id, "name": name, "type": field_type}
        )
        return field_id

    def add_item(
        self,
        list_id: str,
        name: str,
        status: str = "draft",
        parent: str | None = None,
        custom_fields: list[dict[str, Any]] | None = None,
    ) -> str:
        item_id = self._new_id()
        self.items[item_id] = {
            "id": item_id,
            "name": name,
            "status": {"status": status.lower()},
            "parent": parent,
            "list": {"id": list_id},
            "url": f"https://app.clickup.com/t/{item_id}",
            "custom_fields": custom_fields or [],
        }
        return item_id

    def queue(self, response: httpx.Response) -> None:
        self._queued.append(response)

    # -- inspection ------------------------------------------------------

    def calls_of(self, method: str, pattern: str = "") -> list[tuple[str, str, Any]]:
        return [c for c in self.calls if c[0] == method and re.search(pattern, c[1])]

    def item_named(self, name: str) -> dict[str, Any] | None:
        return next((i for i in self.items.values() if i["name"] == name), None)

    def status_of(self, name: str) -> str:
        item = self.item_named(name)
        assert item is not None, f"no item named {name!r}"
        return item["status"]["status"].upper()

    # -- routing ---------------------------------------------------------

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix("/api/v2")
        body = json.loads(request.content) if request.content else None
        self.calls.append((request.method, path, body))

        if self._queued:
            return self._queued.pop(0)

        routes: list[tuple[str, str, Callable[..., httpx.Response]]] = [
            ("GET", r"/team", self._get_teams),
            ("GET", r"/team/([^/]+)/space", self._get_spaces),
            ("GET", r"/space/([^/]+)/folder", self._get_folders),
            ("POST", r"/space/([^/]+)/folder", self._post_folder),
            ("GET", r"/folder/([^/]+)/list", self._get_lists),
            ("POST", r"/folder/([^/]+)/list", self._post_list),
            ("GET", r"/list/([^/]+)/task", self._get_items),
            ("POST", r"/list/([^/]+)/task", self._post_item),
            ("GET", r"/list/([^/]+)/field", self._get_fields),
            ("GET", r"/task/([^/]+)", self._get_item),
            ("PUT", r"/task/([^/]+)", self._put_item),
            ("POST", r"/task/([^/]+)/field/([^/]+)", self._post_field_value),
        ]
        for method, pattern, handler in routes:
            match = re.fullmatch(pattern, path)
            if method == request.method and match:
                return handler(request, body, *match.groups())
        return httpx.Response(404, json={"err": f"No route for {request.method} {path}"})

    def _get_teams(self, request: httpx.Request, body: Any) -> httpx.Response:
        return httpx.Response(200, json={"teams": self.teams})

    def _get_spaces(self, request: httpx.Request, body: Any, team_id: str) -> httpx.Response:
        return httpx.Response(200, json={"spaces": self.spaces.get(team_id, [])})

    def _get_folders(self, request: httpx.Request, body: Any, space_id: str) -> httpx.Response:
        return httpx.Response(200, json={"folders": self.folders.get(space_id, [])})

    def _post_folder(self, request: httpx.Request, body: Any, space_id: str) -> httpx.Response:
        folder_id = self.add_folder(body["name"], space_id)
        return httpx.Response(200, json={"id": folder_id, "name": body["name"]})

    def _get_lists(self, request: httpx.Request, body: Any, folder_id: str) -> httpx.Response:
        return httpx.Response(200, json={"lists": self.lists.get(folder_id, [])})

    def _post_list(self, request: httpx.Request, body: Any, folder_id: str) -> httpx.Response:
        list_id = self.add_list(folder_id, body["name"])
        return httpx.Response(200, json={"id": list_id, "name": body["name"]})

    def _get_items(self, request: httpx.Request, body: Any, list_id: str) -> httpx.Response:
        items = [i for i in self.items.values() if i["list"]["id"] == list_id]
        statuses = [s.lower() for s in request.url.params.get_list("statuses[]")]
        if statuses:
            items = [i for i in items if i["status"]["status"] in statuses]
        if request.url.params.get("subtasks") == "false":
            items = [i for i in items if not i["parent"]]

        if self.page_size is None:
            return httpx.Response(200, json={"tasks": items, "last_page": True})
        page = int(request.url.params.get("page", "0"))
        start = page * self.page_size
        batch = items[start : start + self.page_size]
        last = start + self.page_size >= len(items)
        return httpx.Response(200, json={"tasks": batch, "last_page": last})

    def _post_item(self, request: httpx.Request, body: Any, list_id: str) -> httpx.Response:
        item_id = self.add_item(list_id, body["name"], status=body.get("status", "draft"))
        self.items[item_id]["request"] = body
        return httpx.Response(200, json=self.items[item_id])

    def _get_fields(self, request: httpx.Request, body: Any, list_id: str) -> httpx.Response:
        return httpx.Response(200, json={"fields": self.fields.get(list_id, [])})

    def _get_item(self, request: httpx.Request, body: Any, item_id: str) -> httpx.Response:
        if item_id not in self.items:
            return httpx.Response(404, json={"err": "Task not found"})
        return httpx.Response(200, json=self.items[item_id])

    def _put_item(self, request: httpx.Request, body: Any, item_id: str) -> httpx.Response:
        if item_id not in self.items:
            return httpx.Response(404, json={"err": "Task not found"})
        item = self.items[item_id]
        if "name" in body:
            item["name"] = body["name"]
        if "status" in body:
            item["status"] = {"status": body["status"].lower()}
        if "parent" in body:
            item["parent"] = body["parent"]
        return httpx.Response(200, json=item)

    def _post_field_value(
        self, request: httpx.Request, body: Any, item_id: str, field_id: str
    ) -> httpx.Response:
        item = self.items[item_id]
        list_fields = self.fields.get(item["list"]["id"], [])
        definition = next((f for f in list_fields if f["id"] == field_id), {"name": field_id})
        item["custom_fields"] = [f for f in item["custom_fields"] if f["id"] != field_id]
        item["custom_fields"].append(
            {"id": field_id, "name": definition["name"], "value": body["value"]}
        )
        return httpx.Response(200, json={})


@pytest.fixture
def clickup_server() -> FakeClickUpServer:
    """Provide an empty fake ClickUp workspace (team 1, spaces 901 and 902)."""
    return FakeClickUpServer()


@pytest.fixture
def client_factory(clickup_server: FakeClickUpServer) -> Callable[..., ClickUpClient]:
    """Build ClickUpClients that talk to the fake server without pacing."""

    def factory(api_key: str = "pk_test", **kwargs: Any) -> ClickUpClient:
        kwargs["min_interval"] = 0.0
        kwargs.setdefault("sleep", lambda seconds: None)
        return ClickUpClient(api_key, transport=httpx.MockTransport(clickup_server), **kwargs)

    return factory


@pytest.fixture
def client(client_factory: Callable[..., ClickUpClient]) -> ClickUpClient:
    """Provide a ClickUpClient bound to the fake server."""
    return client_factory()


# ==============================================================================
# Spec Tree Fixtures
# ==============================================================================


def write_spec(
    root: Path,
    spec_id: str,
    title: str | None = None,
    body: str = "",
    **fields: Any,
) -> Path:
    """
    Write a spec document at its canonical location under ``root``.

    List values are written as YAML flow sequences.
    """
    parts = parse_spec_id(spec_id)
    directory = root.joinpath(*parts.path_segments())
    directory.mkdir(parents=True, exist_ok=True)

    lines = ["---", f"id: {spec_id}"]
    if title is not None:
        lines.append(f"title: {title}")
    for key, value in fields.items():
        if isinstance(value, (list, tuple)):
            lines.append(f"{key}: {json.dumps(list(value))}")
        else:
            lines.append(f"{key}: {value}")
    lines.append("---")
    lines.append("")
    lines.append(body or f"# {title or spec_id}")

    path = directory / f"{spec_id}.spec.md"
    path.write_text("\n".join(lines) + "\n")
    return path


@pytest.fixture
def specs_root(tmp_path: Path) -> Path:
    """Provide an empty specs root directory."""
    root = tmp_path / "specs"
    root.mkdir()
    return root


@pytest.fixture
def make_spec(specs_root: Path) -> Callable[..., Path]:
    """Write spec documents into ``specs_root``."""

    def factory(spec_id: str, title: str | None = None, body: str = "", **fields: Any) -> Path:
        return write_spec(specs_root, spec_id, title, body, **fields)

    return factory


@pytest.fixture
def e02_tree(make_spec: Callable[..., Path]) -> None:
    """
    Epic E02 with one feature, one in-progress task and two complete subtasks.
    """
    make_spec("E02", "Market data", status="planned")
    make_spec("E02-F01", "Quote ingestion", status="planned")
    make_spec("E02-F01-T01", "Parse the feed", status="in_progress", priority="high")
    make_spec("E02-F01-T01-S01", "Tokenizer", status="complete")
    make_spec("E02-F01-T01-S02", "Field mapping", status="complete")


# ==============================================================================
# Isolation
# ==============================================================================


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Keep user config, env files and the config cache out of every test."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    for name in (
        "CLICKUP_API_KEY",
        "CLICKUP_TEAM_ID",
        "CLICKUP_SPACE_ID",
        "CLICKUP_SPACE_NAME",
        "SPECTRACK_SPECS_DIR",
        "GITHUB_REPOSITORY",
    ):
        monkeypatch.delenv(name, raising=False)
    clear_cache()
    yield
    clear_cache()
