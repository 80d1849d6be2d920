"""
Tests for HierarchySyncEngine.

The engine runs against the real ClickUpClient talking to the fake
ClickUp server, over spec trees written into tmp_path.
"""

from datetime import date

import httpx
import pytest

from spectrack.core.clickup import RemoteThrottledError
from spectrack.core.ids import MalformedIdError, parse_spec_id
from spectrack.core.specs import SpecNode, load_spec_tree
from spectrack.core.sync import ActionKind, HierarchySyncEngine, SyncAction, item_fields


@pytest.fixture
def run_sync(client, specs_root):
    """Load the tree for the ID's epic and sync it into space 901."""

    def run(spec_id: str, dry_run: bool = False, **kwargs):
        tree = load_spec_tree(specs_root, epic=parse_spec_id(spec_id).epic)
        engine = HierarchySyncEngine(client, tree, "901", dry_run=dry_run, **kwargs)
        return engine.sync(spec_id)

    return run


def kinds(report) -> list[tuple[str, str]]:
    return [(a.kind.value, a.spec_id) for a in report.actions]


class TestEndToEnd:
    """The E02 scenario: one feature, one task, two complete subtasks."""

    def test_creates_hierarchy_and_promotes(self, run_sync, clickup_server, e02_tree) -> None:
        report = run_sync("E02")

        assert kinds(report) == [
            ("create_folder", "E02"),
            ("create_list", "E02-F01"),
            ("create_item", "E02-F01-T01"),
            ("write_back", "E02-F01-T01"),
            ("create_item", "E02-F01-T01-S01"),
            ("set_parent", "E02-F01-T01-S01"),
            ("write_back", "E02-F01-T01-S01"),
            ("create_item", "E02-F01-T01-S02"),
            ("set_parent", "E02-F01-T01-S02"),
            ("write_back", "E02-F01-T01-S02"),
            ("update_status", "E02-F01-T01"),
        ]
        assert report.skipped == []
        assert report.created_count == 5

        folder = clickup_server.folders["901"][0]
        assert folder["name"] == "E02 - Market data"
        task_list = clickup_server.lists[folder["id"]][0]
        assert task_list["name"] == "E02-F01: Quote ingestion"

        task = clickup_server.item_named("E02-F01-T01: Parse the feed")
        assert task["request"]["status"] == "IN PROGRESS"
        assert task["request"]["priority"] == 2
        assert clickup_server.status_of("E02-F01-T01: Parse the feed") == "COMPLETE"

        for name in ("E02-F01-T01-S01: Tokenizer", "E02-F01-T01-S02: Field mapping"):
            subtask = clickup_server.item_named(name)
            assert subtask["parent"] == task["id"]
            assert clickup_server.status_of(name) == "COMPLETE"

    def test_writes_remote_ids_back(self, run_sync, clickup_server, specs_root, e02_tree) -> None:
        run_sync("E02")

        task = clickup_server.item_named("E02-F01-T01: Parse the feed")
        text = (specs_root / "E02" / "F01" / "T01" / "E02-F01-T01.spec.md").read_text()
        assert f"clickup_task_id: '{task['id']}'" in text

    def test_second_run_is_idempotent(self, run_sync, clickup_server, e02_tree) -> None:
        run_sync("E02")
        posts_after_first = len(clickup_server.calls_of("POST"))

        report = run_sync("E02")

        assert report.created_count == 0
        assert report.actions == []
        assert len(clickup_server.calls_of("POST")) == posts_after_first
        assert len(clickup_server.items) == 3

    def test_on_action_receives_every_action(self, run_sync, e02_tree) -> None:
        seen: list[SyncAction] = []
        report = run_sync("E02", on_action=seen.append)
        assert seen == report.actions


class TestExistingItems:
    """Reconciliation of items that already exist."""

    @pytest.fixture
    def remote_list(self, clickup_server) -> str:
        folder_id = clickup_server.add_folder("E02 - Market data")
        return clickup_server.add_list(folder_id, "E02-F01: Quote ingestion")

    @pytest.fixture
    def base_specs(self, make_spec) -> None:
        make_spec("E02", "Market data")
        make_spec("E02-F01", "Quote ingestion")

    @pytest.mark.parametrize(
        "source_status", ["draft", "planned", "blocked", "in-progress", "review", "testing"]
    )
    def test_never_downgrades_complete(
        self, run_sync, clickup_server, make_spec, base_specs, remote_list, source_status
    ) -> None:
        make_spec("E02-F01-T01", "Parse the feed", status=source_status)
        clickup_server.add_item(remote_list, "E02-F01-T01: Parse the feed", "complete")

        report = run_sync("E02")

        assert kinds(report) == [("skip_downgrade", "E02-F01-T01")]
        assert clickup_server.calls_of("PUT") == []

    def test_cancel_is_not_a_downgrade(
        self, run_sync, clickup_server, make_spec, base_specs, remote_list
    ) -> None:
        make_spec("E02-F01-T01", "Parse the feed", status="abandoned")
        clickup_server.add_item(remote_list, "E02-F01-T01: Parse the feed", "complete")

        run_sync("E02")

        assert clickup_server.status_of("E02-F01-T01: Parse the feed") == "CANCELLED"

    def test_moves_status_forward(
        self, run_sync, clickup_server, make_spec, base_specs, remote_list
    ) -> None:
        make_spec("E02-F01-T01", "Parse the feed", status="review")
        clickup_server.add_item(remote_list, "E02-F01-T01: Parse the feed", "planned")

        report = run_sync("E02")

        assert kinds(report) == [("update_status", "E02-F01-T01")]
        assert clickup_server.status_of("E02-F01-T01: Parse the feed") == "REVIEW"

    def test_renames_changed_title(
        self, run_sync, clickup_server, make_spec, base_specs, remote_list
    ) -> None:
        make_spec("E02-F01-T01", "Parse the quote feed", status="draft")
        item_id = clickup_server.add_item(remote_list, "E02-F01-T01: Parse the feed", "draft")

        report = run_sync("E02")

        assert kinds(report) == [("rename_item", "E02-F01-T01")]
        assert clickup_server.items[item_id]["name"] == "E02-F01-T01: Parse the quote feed"

    def test_existing_parent_promoted_by_children(
        self, run_sync, clickup_server, make_spec, base_specs, remote_list
    ) -> None:
        make_spec("E02-F01-T01", "Task", status="in-progress")
        for n in (1, 2, 3):
            make_spec(f"E02-F01-T01-S0{n}", f"Sub {n}", status="completed")
        task_id = clickup_server.add_item(remote_list, "E02-F01-T01: Task", "in progress")
        for n in (1, 2, 3):
            clickup_server.add_item(
                remote_list, f"E02-F01-T01-S0{n}: Sub {n}", "complete", parent=task_id
            )

        report = run_sync("E02")

        assert kinds(report) == [("update_status", "E02-F01-T01")]
        assert clickup_server.status_of("E02-F01-T01: Task") == "COMPLETE"

    def test_prefix_does_not_confuse_t1_and_t10(
        self, run_sync, clickup_server, make_spec, base_specs, remote_list
    ) -> None:
        make_spec("E02-F01-T1", "One", status="draft")
        clickup_server.add_item(remote_list, "E02-F01-T10: Ten", "draft")

        report = run_sync("E02")

        assert ("create_item", "E02-F01-T1") in kinds(report)
        assert clickup_server.item_named("E02-F01-T1: One") is not None


class TestSpecIdField:
    """Lists with a "Spec ID" custom field."""

    def test_sets_field_on_create_and_matches_by_it(
        self, run_sync, clickup_server, make_spec
    ) -> None:
        make_spec("E02", "Market data")
        make_spec("E02-F01", "Quote ingestion")
        make_spec("E02-F01-T01", "Parse the feed")
        folder_id = clickup_server.add_folder("E02 - Market data")
        list_id = clickup_server.add_list(folder_id, "E02-F01: Quote ingestion")
        field_id = clickup_server.add_field(list_id, "Spec ID")

        report = run_sync("E02")

        assert ("set_spec_id", "E02-F01-T01") in kinds(report)
        item = clickup_server.item_named("E02-F01-T01: Parse the feed")
        assert item["custom_fields"] == [
            {"id": field_id, "name": "Spec ID", "value": "E02-F01-T01"}
        ]

        # Someone renames the item by hand; the field still identifies it.
        item["name"] = "Feed parser"
        report = run_sync("E02")

        assert kinds(report) == [("rename_item", "E02-F01-T01")]
        assert len(clickup_server.items) == 1


class TestDryRun:
    """Dry runs read but never write."""

    def test_matches_live_sequence(self, client_factory, clickup_server, specs_root, e02_tree):
        folder_id = clickup_server.add_folder("E02 - Market data")
        clickup_server.add_list(folder_id, "E02-F01: Quote ingestion")
        before = {p: p.read_text() for p in specs_root.rglob("*.spec.md")}

        tree = load_spec_tree(specs_root, epic="E02")
        dry = HierarchySyncEngine(client_factory(), tree, "901", dry_run=True).sync("E02")

        assert clickup_server.calls_of("POST") == []
        assert clickup_server.calls_of("PUT") == []
        assert {p: p.read_text() for p in specs_root.rglob("*.spec.md")} == before
        assert all(a.dry_run for a in dry.actions)
        assert dry.actions[0].remote_id == "pending:E02-F01-T01"

        tree = load_spec_tree(specs_root, epic="E02")
        live = HierarchySyncEngine(client_factory(), tree, "901").sync("E02")

        assert kinds(dry) == kinds(live)

    def test_absent_folder_aborts_subtree(self, run_sync, clickup_server, e02_tree) -> None:
        report = run_sync("E02", dry_run=True)

        assert kinds(report) == [("create_folder", "E02")]
        assert [s.spec_id for s in report.skipped] == ["E02"]
        assert "folder unavailable" in report.skipped[0].reason
        assert clickup_server.calls_of("POST") == []
        assert clickup_server.calls_of("GET", "/folder/") == []


class TestEntryLevels:
    """Syncs that start below the epic."""

    def test_task_entry_with_extensions(self, run_sync, clickup_server, make_spec) -> None:
        make_spec("E02", "Market data")
        make_spec("E02-F01", "Quote ingestion")
        make_spec("E02-F01-T01", "Task")
        make_spec("E02-F01-T01-S01", "Sub")
        make_spec("E02-F01-T01-X01", "Task extension")
        make_spec("E02-F01-T01-S01-X01", "Sub extension")

        report = run_sync("E02-F01-T01")

        created = [a.spec_id for a in report.actions_of(ActionKind.CREATE_ITEM)]
        assert created == [
            "E02-F01-T01",
            "E02-F01-T01-S01",
            "E02-F01-T01-S01-X01",
            "E02-F01-T01-X01",
        ]
        task = clickup_server.item_named("E02-F01-T01: Task")
        sub = clickup_server.item_named("E02-F01-T01-S01: Sub")
        assert clickup_server.item_named("E02-F01-T01-X01: Task extension")["parent"] == task["id"]
        assert clickup_server.item_named("E02-F01-T01-S01-X01: Sub extension")["parent"] == (
            sub["id"]
        )

    def test_subtask_entry_uses_cached_parent_id(
        self, run_sync, clickup_server, make_spec
    ) -> None:
        folder_id = clickup_server.add_folder("E02 - Market data")
        list_id = clickup_server.add_list(folder_id, "E02-F01: Quote ingestion")
        task_id = clickup_server.add_item(list_id, "Task renamed remotely", "planned")
        make_spec("E02", "Market data")
        make_spec("E02-F01", "Quote ingestion")
        make_spec("E02-F01-T01", "Task", clickup_task_id=task_id)
        make_spec("E02-F01-T01-S01", "Sub")

        report = run_sync("E02-F01-T01-S01")

        assert kinds(report)[:2] == [
            ("create_item", "E02-F01-T01-S01"),
            ("set_parent", "E02-F01-T01-S01"),
        ]
        assert clickup_server.item_named("E02-F01-T01-S01: Sub")["parent"] == task_id

    def test_subtask_entry_without_parent_item(self, run_sync, clickup_server, make_spec):
        folder_id = clickup_server.add_folder("E02 - Market data")
        clickup_server.add_list(folder_id, "E02-F01: Quote ingestion")
        make_spec("E02", "Market data")
        make_spec("E02-F01", "Quote ingestion")
        make_spec("E02-F01-T01", "Task")
        make_spec("E02-F01-T01-S01", "Sub")

        report = run_sync("E02-F01-T01-S01")

        assert report.actions == []
        assert report.skipped[0].spec_id == "E02-F01-T01-S01"
        assert "parent item unavailable" in report.skipped[0].reason
        assert clickup_server.calls_of("POST") == []

    def test_feature_entry(self, run_sync, clickup_server, make_spec) -> None:
        make_spec("E02", "Market data")
        make_spec("E02-F01", "Quote ingestion")
        make_spec("E02-F02", "Other")
        make_spec("E02-F01-T01", "Task")

        report = run_sync("E02-F01")

        assert kinds(report)[:3] == [
            ("create_folder", "E02"),
            ("create_list", "E02-F01"),
            ("create_item", "E02-F01-T01"),
        ]
        assert all(spec_id != "E02-F02" for _, spec_id in kinds(report))


class TestFailureContainment:
    """Per-branch failures do not stop siblings; remote failures end the run."""

    def test_missing_document_skips_branch(self, run_sync, clickup_server, make_spec) -> None:
        make_spec("E02", "Market data")
        make_spec("E02-F01", "Quote ingestion")
        make_spec("E02-F01-T01")  # no title, fails to load
        make_spec("E02-F01-T02", "Second task")

        report = run_sync("E02")

        assert [s.spec_id for s in report.skipped] == ["E02-F01-T01"]
        assert "missing spec document" in report.skipped[0].reason
        assert clickup_server.item_named("E02-F01-T02: Second task") is not None
        assert report.has_problems

    def test_missing_root_document(self, run_sync, clickup_server) -> None:
        report = run_sync("E05")

        assert report.actions == []
        assert report.skipped[0].spec_id == "E05"
        assert clickup_server.calls == []

    def test_write_back_failure_keeps_subtree(
        self, client, clickup_server, specs_root, e02_tree, monkeypatch
    ) -> None:
        engine = HierarchySyncEngine(client, load_spec_tree(specs_root), "901")
        real_write = engine.writer.write

        def write(spec_id, remote_id, node=None):
            if spec_id == "E02-F01-T01":
                raise PermissionError("read-only spec file")
            return real_write(spec_id, remote_id, node)

        monkeypatch.setattr(engine.writer, "write", write)

        report = engine.sync("E02")

        assert [s.spec_id for s in report.skipped] == ["E02-F01-T01"]
        assert "write-back failed" in report.skipped[0].reason
        assert ("create_item", "E02-F01-T01-S02") in kinds(report)
        assert kinds(report)[-1] == ("update_status", "E02-F01-T01")

        task = clickup_server.item_named("E02-F01-T01: Parse the feed")
        assert clickup_server.item_named("E02-F01-T01-S01: Tokenizer")["parent"] == task["id"]
        assert clickup_server.status_of("E02-F01-T01: Parse the feed") == "COMPLETE"

    def test_throttling_propagates(self, run_sync, clickup_server, e02_tree) -> None:
        clickup_server.queue(httpx.Response(429, headers={"Retry-After": "0"}))
        clickup_server.queue(httpx.Response(429, headers={"Retry-After": "0"}))

        with pytest.raises(RemoteThrottledError):
            run_sync("E02")

    def test_malformed_id(self, client, specs_root) -> None:
        engine = HierarchySyncEngine(client, load_spec_tree(specs_root), "901")
        with pytest.raises(MalformedIdError):
            engine.sync("E02-F01-")

    def test_unknown_children_source(self, client, specs_root) -> None:
        with pytest.raises(ValueError):
            HierarchySyncEngine(client, load_spec_tree(specs_root), "901", children_source="x")


class TestChildrenSource:
    """Declared children versus directory layout."""

    @pytest.fixture
    def declared_specs(self, make_spec) -> None:
        make_spec("E02", "Market data", children=["E02-F02"])
        make_spec("E02-F01", "First")
        make_spec("E02-F02", "Second")

    def test_directory_is_default(self, run_sync, declared_specs, caplog) -> None:
        report = run_sync("E02")

        lists = [spec_id for kind, spec_id in kinds(report) if kind == "create_list"]
        assert lists == ["E02-F01", "E02-F02"]
        assert "diverge" in caplog.text

    def test_extension_missing_from_declared_list(self, run_sync, make_spec) -> None:
        make_spec("E02", "Market data")
        make_spec("E02-F01", "Quote ingestion")
        make_spec("E02-F01-T01", "Parse", children=["E02-F01-T01-S01"])
        make_spec("E02-F01-T01-S01", "Tokenizer")
        make_spec("E02-F01-T01-X01", "Follow-up")

        report = run_sync("E02-F01-T01")

        created = [spec_id for kind, spec_id in kinds(report) if kind == "create_item"]
        assert created == ["E02-F01-T01", "E02-F01-T01-S01", "E02-F01-T01-X01"]

    def test_declared_mode(self, run_sync, declared_specs) -> None:
        report = run_sync("E02", children_source="declared")

        lists = [spec_id for kind, spec_id in kinds(report) if kind == "create_list"]
        assert lists == ["E02-F02"]


class TestItemFields:
    def test_payload(self) -> None:
        node = SpecNode(
            id="E02-F01-T01",
            title="Parse",
            priority="urgent",
            estimated_hours=1.5,
            tags=["a", "b"],
            created=date(2025, 1, 15),
            body="Body",
        )

        fields = item_fields(node, "PLANNED")

        assert fields == {
            "name": "E02-F01-T01: Parse",
            "description": "Body",
            "status": "PLANNED",
            "priority": 1,
            "time_estimate": 5_400_000,
            "tags": ["a", "b"],
            "start_date": 1736899200000,
        }

    def test_no_start_date(self) -> None:
        assert "start_date" not in item_fields(SpecNode(id="E02-F01-T01", title="X"), "DRAFT")
