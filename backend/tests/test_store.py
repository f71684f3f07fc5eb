"""Store and import pipeline integration tests."""

from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from lanmap.core.config import Settings
from lanmap.core.errors import PayloadError, RequestError, RequestErrorKind
from lanmap.db.sqlite import SQLiteDatabase
from lanmap.db.store import NodeStore
from lanmap.ingest.pipeline import ImportPipeline


@pytest.fixture
def store(tmp_path: Path) -> NodeStore:
    db = SQLiteDatabase(tmp_path / "store.db")
    db.ensure_schema()
    yield NodeStore(db, batch_size=2)
    db.close()


@pytest.fixture
def pipeline(store: NodeStore, tmp_path: Path) -> ImportPipeline:
    return ImportPipeline(store, Settings(db_path=tmp_path / "store.db"))


def test_import_persists_nodes_and_run(pipeline: ImportPipeline, store: NodeStore, make_payload, sample_entries) -> None:
    result = pipeline.import_payload(make_payload(sample_entries))
    assert result.imported_count == len(sample_entries)

    nodes = store.list_nodes(result.host_id)
    assert [node.path for node in nodes] == sorted(entry["path"] for entry in sample_entries)
    by_path = {node.path: node for node in nodes}
    assert by_path["etc"].content is None
    assert by_path["secret.key"].content == "abc"
    assert by_path[".ssh/id_rsa"].size == 2048

    run = store.latest_import_run(result.host_id)
    assert run is not None
    assert run.entry_count == len(sample_entries)
    assert run.run_path == "/home/user/projects/sample"
    assert run.generated_at == "2024-05-01T12:00:00.000Z"


def test_reimport_fully_replaces_nodes(pipeline: ImportPipeline, store: NodeStore, make_payload) -> None:
    first = pipeline.import_payload(
        make_payload([{"path": "old.txt", "name": "old.txt", "type": "file"}, {"path": "keep", "name": "keep", "type": "dir"}])
    )
    second = pipeline.import_payload(
        make_payload([{"path": "new.txt", "name": "new.txt", "type": "file"}], label="Renamed")
    )
    assert first.host_id == second.host_id
    assert [node.path for node in store.list_nodes(second.host_id)] == ["new.txt"]
    assert store.get_host(second.host_id).label == "Renamed"


def test_rejected_payload_writes_nothing(pipeline: ImportPipeline, store: NodeStore, make_payload) -> None:
    good = pipeline.import_payload(make_payload([{"path": "a.txt", "name": "a.txt", "type": "file"}]))
    duplicate = [
        {"path": "b.txt", "name": "b.txt", "type": "file"},
        {"path": "./b.txt", "name": "b.txt", "type": "file"},
    ]
    with pytest.raises(PayloadError):
        pipeline.import_payload(make_payload(duplicate))
    assert [node.path for node in store.list_nodes(good.host_id)] == ["a.txt"]


def test_failed_replace_rolls_back(store: NodeStore, pipeline: ImportPipeline, make_payload) -> None:
    result = pipeline.import_payload(make_payload([{"path": "a.txt", "name": "a.txt", "type": "file"}]))
    run = store.latest_import_run(result.host_id)
    with pytest.raises(sqlite3.IntegrityError):
        # Reusing the run id violates its primary key after the nodes were replaced.
        store.replace_host_nodes("Lab Box", "10.0.0.5", [], lambda host_id: run)
    assert [node.path for node in store.list_nodes(result.host_id)] == ["a.txt"]


def test_failed_import_leaves_no_new_host(store: NodeStore, pipeline: ImportPipeline, make_payload) -> None:
    result = pipeline.import_payload(make_payload([{"path": "a.txt", "name": "a.txt", "type": "file"}]))
    run = store.latest_import_run(result.host_id)
    with pytest.raises(sqlite3.IntegrityError):
        store.replace_host_nodes("Fresh", "10.7.7.7", [], lambda host_id: run)
    assert [summary.host.address for summary in store.list_hosts()] == ["10.0.0.5"]


def test_oversized_entry_size_is_rejected_before_writing(pipeline: ImportPipeline, store: NodeStore, make_payload) -> None:
    entries = [{"path": "huge.img", "name": "huge.img", "type": "file", "size": 2**63}]
    with pytest.raises(PayloadError) as excinfo:
        pipeline.import_payload(make_payload(entries))
    assert excinfo.value.field == "entries[0].size"
    assert store.list_hosts() == []


def test_import_warnings_for_dropped_content(pipeline: ImportPipeline, store: NodeStore, make_payload) -> None:
    entries = [
        {"path": "blob.bin", "name": "blob.bin", "type": "file", "contentType": "binary", "content": "AAAA"},
        {"path": "empty.txt", "name": "empty.txt", "type": "file", "contentType": "text"},
    ]
    result = pipeline.import_payload(make_payload(entries))
    assert result.warnings == [
        "Content discarded for binary file: blob.bin",
        "Text file has no content: empty.txt",
    ]
    assert store.get_node(store.list_nodes(result.host_id)[0].id).content is None


def test_create_host_conflict(store: NodeStore) -> None:
    store.create_host("one", "10.1.1.1")
    with pytest.raises(RequestError) as excinfo:
        store.create_host("two", "10.1.1.1")
    assert excinfo.value.kind is RequestErrorKind.CONFLICT
    assert excinfo.value.status_code == 409


def test_list_hosts_includes_counts(pipeline: ImportPipeline, store: NodeStore, make_payload, sample_entries) -> None:
    pipeline.import_payload(make_payload(sample_entries))
    store.create_host("bare", "10.9.9.9")
    summaries = {summary.host.address: summary for summary in store.list_hosts()}
    assert summaries["10.0.0.5"].file_count == len(sample_entries)
    assert summaries["10.0.0.5"].latest_run.root_path == "/home/user"
    assert summaries["10.9.9.9"].file_count == 0
    assert summaries["10.9.9.9"].latest_run is None
