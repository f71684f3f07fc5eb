"""Host and file node persistence."""

from __future__ import annotations

import sqlite3
from typing import Callable, Sequence

from lanmap.core.errors import RequestError, RequestErrorKind
from lanmap.db.sqlite import SQLiteDatabase
from lanmap.ingest.types import ValidatedEntry
from lanmap.models.entities import FileNode, Host, HostSummary, ImportRun
from lanmap.utils.ids import new_id
from lanmap.utils.time import now_ms

_NODE_COLUMNS = (
    "id, host_id, path, name, type, size, mtime, is_hidden, content_type, content, sha256"
)
_RUN_COLUMNS = (
    "id, host_id, version, generated_at, root_path, run_path, run_parent_path, "
    "entry_count, payload_size, warnings, created_at"
)


class NodeStore:
    """Transactional access to hosts, their file nodes, and import runs."""

    def __init__(self, db: SQLiteDatabase, batch_size: int = 300) -> None:
        self.db = db
        self.batch_size = batch_size

    # Hosts ------------------------------------------------------------

    def get_host(self, host_id: str) -> Host | None:
        rows = self.db.query(
            "SELECT id, label, address, created_at, updated_at FROM hosts WHERE id = ?",
            [host_id],
        )
        return _row_to_host(rows[0]) if rows else None

    def create_host(self, label: str, address: str) -> Host:
        now = now_ms()
        host = Host(id=new_id("host"), label=label, address=address, created_at=now, updated_at=now)
        try:
            with self.db.transaction() as cursor:
                cursor.execute(
                    "INSERT INTO hosts (id, label, address, created_at, updated_at) VALUES (?, ?, ?, ?, ?)",
                    [host.id, host.label, host.address, host.created_at, host.updated_at],
                )
        except sqlite3.IntegrityError as exc:
            raise RequestError(
                RequestErrorKind.CONFLICT,
                "Host address already exists",
                field="address",
            ) from exc
        return host

    def list_hosts(self) -> list[HostSummary]:
        with self.db.lock:
            rows = self.db.query(
                """
                SELECT h.id, h.label, h.address, h.created_at, h.updated_at,
                       (SELECT COUNT(*) FROM file_nodes n WHERE n.host_id = h.id) AS file_count
                FROM hosts h
                ORDER BY h.updated_at DESC, h.id
                """
            )
            return [
                HostSummary(
                    host=_row_to_host(row),
                    file_count=int(row["file_count"]),
                    latest_run=self.latest_import_run(row["id"]),
                )
                for row in rows
            ]

    # Nodes ------------------------------------------------------------

    def replace_host_nodes(
        self,
        label: str,
        address: str,
        entries: Sequence[ValidatedEntry],
        build_run: Callable[[str], ImportRun],
    ) -> tuple[Host, int]:
        """Upsert the host for ``address`` and swap its node set in one transaction.

        ``build_run`` receives the resolved host id and returns the import run
        to record. Any failure rolls back the host row as well as the nodes.
        """
        now = now_ms()
        with self.db.transaction() as cursor:
            cursor.execute(
                """
                INSERT INTO hosts (id, label, address, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(address) DO UPDATE SET label = excluded.label, updated_at = excluded.updated_at
                """,
                [new_id("host"), label, address, now, now],
            )
            cursor.execute(
                "SELECT id, label, address, created_at, updated_at FROM hosts WHERE address = ?",
                [address],
            )
            host = _row_to_host(cursor.fetchone())
            run = build_run(host.id)

            cursor.execute("DELETE FROM file_nodes WHERE host_id = ?", [host.id])
            for start in range(0, len(entries), self.batch_size):
                batch = entries[start : start + self.batch_size]
                cursor.executemany(
                    f"""
                    INSERT INTO file_nodes ({_NODE_COLUMNS}, created_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    [_entry_params(host.id, entry, now) for entry in batch],
                )
            cursor.execute(
                f"INSERT INTO import_runs ({_RUN_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                [
                    run.id,
                    host.id,
                    run.version,
                    run.generated_at,
                    run.root_path,
                    run.run_path,
                    run.run_parent_path,
                    run.entry_count,
                    run.payload_size,
                    run.warnings,
                    run.created_at,
                ],
            )
        return host, len(entries)

    def list_nodes(self, host_id: str) -> list[FileNode]:
        rows = self.db.query(
            f"SELECT {_NODE_COLUMNS} FROM file_nodes WHERE host_id = ? ORDER BY path",
            [host_id],
        )
        return [_row_to_node(row) for row in rows]

    def get_node(self, node_id: str) -> FileNode | None:
        rows = self.db.query(f"SELECT {_NODE_COLUMNS} FROM file_nodes WHERE id = ?", [node_id])
        return _row_to_node(rows[0]) if rows else None

    def latest_import_run(self, host_id: str) -> ImportRun | None:
        rows = self.db.query(
            f"SELECT {_RUN_COLUMNS} FROM import_runs WHERE host_id = ? "
            "ORDER BY created_at DESC, rowid DESC LIMIT 1",
            [host_id],
        )
        if not rows:
            return None
        return ImportRun(**{key: rows[0][key] for key in rows[0].keys()})


def _entry_params(host_id: str, entry: ValidatedEntry, now: int) -> tuple:
    keep_content = entry.type == "file" and entry.content_type == "text"
    return (
        new_id("node"),
        host_id,
        entry.path,
        entry.name,
        entry.type,
        entry.size,
        entry.mtime,
        int(entry.is_hidden),
        entry.content_type,
        entry.content if keep_content else None,
        entry.sha256,
        now,
    )


def _row_to_host(row: sqlite3.Row) -> Host:
    return Host(
        id=row["id"],
        label=row["label"],
        address=row["address"],
        created_at=int(row["created_at"]),
        updated_at=int(row["updated_at"]),
    )


def _row_to_node(row: sqlite3.Row) -> FileNode:
    return FileNode(
        id=row["id"],
        host_id=row["host_id"],
        path=row["path"],
        name=row["name"],
        type=row["type"],
        size=row["size"],
        mtime=row["mtime"],
        is_hidden=bool(row["is_hidden"]),
        content_type=row["content_type"],
        content=row["content"],
        sha256=row["sha256"],
    )


__all__ = ["NodeStore"]
