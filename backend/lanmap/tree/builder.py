"""Hierarchical tree reconstruction from flat file node rows."""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator

from lanmap.ingest.paths import base_name, parent_path
from lanmap.models.entities import FileNode

ROOT_PATH = ""


@dataclass(slots=True)
class TreeNode:
    id: str
    name: str
    path: str
    type: str
    children: list["TreeNode"] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready view of this subtree, built without recursion."""
        rendered: dict[str, Any] = _shallow_dict(self)
        stack = [(self, rendered)]
        while stack:
            node, target = stack.pop()
            for child in node.children:
                child_dict = _shallow_dict(child)
                target["children"].append(child_dict)
                stack.append((child, child_dict))
        return rendered


def build_tree(nodes: Iterable[FileNode]) -> list[TreeNode]:
    """Assemble root-level tree nodes from rows in any order.

    Ancestors missing from the input are synthesized as placeholder
    directories.  A real directory row for a path that already has a
    placeholder takes the placeholder over, keeping its children.
    """
    root = TreeNode(id="root", name="/", path=ROOT_PATH, type="dir")
    index: dict[str, TreeNode] = {ROOT_PATH: root}
    placeholders: set[str] = set()

    for node in nodes:
        if node.is_dir and node.path in placeholders:
            adopted = index[node.path]
            adopted.id = node.id
            adopted.name = node.name
            placeholders.discard(node.path)
            continue

        parent = _ensure_directory(index, placeholders, parent_path(node.path) or ROOT_PATH)
        entry = TreeNode(id=node.id, name=node.name, path=node.path, type=node.type)
        parent.children.append(entry)
        if node.is_dir:
            index[node.path] = entry

    _sort_tree(root)
    return root.children


def iter_tree(roots: list[TreeNode]) -> Iterator[tuple[int, TreeNode]]:
    """Yield ``(depth, node)`` pairs depth-first in display order."""
    stack = [(0, node) for node in reversed(roots)]
    while stack:
        depth, node = stack.pop()
        yield depth, node
        stack.extend((depth + 1, child) for child in reversed(node.children))


def collation_key(name: str) -> tuple[str, str]:
    """Case- and accent-insensitive ordering with the raw name as tie-breaker."""
    decomposed = unicodedata.normalize("NFKD", name)
    stripped = "".join(char for char in decomposed if not unicodedata.combining(char))
    return stripped.casefold(), name


def _ensure_directory(index: dict[str, TreeNode], placeholders: set[str], path: str) -> TreeNode:
    existing = index.get(path)
    if existing is not None:
        return existing

    missing: list[str] = []
    cursor = path
    while cursor not in index:
        missing.append(cursor)
        cursor = parent_path(cursor) or ROOT_PATH

    parent = index[cursor]
    for missing_path in reversed(missing):
        created = TreeNode(
            id=f"placeholder:{missing_path}",
            name=base_name(missing_path),
            path=missing_path,
            type="dir",
        )
        parent.children.append(created)
        index[missing_path] = created
        placeholders.add(missing_path)
        parent = created
    return parent


def _sort_tree(root: TreeNode) -> None:
    stack = [root]
    while stack:
        node = stack.pop()
        node.children.sort(key=lambda child: (child.type != "dir", collation_key(child.name)))
        stack.extend(child for child in node.children if child.children)


def _shallow_dict(node: TreeNode) -> dict[str, Any]:
    return {"id": node.id, "name": node.name, "path": node.path, "type": node.type, "children": []}


__all__ = ["TreeNode", "build_tree", "iter_tree", "collation_key"]
