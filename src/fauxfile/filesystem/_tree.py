# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Node tree backing :class:`~fauxfile.filesystem.MemoryFilesystem`.

The tree is the only owner of nodes: the facade asks it to resolve paths and
to link or unlink nodes, and never edits ``children`` or ``parent`` itself.
With contracts enabled (see :mod:`fauxfile.dbc`) the structural invariants
are re-validated around every public call.
"""

from __future__ import annotations

from fauxfile.clock import WallClock
from fauxfile.dbc import ContractResult, invariant, require, skip_invariant
from fauxfile.errors import NotDirectoryError, NotFoundError
from fauxfile.logging import StructuredLogger, get_logger

from ._node import Node, NodeKind
from ._path import ROOT, SEPARATOR, path_parts, split_path
from ._types import ROOT_MODE

_LOGGER: StructuredLogger = get_logger(__name__, context={"component": "memfs.tree"})


def _tree_is_consistent(tree: Tree) -> ContractResult:
    root = tree.root
    if root.parent is not None or not root.is_dir:
        return False, "root must be a parentless directory"
    seen: set[int] = {id(root)}
    pending = [root]
    while pending:
        node = pending.pop()
        if node.is_dir and node.buffer:
            return False, f"directory {node.path} holds bytes"
        if not node.is_dir and node.children:
            return False, f"file {node.path} holds children"
        for name, child in node.children.items():
            if child.name != name:
                return False, f"{child.path} is filed under {name!r}"
            if child.parent is not node:
                return False, f"{child.path} has a stale parent link"
            if id(child) in seen:
                return False, f"{child.path} is linked twice"
            seen.add(id(child))
            pending.append(child)
    if id(tree.cwd) not in seen or not tree.cwd.is_dir:
        return False, "cwd must be a directory reachable from the root"
    return True


def _valid_entry(tree: Tree, parent: Node, node: Node) -> ContractResult:
    del tree
    if not parent.is_dir:
        return False, "parent must be a directory"
    if not node.name or SEPARATOR in node.name or node.name in {".", ".."}:
        return False, f"invalid entry name {node.name!r}"
    if node.parent is not None:
        return False, "node is already linked"
    return node.name not in parent.children, f"{node.name!r} already exists"


@invariant(_tree_is_consistent)
class Tree:
    """Owns the root directory and the working directory.

    Attributes:
        root: The parentless root directory.
        cwd: Directory that relative paths resolve against.
        clock: Source of ``modified`` timestamps.
    """

    def __init__(self, clock: WallClock) -> None:
        self.clock = clock
        self.root = Node(
            name=ROOT,
            kind=NodeKind.DIRECTORY,
            mode=ROOT_MODE,
            modified=clock.utcnow(),
        )
        self.cwd = self.root

    @skip_invariant
    def new_node(self, name: str, kind: NodeKind, mode: int) -> Node:
        """Create a detached node stamped with the current time."""
        return Node(name=name, kind=kind, mode=mode, modified=self.clock.utcnow())

    def resolve(self, path: str) -> Node:
        """Walk a clean absolute path from the root.

        Raises:
            NotFoundError: A component is missing, or a component before the
                last one is a file.
        """
        node = self.root
        for part in path_parts(path):
            child = node.child(part) if node.is_dir else None
            if child is None:
                raise NotFoundError(path)
            node = child
        return node

    def resolve_parent(self, path: str) -> tuple[Node, str]:
        """Resolve the directory that holds the last segment of ``path``.

        Returns the directory node and the final segment (empty for the root).

        Raises:
            NotFoundError: The parent path does not resolve.
            NotDirectoryError: The parent path names a file.
        """
        parent_path, name = split_path(path)
        parent = self.resolve(parent_path)
        if not parent.is_dir:
            raise NotDirectoryError(parent_path)
        return parent, name

    @skip_invariant
    def contains(self, node: Node) -> bool:
        """Return ``True`` while ``node`` is still reachable from the root."""
        return _is_within(node, self.root)

    @require(_valid_entry)
    def attach(self, parent: Node, node: Node) -> None:
        """Link a detached node under ``parent`` and touch the parent."""
        node.parent = parent
        parent.children[node.name] = node
        parent.touch(self.clock.utcnow())

    @require(lambda tree, node: node.parent is not None)
    def detach(self, node: Node) -> None:
        """Unlink ``node`` (and its subtree) from its parent.

        A working directory inside the detached subtree falls back to the
        detached node's parent.
        """
        parent = node.parent
        assert parent is not None  # nosec: B101
        fallback = _is_within(self.cwd, node)
        del parent.children[node.name]
        node.parent = None
        parent.touch(self.clock.utcnow())
        if fallback:
            _LOGGER.warning(
                "Working directory removed; falling back to parent.",
                event="memfs.cwd_fallback",
                context={"cwd": parent.path},
            )
            self.cwd = parent

    @require(
        lambda tree, node, parent, name: node.parent is not None,
        lambda tree, node, parent, name: not _is_within(parent, node),
        lambda tree, node, parent, name: name not in parent.children,
    )
    def move(self, node: Node, parent: Node, name: str) -> None:
        """Relink ``node`` under ``parent`` as ``name``, keeping its subtree.

        The working directory stays put even when it lies inside ``node``.
        """
        source = node.parent
        assert source is not None  # nosec: B101
        del source.children[node.name]
        node.name = name
        node.parent = parent
        parent.children[name] = node
        now = self.clock.utcnow()
        source.touch(now)
        parent.touch(now)

    def set_cwd(self, node: Node) -> None:
        if not node.is_dir:
            raise NotDirectoryError(node.path)
        self.cwd = node


def _is_within(node: Node, ancestor: Node) -> bool:
    current: Node | None = node
    while current is not None:
        if current is ancestor:
            return True
        current = current.parent
    return False


__all__ = ["Tree"]
