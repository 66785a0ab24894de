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

"""Tree entries for the in-memory filesystem."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from ._path import ROOT, join_path
from ._types import FileInfo


class NodeKind(Enum):
    """Whether a node holds children or bytes."""

    DIRECTORY = "directory"
    FILE = "file"


@dataclass(slots=True, eq=False)
class Node:
    """A single directory or file in a :class:`~fauxfile.filesystem._tree.Tree`.

    Directories own ``children``; files own ``buffer``. The payload that does
    not apply to ``kind`` stays empty. ``parent`` is ``None`` for the root and
    for nodes that were detached from the tree. Nodes compare by identity.
    """

    name: str
    kind: NodeKind
    mode: int
    modified: datetime
    parent: Node | None = field(default=None, repr=False)
    children: dict[str, Node] = field(default_factory=dict, repr=False)
    buffer: bytearray = field(default_factory=bytearray, repr=False)

    @property
    def is_dir(self) -> bool:
        return self.kind is NodeKind.DIRECTORY

    @property
    def size(self) -> int:
        return 0 if self.is_dir else len(self.buffer)

    @property
    def path(self) -> str:
        """Full path built by walking parent links.

        For a detached node this is its path relative to the topmost detached
        ancestor, which is rendered as if it were the root.
        """
        names: list[str] = []
        node: Node | None = self
        while node is not None and node.parent is not None:
            names.append(node.name)
            node = node.parent
        path = ROOT
        for name in reversed(names):
            path = join_path(path, name)
        return path

    def child(self, name: str) -> Node | None:
        return self.children.get(name)

    def touch(self, when: datetime) -> None:
        self.modified = when

    def info(self) -> FileInfo:
        """Snapshot the node's metadata."""
        return FileInfo(
            name=self.name,
            size=self.size,
            mode=self.mode,
            mod_time=self.modified,
        )


__all__ = ["Node", "NodeKind"]
