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

"""Cursor-bearing handles onto in-memory nodes.

Several handles may be bound to the same node; they share its buffer and
keep independent offsets, so a write through one is visible to a read
through another. A handle whose node is removed from the tree keeps working
on the detached node until it is closed.
"""

from __future__ import annotations

from collections.abc import Buffer
from typing import Self

from fauxfile.errors import (
    ClosedError,
    EndOfFileError,
    InvalidArgumentError,
    IsDirectoryError,
    NotDirectoryError,
    NotFoundError,
    OutOfRangeError,
)

from ._node import Node
from ._tree import Tree
from ._types import FileInfo, Whence, with_permissions

__all__ = ["MemoryFile"]


class MemoryFile:
    """Open handle returned by :class:`~fauxfile.filesystem.MemoryFilesystem`.

    Example::

        with fs.create("greeting.txt") as f:
            f.write(b"Hello world")
            f.seek(0)
            assert f.read() == b"Hello world"
    """

    __slots__ = (
        "_append",
        "_dir_cursor",
        "_dir_position",
        "_name",
        "_node",
        "_offset",
        "_tree",
    )

    def __init__(self, tree: Tree, node: Node, *, append: bool = False) -> None:
        self._tree = tree
        self._node: Node | None = node
        self._name = node.name
        self._offset = 0
        self._append = append
        self._dir_cursor: list[str] | None = None
        self._dir_position = 0

    # --- State ---

    @property
    def name(self) -> str:
        """Basename of the bound node (as last seen, once closed)."""
        if self._node is not None:
            self._name = self._node.name
        return self._name

    @property
    def closed(self) -> bool:
        return self._node is None

    def _bound(self) -> Node:
        if self._node is None:
            raise ClosedError(self._name)
        return self._node

    def _file_node(self) -> Node:
        node = self._bound()
        if node.is_dir:
            raise IsDirectoryError(node.path)
        return node

    def _position(self, node: Node) -> int:
        if self._offset < 0:
            msg = f"negative file offset {self._offset}"
            raise OutOfRangeError(node.path, msg)
        return self._offset

    # --- Reading ---

    def read(self, size: int = -1) -> bytes:
        """Read up to ``size`` bytes (everything left when negative).

        Raises:
            EndOfFileError: The offset is at or past the end of the data and
                ``size`` is not zero.
        """
        node = self._file_node()
        start = self._position(node)
        if size == 0:
            return b""
        available = len(node.buffer)
        if start >= available:
            raise EndOfFileError(node.path)
        end = available if size < 0 else min(start + size, available)
        self._offset = end
        return bytes(node.buffer[start:end])

    def readinto(self, buffer: Buffer) -> int:
        """Copy bytes into ``buffer`` and return how many were copied."""
        node = self._file_node()
        start = self._position(node)
        view = memoryview(buffer).cast("B")
        if not len(view):
            return 0
        if start >= len(node.buffer):
            raise EndOfFileError(node.path)
        chunk = node.buffer[start : start + len(view)]
        view[: len(chunk)] = chunk
        self._offset = start + len(chunk)
        return len(chunk)

    def read_at(self, size: int, offset: int) -> bytes:
        _ = self.seek(offset, Whence.START)
        return self.read(size)

    def readinto_at(self, buffer: Buffer, offset: int) -> int:
        _ = self.seek(offset, Whence.START)
        return self.readinto(buffer)

    # --- Writing ---

    def write(self, data: Buffer) -> int:
        """Write ``data`` at the offset and advance past it.

        A gap between the current end of the file and the offset is filled
        with zero bytes. In append mode the data always lands at the end.
        """
        node = self._file_node()
        if self._append:
            self._offset = len(node.buffer)
        start = self._position(node)
        payload = memoryview(data).cast("B").tobytes()
        content = node.buffer
        if start > len(content):
            content.extend(bytes(start - len(content)))
        content[start : start + len(payload)] = payload
        self._offset = start + len(payload)
        node.touch(self._tree.clock.utcnow())
        return len(payload)

    def write_at(self, data: Buffer, offset: int) -> int:
        _ = self.seek(offset, Whence.START)
        return self.write(data)

    def write_string(self, text: str, encoding: str = "utf-8") -> int:
        return self.write(text.encode(encoding))

    def truncate(self, size: int) -> None:
        """Resize the file, discarding bytes or zero-filling. The offset stays."""
        node = self._file_node()
        if size < 0:
            msg = f"negative truncate size {size}"
            raise OutOfRangeError(node.path, msg)
        content = node.buffer
        if size < len(content):
            del content[size:]
        else:
            content.extend(bytes(size - len(content)))
        node.touch(self._tree.clock.utcnow())

    # --- Positioning ---

    def seek(self, offset: int, whence: int = Whence.START) -> int:
        """Move the cursor. Offsets are not clamped."""
        node = self._bound()
        if whence == Whence.START:
            self._offset = offset
        elif whence == Whence.CURRENT:
            self._offset += offset
        elif whence == Whence.END:
            self._offset = node.size + offset
        else:
            raise InvalidArgumentError(node.path, f"invalid whence value {whence}")
        return self._offset

    def tell(self) -> int:
        _ = self._bound()
        return self._offset

    # --- Directories ---

    def readdir(self, n: int = -1) -> list[FileInfo]:
        """Return up to ``n`` entries not yet returned by this handle.

        ``n <= 0`` returns every remaining entry. With ``n > 0`` a call that
        finds nothing left raises :class:`~fauxfile.errors.EndOfFileError`.
        Entries removed after the listing started are skipped.
        """
        node = self._bound()
        if not node.is_dir:
            raise NotDirectoryError(node.path)
        if self._dir_cursor is None:
            self._dir_cursor = list(node.children)
        entries: list[FileInfo] = []
        while self._dir_position < len(self._dir_cursor) and (
            n <= 0 or len(entries) < n
        ):
            child = node.child(self._dir_cursor[self._dir_position])
            self._dir_position += 1
            if child is not None:
                entries.append(child.info())
        if n > 0 and not entries:
            raise EndOfFileError(node.path)
        return entries

    def readdirnames(self, n: int = -1) -> list[str]:
        return [entry.name for entry in self.readdir(n)]

    # --- Metadata ---

    def stat(self) -> FileInfo:
        return self._bound().info()

    def chmod(self, mode: int) -> None:
        node = self._bound()
        node.mode = with_permissions(node.mode, mode)

    def sync(self) -> None:
        """No-op: the buffer is the file."""
        _ = self._bound()

    def chdir(self) -> None:
        """Make this directory, or the directory holding this file, the cwd."""
        node = self._bound()
        target = node if node.is_dir else node.parent
        if target is None or not self._tree.contains(target):
            raise NotFoundError(node.path)
        self._tree.set_cwd(target)

    # --- Lifecycle ---

    def close(self) -> None:
        """Unbind the handle. Closing twice is harmless."""
        if self._node is not None:
            self._name = self._node.name
        self._node = None
        self._dir_cursor = None

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._node is None else f"offset={self._offset}"
        return f"<MemoryFile {self.name!r} {state}>"
