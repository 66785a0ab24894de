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

"""In-memory filesystem backend.

This module provides an implementation of the ``Filesystem`` protocol that
keeps every directory and file in process memory, suitable for deterministic,
disk-free tests of code written against the host backend.

Example usage::

    from fauxfile.filesystem import MemoryFilesystem

    fs = MemoryFilesystem()
    fs.mkdir_all("/home/test/src")
    fs.chdir("/home/test")
    with fs.create("src/main.py") as f:
        f.write_string("print('hello')")
    assert fs.stat("/home/test/src/main.py").size == 14
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Final

from fauxfile.clock import SYSTEM_CLOCK, WallClock
from fauxfile.errors import (
    AlreadyExistsError,
    InvalidArgumentError,
    IsDirectoryError,
    NotDirectoryError,
    NotEmptyError,
    NotFoundError,
    UnsupportedError,
)
from fauxfile.logging import StructuredLogger, get_logger

from ._handle import MemoryFile
from ._node import Node, NodeKind
from ._path import ROOT, get_path, is_subpath, join_path, path_parts
from ._tree import Tree
from ._types import (
    DEFAULT_DIR_MODE,
    DEFAULT_FILE_MODE,
    FileInfo,
    dir_mode,
    file_mode,
)

__all__ = ["MemoryFilesystem"]

_LOGGER: StructuredLogger = get_logger(__name__, context={"component": "memfs"})

_ACCESS_MASK: Final[int] = os.O_RDONLY | os.O_WRONLY | os.O_RDWR


@dataclass(slots=True)
class MemoryFilesystem:
    """Filesystem whose state lives entirely in a node tree.

    Relative paths resolve against the instance's own working directory,
    which starts at the root. Instances share nothing, so tests can run
    several side by side.

    Attributes:
        clock: Source of modification timestamps.
    """

    clock: WallClock = SYSTEM_CLOCK
    _tree: Tree = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._tree = Tree(self.clock)

    @property
    def root(self) -> str:
        """Path of the root directory."""
        return ROOT

    def _abspath(self, path: str) -> str:
        return get_path(self._tree.cwd.path, path)

    def _resolve(self, path: str) -> tuple[str, Node]:
        absolute = self._abspath(path)
        return absolute, self._tree.resolve(absolute)

    # --- Navigation ---

    def getwd(self) -> str:
        """Absolute path of the working directory."""
        return self._tree.cwd.path

    def chdir(self, path: str) -> None:
        """Change the working directory.

        Raises:
            NotFoundError: Path does not exist.
            NotDirectoryError: Path is a file.
        """
        absolute, node = self._resolve(path)
        if not node.is_dir:
            raise NotDirectoryError(absolute)
        self._tree.set_cwd(node)

    # --- Inspection ---

    def stat(self, path: str) -> FileInfo:
        _, node = self._resolve(path)
        return node.info()

    def exists(self, path: str) -> bool:
        try:
            _ = self._resolve(path)
        except NotFoundError:
            return False
        return True

    # --- Directories ---

    def mkdir(self, path: str, mode: int = DEFAULT_DIR_MODE) -> None:
        """Create one directory whose parent already exists.

        Raises:
            NotFoundError: Parent directory does not exist.
            NotDirectoryError: Parent path is a file.
            AlreadyExistsError: An entry with that name exists.
        """
        absolute = self._abspath(path)
        parent, name = self._tree.resolve_parent(absolute)
        if not name or parent.child(name) is not None:
            raise AlreadyExistsError(absolute)
        self._tree.attach(
            parent, self._tree.new_node(name, NodeKind.DIRECTORY, dir_mode(mode))
        )
        _LOGGER.debug(
            "Created directory.",
            event="memfs.mkdir",
            context={"path": absolute, "mode": oct(mode)},
        )

    def mkdir_all(self, path: str, mode: int = DEFAULT_DIR_MODE) -> None:
        """Create a directory and every missing ancestor. Idempotent.

        Raises:
            AlreadyExistsError: Some prefix of the path is a file.
        """
        current = ROOT
        for part in path_parts(self._abspath(path)):
            current = join_path(current, part)
            try:
                self.mkdir(current, mode)
            except AlreadyExistsError:
                if not self._tree.resolve(current).is_dir:
                    raise

    # --- Removal ---

    def _removable(self, path: str) -> tuple[str, Node]:
        absolute, node = self._resolve(path)
        if node is self._tree.root:
            raise UnsupportedError(absolute, "cannot remove the root directory")
        return absolute, node

    def remove(self, path: str) -> None:
        """Remove a file or an empty directory.

        Raises:
            NotFoundError: Path does not exist.
            NotEmptyError: Path is a directory with children.
        """
        absolute, node = self._removable(path)
        if node.children:
            raise NotEmptyError(absolute)
        self._tree.detach(node)
        _LOGGER.debug("Removed entry.", event="memfs.remove", context={"path": absolute})

    def remove_all(self, path: str) -> None:
        """Remove an entry together with everything beneath it.

        Raises:
            NotFoundError: Path does not exist.
        """
        absolute, node = self._removable(path)
        self._tree.detach(node)
        _LOGGER.debug(
            "Removed subtree.", event="memfs.remove_all", context={"path": absolute}
        )

    def rename(self, old: str, new: str) -> None:
        """Move an entry, replacing a compatible entry at the destination.

        Raises:
            NotFoundError: Source or destination parent does not exist.
            InvalidArgumentError: Source is the root, destination is the root,
                or a directory would move inside itself.
            IsDirectoryError: A file would replace a directory.
            NotDirectoryError: A directory would replace a file.
            NotEmptyError: A directory would replace a non-empty directory.
        """
        old_path, node = self._resolve(old)
        new_path = self._abspath(new)
        if node is self._tree.root:
            raise InvalidArgumentError(old_path, "cannot move the root directory")
        parent, name = self._tree.resolve_parent(new_path)
        if not name:
            raise InvalidArgumentError(new_path, "cannot replace the root directory")
        if old_path == new_path:
            return
        if node.is_dir and is_subpath(new_path, old_path):
            raise InvalidArgumentError(
                new_path, "cannot move a directory inside itself"
            )
        target = parent.child(name)
        if target is not None:
            if target.is_dir and not node.is_dir:
                raise IsDirectoryError(new_path)
            if node.is_dir and not target.is_dir:
                raise NotDirectoryError(new_path)
            if target.children:
                raise NotEmptyError(new_path)
            self._tree.detach(target)
        self._tree.move(node, parent, name)
        _LOGGER.debug(
            "Renamed entry.",
            event="memfs.rename",
            context={"old": old_path, "new": new_path},
        )

    # --- Files ---

    def _new_file(self, parent: Node, name: str, mode: int) -> Node:
        node = self._tree.new_node(name, NodeKind.FILE, file_mode(mode))
        self._tree.attach(parent, node)
        return node

    def _truncate(self, node: Node) -> None:
        node.buffer.clear()
        node.touch(self.clock.utcnow())

    def create(self, path: str) -> MemoryFile:
        """Create or truncate a file and open it at offset 0.

        Raises:
            NotFoundError: Parent directory does not exist.
            NotDirectoryError: Parent path is a file.
            AlreadyExistsError: Path is a directory.
        """
        absolute = self._abspath(path)
        parent, name = self._tree.resolve_parent(absolute)
        node = parent.child(name) if name else self._tree.root
        if node is None:
            node = self._new_file(parent, name, DEFAULT_FILE_MODE)
        elif node.is_dir:
            raise AlreadyExistsError(absolute)
        else:
            self._truncate(node)
        _LOGGER.debug("Created file.", event="memfs.create", context={"path": absolute})
        return MemoryFile(self._tree, node)

    def open(self, path: str) -> MemoryFile:
        """Open an existing file or directory at offset 0.

        Raises:
            NotFoundError: Path does not exist.
        """
        _, node = self._resolve(path)
        return MemoryFile(self._tree, node)

    def open_file(
        self, path: str, flags: int, mode: int = DEFAULT_FILE_MODE
    ) -> MemoryFile:
        """Open with ``os.O_*`` flags.

        ``O_CREAT``, ``O_EXCL``, ``O_TRUNC`` and ``O_APPEND`` are honored;
        ``mode`` only applies to a newly created file. Other bits are ignored.

        Raises:
            NotFoundError: Path does not exist and ``O_CREAT`` is not set.
            AlreadyExistsError: ``O_CREAT | O_EXCL`` and the path exists.
            IsDirectoryError: A directory was opened for writing.
        """
        absolute = self._abspath(path)
        try:
            node = self._tree.resolve(absolute)
        except NotFoundError:
            if not flags & os.O_CREAT:
                raise
            parent, name = self._tree.resolve_parent(absolute)
            node = self._new_file(parent, name, mode)
            _LOGGER.debug(
                "Created file.",
                event="memfs.open_file",
                context={"path": absolute, "mode": oct(mode)},
            )
        else:
            if flags & os.O_CREAT and flags & os.O_EXCL:
                raise AlreadyExistsError(absolute)
            if node.is_dir and flags & _ACCESS_MASK != os.O_RDONLY:
                raise IsDirectoryError(absolute)
            if flags & os.O_TRUNC and not node.is_dir:
                self._truncate(node)
        return MemoryFile(self._tree, node, append=bool(flags & os.O_APPEND))
