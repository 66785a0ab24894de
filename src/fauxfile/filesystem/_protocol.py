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

"""Filesystem and file-handle protocols.

Code written against `Filesystem` and `File` runs unchanged on either
backend, so production code can use the host and tests can swap in the
in-memory tree.

Implementations:

- `fauxfile.filesystem.MemoryFilesystem`: process-local node tree
- `fauxfile.filesystem.HostFilesystem`: passthrough to the operating system

Paths are plain `str`. Absolute paths start at the root; relative paths
resolve against the backend's own working directory. Both backends raise
the same `fauxfile.errors` classes for the same failures.
"""

from __future__ import annotations

from collections.abc import Buffer
from typing import Protocol, Self, runtime_checkable

from ._types import DEFAULT_DIR_MODE, DEFAULT_FILE_MODE, FileInfo, Whence


@runtime_checkable
class File(Protocol):
    """Open handle with its own byte offset.

    Handles are context managers; leaving the ``with`` block closes them.
    Every operation on a closed handle raises
    :class:`~fauxfile.errors.ClosedError`.

    Example::

        def append_line(fs: Filesystem, path: str, line: str) -> None:
            with fs.open_file(path, os.O_WRONLY | os.O_CREAT | os.O_APPEND) as f:
                f.write_string(line + "\\n")
    """

    @property
    def name(self) -> str:
        """Basename of the opened entry."""
        ...

    @property
    def closed(self) -> bool: ...

    # --- Reading ---

    def read(self, size: int = -1) -> bytes:
        """Read up to ``size`` bytes from the offset; all remaining if negative.

        Raises:
            EndOfFileError: Nothing left to read and ``size`` is not zero.
            IsDirectoryError: The handle is bound to a directory.
        """
        ...

    def readinto(self, buffer: Buffer) -> int:
        """Fill ``buffer`` from the offset and return the byte count.

        Raises:
            EndOfFileError: Nothing left to read and ``buffer`` is not empty.
        """
        ...

    def read_at(self, size: int, offset: int) -> bytes:
        """Seek to ``offset`` then :meth:`read`."""
        ...

    def readinto_at(self, buffer: Buffer, offset: int) -> int:
        """Seek to ``offset`` then :meth:`readinto`."""
        ...

    # --- Writing ---

    def write(self, data: Buffer) -> int:
        """Write at the offset, advance past the data and return its length."""
        ...

    def write_at(self, data: Buffer, offset: int) -> int:
        """Seek to ``offset`` then :meth:`write`."""
        ...

    def write_string(self, text: str, encoding: str = "utf-8") -> int:
        """Encode ``text`` and write it; returns the number of bytes."""
        ...

    def truncate(self, size: int) -> None:
        """Resize to ``size`` bytes without moving the offset.

        Raises:
            OutOfRangeError: ``size`` is negative.
        """
        ...

    # --- Positioning ---

    def seek(self, offset: int, whence: int = Whence.START) -> int:
        """Move the offset relative to ``whence`` and return the new offset."""
        ...

    def tell(self) -> int: ...

    # --- Directories ---

    def readdir(self, n: int = -1) -> list[FileInfo]:
        """Return up to ``n`` entries not yet returned by this handle.

        A short batch carries no end signal; callers reading in batches loop
        until :class:`~fauxfile.errors.EndOfFileError` is raised.

        Raises:
            NotDirectoryError: The handle is bound to a file.
            EndOfFileError: ``n > 0`` and no entries remain.
        """
        ...

    def readdirnames(self, n: int = -1) -> list[str]:
        """Names-only variant of :meth:`readdir`."""
        ...

    # --- Metadata ---

    def stat(self) -> FileInfo: ...

    def chmod(self, mode: int) -> None:
        """Replace the permission bits, keeping the type bits."""
        ...

    def sync(self) -> None: ...

    def chdir(self) -> None:
        """Make this directory, or the one holding this file, the cwd."""
        ...

    # --- Lifecycle ---

    def close(self) -> None:
        """Release the handle. Closing twice is harmless."""
        ...

    def __enter__(self) -> Self: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None: ...


@runtime_checkable
class Filesystem(Protocol):
    """Hierarchical namespace of directories and byte files.

    Example::

        def save_report(fs: Filesystem, body: str) -> None:
            fs.mkdir_all("reports")
            with fs.create("reports/latest.txt") as f:
                f.write_string(body)
    """

    @property
    def root(self) -> str:
        """Path of the root directory, always ``"/"``."""
        ...

    # --- Navigation ---

    def getwd(self) -> str:
        """Absolute, clean path of the working directory."""
        ...

    def chdir(self, path: str) -> None:
        """Change the working directory.

        Raises:
            NotFoundError: Path does not exist.
            NotDirectoryError: Path is a file.
        """
        ...

    # --- Inspection ---

    def stat(self, path: str) -> FileInfo:
        """Metadata for the entry at ``path``.

        Raises:
            NotFoundError: Path does not exist.
        """
        ...

    def exists(self, path: str) -> bool: ...

    # --- Directories ---

    def mkdir(self, path: str, mode: int = DEFAULT_DIR_MODE) -> None:
        """Create one directory whose parent already exists.

        Raises:
            NotFoundError: Parent does not exist.
            AlreadyExistsError: An entry with that name exists.
        """
        ...

    def mkdir_all(self, path: str, mode: int = DEFAULT_DIR_MODE) -> None:
        """Create a directory and every missing ancestor. Idempotent."""
        ...

    # --- Removal ---

    def remove(self, path: str) -> None:
        """Remove a file or an empty directory.

        Raises:
            NotFoundError: Path does not exist.
            NotEmptyError: Directory has children.
        """
        ...

    def remove_all(self, path: str) -> None:
        """Remove an entry and everything beneath it.

        Raises:
            NotFoundError: Path does not exist.
        """
        ...

    def rename(self, old: str, new: str) -> None:
        """Move ``old`` to ``new``, replacing a compatible entry there."""
        ...

    # --- Files ---

    def create(self, path: str) -> File:
        """Create or truncate a file and open it read-write at offset 0.

        Raises:
            NotFoundError: Parent does not exist.
            AlreadyExistsError: Path is a directory.
        """
        ...

    def open(self, path: str) -> File:
        """Open an existing file or directory for reading.

        Only read access is guaranteed; use :meth:`open_file` or
        :meth:`create` for a handle that writes.

        Raises:
            NotFoundError: Path does not exist.
        """
        ...

    def open_file(
        self, path: str, flags: int, mode: int = DEFAULT_FILE_MODE
    ) -> File:
        """Open with ``os.O_*`` flags; ``mode`` applies to created files."""
        ...


__all__ = ["File", "Filesystem"]
