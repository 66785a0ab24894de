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

"""Host filesystem backend.

Forwards every operation to the operating system through :mod:`os` and
:mod:`shutil`. The only state kept here is the working directory: relative
paths resolve against the instance's own cwd rather than the process-wide
one, so instances never interfere with each other or with the caller.

``OSError`` values raised by the OS are translated by errno into the
:mod:`fauxfile.errors` classes, so both backends raise identical types.

Example usage::

    from fauxfile.filesystem import HostFilesystem

    fs = HostFilesystem(_cwd="/tmp/workspace")
    fs.mkdir_all("build/out")
    with fs.create("build/out/report.txt") as f:
        f.write_string("ok")
"""

from __future__ import annotations

import errno
import os
import shutil
import stat
from collections.abc import Buffer, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Final, Self

from fauxfile.errors import (
    AlreadyExistsError,
    ClosedError,
    EndOfFileError,
    InvalidArgumentError,
    IsDirectoryError,
    NotDirectoryError,
    NotEmptyError,
    NotFoundError,
    OutOfRangeError,
    PathError,
    UnsupportedError,
)
from fauxfile.logging import StructuredLogger, get_logger

from ._path import ROOT, clean_path, get_path, split_path
from ._types import (
    DEFAULT_DIR_MODE,
    DEFAULT_FILE_MODE,
    PERMISSION_MASK,
    FileInfo,
    Whence,
)

__all__ = ["HostFile", "HostFilesystem"]

_LOGGER: StructuredLogger = get_logger(__name__, context={"component": "hostfs"})

_CHUNK_SIZE: Final[int] = 65_536

_ERRNO_ERRORS: Final[Mapping[int, type[PathError]]] = {
    errno.ENOENT: NotFoundError,
    errno.EEXIST: AlreadyExistsError,
    errno.ENOTDIR: NotDirectoryError,
    errno.EISDIR: IsDirectoryError,
    errno.ENOTEMPTY: NotEmptyError,
    errno.EINVAL: InvalidArgumentError,
}


@contextmanager
def _translated(path: str) -> Iterator[None]:
    """Re-raise OS errors with a known errno as fauxfile errors for ``path``."""
    try:
        yield
    except PathError:
        raise
    except OSError as err:
        error_type = _ERRNO_ERRORS.get(err.errno or 0)
        if error_type is None:
            raise
        raise error_type(path) from err


def _basename(path: str) -> str:
    return split_path(path)[1] or ROOT


@dataclass(slots=True)
class HostFilesystem:
    """Filesystem that forwards to the host operating system.

    Attributes:
        _cwd: Working directory used for relative paths. Defaults to the
            process working directory at construction time.
    """

    _cwd: str = field(default_factory=os.getcwd)

    def __post_init__(self) -> None:
        self._cwd = clean_path(os.path.abspath(self._cwd))

    @property
    def root(self) -> str:
        return ROOT

    def _abspath(self, path: str) -> str:
        return get_path(self._cwd, path)

    # --- Navigation ---

    def getwd(self) -> str:
        return self._cwd

    def chdir(self, path: str) -> None:
        absolute = self._abspath(path)
        with _translated(absolute):
            result = os.stat(absolute)
        if not stat.S_ISDIR(result.st_mode):
            raise NotDirectoryError(absolute)
        self._cwd = absolute

    # --- Inspection ---

    def stat(self, path: str) -> FileInfo:
        absolute = self._abspath(path)
        with _translated(absolute):
            return FileInfo.from_stat_result(_basename(absolute), os.stat(absolute))

    def exists(self, path: str) -> bool:
        return os.path.exists(self._abspath(path))

    # --- Directories ---

    def mkdir(self, path: str, mode: int = DEFAULT_DIR_MODE) -> None:
        absolute = self._abspath(path)
        with _translated(absolute):
            os.mkdir(absolute, mode)
        _LOGGER.debug(
            "Created directory.",
            event="hostfs.mkdir",
            context={"path": absolute, "mode": oct(mode)},
        )

    def mkdir_all(self, path: str, mode: int = DEFAULT_DIR_MODE) -> None:
        absolute = self._abspath(path)
        with _translated(absolute):
            os.makedirs(absolute, mode, exist_ok=True)

    # --- Removal ---

    def _removable(self, path: str) -> tuple[str, os.stat_result]:
        absolute = self._abspath(path)
        if absolute == ROOT:
            raise UnsupportedError(absolute, "cannot remove the root directory")
        with _translated(absolute):
            return absolute, os.lstat(absolute)

    def remove(self, path: str) -> None:
        absolute, result = self._removable(path)
        with _translated(absolute):
            if stat.S_ISDIR(result.st_mode):
                os.rmdir(absolute)
            else:
                os.remove(absolute)
        _LOGGER.debug("Removed entry.", event="hostfs.remove", context={"path": absolute})

    def remove_all(self, path: str) -> None:
        absolute, result = self._removable(path)
        with _translated(absolute):
            if stat.S_ISDIR(result.st_mode):
                shutil.rmtree(absolute)
            else:
                os.remove(absolute)
        _LOGGER.debug(
            "Removed subtree.", event="hostfs.remove_all", context={"path": absolute}
        )

    def rename(self, old: str, new: str) -> None:
        old_path = self._abspath(old)
        new_path = self._abspath(new)
        with _translated(old_path):
            os.rename(old_path, new_path)
        _LOGGER.debug(
            "Renamed entry.",
            event="hostfs.rename",
            context={"old": old_path, "new": new_path},
        )

    # --- Files ---

    def _open(self, absolute: str, flags: int, mode: int) -> HostFile:
        with _translated(absolute):
            fd = os.open(absolute, flags, mode)
        return HostFile(self, fd, absolute)

    def create(self, path: str) -> HostFile:
        absolute = self._abspath(path)
        try:
            return self._open(
                absolute, os.O_RDWR | os.O_CREAT | os.O_TRUNC, DEFAULT_FILE_MODE
            )
        except IsDirectoryError as err:
            raise AlreadyExistsError(absolute) from err

    def open(self, path: str) -> HostFile:
        return self._open(self._abspath(path), os.O_RDONLY, 0)

    def open_file(
        self, path: str, flags: int, mode: int = DEFAULT_FILE_MODE
    ) -> HostFile:
        return self._open(self._abspath(path), flags, mode)


class HostFile:
    """Open host file descriptor exposing the ``File`` protocol."""

    __slots__ = ("_dir_entries", "_dir_position", "_fd", "_fs", "_path")

    def __init__(self, fs: HostFilesystem, fd: int, path: str) -> None:
        self._fs = fs
        self._fd: int | None = fd
        self._path = path
        self._dir_entries: list[str] | None = None
        self._dir_position = 0

    @property
    def name(self) -> str:
        return _basename(self._path)

    @property
    def closed(self) -> bool:
        return self._fd is None

    def _checked(self) -> int:
        if self._fd is None:
            raise ClosedError(self.name)
        return self._fd

    # --- Reading ---

    def read(self, size: int = -1) -> bytes:
        fd = self._checked()
        if size == 0:
            return b""
        with _translated(self._path):
            if size > 0:
                data = os.read(fd, size)
            else:
                chunks: list[bytes] = []
                while chunk := os.read(fd, _CHUNK_SIZE):
                    chunks.append(chunk)
                data = b"".join(chunks)
        if not data:
            raise EndOfFileError(self._path)
        return data

    def readinto(self, buffer: Buffer) -> int:
        fd = self._checked()
        view = memoryview(buffer).cast("B")
        if not len(view):
            return 0
        with _translated(self._path):
            count = os.readv(fd, [view])
        if not count:
            raise EndOfFileError(self._path)
        return count

    def read_at(self, size: int, offset: int) -> bytes:
        _ = self.seek(offset, Whence.START)
        return self.read(size)

    def readinto_at(self, buffer: Buffer, offset: int) -> int:
        _ = self.seek(offset, Whence.START)
        return self.readinto(buffer)

    # --- Writing ---

    def write(self, data: Buffer) -> int:
        fd = self._checked()
        view = memoryview(data).cast("B")
        written = 0
        with _translated(self._path):
            while written < len(view):
                written += os.write(fd, view[written:])
        return written

    def write_at(self, data: Buffer, offset: int) -> int:
        _ = self.seek(offset, Whence.START)
        return self.write(data)

    def write_string(self, text: str, encoding: str = "utf-8") -> int:
        return self.write(text.encode(encoding))

    def truncate(self, size: int) -> None:
        fd = self._checked()
        if size < 0:
            raise OutOfRangeError(self._path, f"negative truncate size {size}")
        with _translated(self._path):
            os.ftruncate(fd, size)

    # --- Positioning ---

    def seek(self, offset: int, whence: int = Whence.START) -> int:
        fd = self._checked()
        with _translated(self._path):
            return os.lseek(fd, offset, whence)

    def tell(self) -> int:
        return self.seek(0, Whence.CURRENT)

    # --- Directories ---

    def readdir(self, n: int = -1) -> list[FileInfo]:
        fd = self._checked()
        with _translated(self._path):
            if not stat.S_ISDIR(os.fstat(fd).st_mode):
                raise NotDirectoryError(self._path)
            if self._dir_entries is None:
                self._dir_entries = os.listdir(fd)
            entries: list[FileInfo] = []
            while self._dir_position < len(self._dir_entries) and (
                n <= 0 or len(entries) < n
            ):
                name = self._dir_entries[self._dir_position]
                self._dir_position += 1
                try:
                    result = os.stat(name, dir_fd=fd, follow_symlinks=False)
                except FileNotFoundError:
                    continue  # removed since the listing was taken
                entries.append(FileInfo.from_stat_result(name, result))
        if n > 0 and not entries:
            raise EndOfFileError(self._path)
        return entries

    def readdirnames(self, n: int = -1) -> list[str]:
        return [entry.name for entry in self.readdir(n)]

    # --- Metadata ---

    def stat(self) -> FileInfo:
        fd = self._checked()
        with _translated(self._path):
            return FileInfo.from_stat_result(self.name, os.fstat(fd))

    def chmod(self, mode: int) -> None:
        fd = self._checked()
        with _translated(self._path):
            os.fchmod(fd, mode & PERMISSION_MASK)

    def sync(self) -> None:
        fd = self._checked()
        with _translated(self._path):
            os.fsync(fd)

    def chdir(self) -> None:
        info = self.stat()
        self._fs.chdir(self._path if info.is_dir else split_path(self._path)[0])

    # --- Lifecycle ---

    def close(self) -> None:
        if self._fd is not None:
            fd, self._fd = self._fd, None
            os.close(fd)

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
        state = "closed" if self._fd is None else f"fd={self._fd}"
        return f"<HostFile {self.name!r} {state}>"
