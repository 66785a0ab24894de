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

"""Exception hierarchy for :mod:`fauxfile`.

Every concrete error derives from :class:`FauxfileError` *and* from the
builtin exception a caller would expect from the host operating system, so
code written against ``os`` keeps working when handed a
:class:`~fauxfile.filesystem.MemoryFilesystem`::

    try:
        fs.remove("build")
    except FileNotFoundError:
        pass
    except NotEmptyError:
        fs.remove_all("build")

Path-bearing errors follow the ``OSError`` layout (``errno``, ``strerror``,
``filename``) and expose the offending path as ``path``.
"""

from __future__ import annotations

import errno
import io
import os
from typing import ClassVar


class FauxfileError(Exception):
    """Base class for all fauxfile exceptions.

    Catch this to handle any library-specific failure with a single handler
    while letting unrelated exceptions propagate.
    """


class PathError(FauxfileError, OSError):
    """An ``OSError`` raised for a specific path.

    Subclasses pin the ``errno`` code; the message defaults to the platform
    description of that code.
    """

    code: ClassVar[int] = errno.EIO

    def __init__(self, path: str, detail: str | None = None) -> None:
        super().__init__(self.code, detail or os.strerror(self.code), path)

    @property
    def path(self) -> str:
        """Path the failed operation was applied to."""
        return str(self.filename)


class NotFoundError(PathError, FileNotFoundError):
    """Path resolution failed at some component."""

    code = errno.ENOENT


class AlreadyExistsError(PathError, FileExistsError):
    """A creation target collides with an existing entry."""

    code = errno.EEXIST


class NotDirectoryError(PathError, NotADirectoryError):
    """A directory was required but the path names a file."""

    code = errno.ENOTDIR


class IsDirectoryError(PathError, IsADirectoryError):
    """A file was required but the path names a directory."""

    code = errno.EISDIR


class NotEmptyError(PathError):
    """``remove`` was attempted on a directory that still has children."""

    code = errno.ENOTEMPTY


class InvalidArgumentError(PathError):
    """The request is structurally impossible, e.g. moving a directory into itself."""

    code = errno.EINVAL


class _HandleError(FauxfileError):
    """Mixin storing the path of the handle an error was raised for."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"{message}: {path}")
        self.path = path


class ClosedError(_HandleError, ValueError):
    """A data or metadata operation was attempted on a closed handle."""

    def __init__(self, path: str, message: str = "I/O operation on closed file") -> None:
        super().__init__(path, message)


class OutOfRangeError(_HandleError, ValueError):
    """A size or offset falls outside the range the operation accepts."""


class UnsupportedError(_HandleError, io.UnsupportedOperation):
    """The operation is intentionally not available for this target."""


class EndOfFileError(_HandleError, EOFError):
    """A read found no data left at the current offset."""

    def __init__(self, path: str, message: str = "end of file") -> None:
        super().__init__(path, message)


__all__ = [
    "AlreadyExistsError",
    "ClosedError",
    "EndOfFileError",
    "FauxfileError",
    "InvalidArgumentError",
    "IsDirectoryError",
    "NotDirectoryError",
    "NotEmptyError",
    "NotFoundError",
    "OutOfRangeError",
    "PathError",
    "UnsupportedError",
]
