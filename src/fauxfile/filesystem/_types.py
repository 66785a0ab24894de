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

"""Shared filesystem types: file metadata, seek origins and mode bits.

Modes use the ``st_mode`` layout from :mod:`stat`: the file type bits
(``S_IFDIR`` or ``S_IFREG``) combined with the permission bits. Permission
bits are stored and reported, never enforced.
"""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import IntEnum
from typing import Final

PERMISSION_MASK: Final[int] = 0o7777
DEFAULT_FILE_MODE: Final[int] = 0o666
DEFAULT_DIR_MODE: Final[int] = 0o777
ROOT_MODE: Final[int] = stat.S_IFDIR | 0o755


class Whence(IntEnum):
    """Origin for :meth:`File.seek`, numerically equal to ``os.SEEK_*``."""

    START = os.SEEK_SET
    CURRENT = os.SEEK_CUR
    END = os.SEEK_END


def dir_mode(perm: int) -> int:
    """Combine permission bits with the directory type bit."""
    return stat.S_IFDIR | (perm & PERMISSION_MASK)


def file_mode(perm: int) -> int:
    """Combine permission bits with the regular-file type bit."""
    return stat.S_IFREG | (perm & PERMISSION_MASK)


def with_permissions(mode: int, perm: int) -> int:
    """Replace the permission bits of ``mode``, keeping its type bits."""
    return stat.S_IFMT(mode) | (perm & PERMISSION_MASK)


@dataclass(slots=True, frozen=True)
class FileInfo:
    """Metadata snapshot for a file or directory.

    Returned by ``Filesystem.stat()``, ``File.stat()`` and ``File.readdir()``.
    The snapshot does not follow later changes to the entry.

    Attributes:
        name: Entry basename (``"/"`` for the root).
        size: Content length in bytes; ``0`` for in-memory directories.
        mode: ``st_mode``-style type and permission bits.
        mod_time: Last modification time (timezone-aware UTC).
        sys: Backend-specific payload; ``None`` for the in-memory backend and
            the ``os.stat_result`` for the host backend.

    Example::

        info = fs.stat("notes.txt")
        if not info.is_dir and info.size > 0:
            print(info.name, oct(info.perm))
    """

    name: str
    size: int
    mode: int
    mod_time: datetime
    sys: object | None = None

    @property
    def is_dir(self) -> bool:
        """True if the entry is a directory."""
        return stat.S_ISDIR(self.mode)

    @property
    def perm(self) -> int:
        """Permission bits without the type bits."""
        return stat.S_IMODE(self.mode)

    @classmethod
    def from_stat_result(cls, name: str, result: os.stat_result) -> FileInfo:
        """Build a snapshot from an ``os.stat()`` result."""
        return cls(
            name=name,
            size=result.st_size,
            mode=result.st_mode,
            mod_time=datetime.fromtimestamp(result.st_mtime, tz=UTC),
            sys=result,
        )


__all__ = [
    "DEFAULT_DIR_MODE",
    "DEFAULT_FILE_MODE",
    "PERMISSION_MASK",
    "ROOT_MODE",
    "FileInfo",
    "Whence",
    "dir_mode",
    "file_mode",
    "with_permissions",
]
