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

"""In-memory and host-backed filesystems behind one protocol."""

from __future__ import annotations

from .clock import SYSTEM_CLOCK, FakeClock, SystemClock, WallClock
from .errors import (
    AlreadyExistsError,
    ClosedError,
    EndOfFileError,
    FauxfileError,
    InvalidArgumentError,
    IsDirectoryError,
    NotDirectoryError,
    NotEmptyError,
    NotFoundError,
    OutOfRangeError,
    PathError,
    UnsupportedError,
)
from .filesystem import (
    File,
    FileInfo,
    Filesystem,
    HostFilesystem,
    MemoryFilesystem,
    Whence,
)
from .logging import configure_logging, get_logger

__all__ = [
    "SYSTEM_CLOCK",
    "AlreadyExistsError",
    "ClosedError",
    "EndOfFileError",
    "FakeClock",
    "FauxfileError",
    "File",
    "FileInfo",
    "Filesystem",
    "HostFilesystem",
    "InvalidArgumentError",
    "IsDirectoryError",
    "MemoryFilesystem",
    "NotDirectoryError",
    "NotEmptyError",
    "NotFoundError",
    "OutOfRangeError",
    "PathError",
    "SystemClock",
    "UnsupportedError",
    "WallClock",
    "Whence",
    "configure_logging",
    "get_logger",
]
