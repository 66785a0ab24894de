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

"""Filesystem protocols and backends.

This package provides the `Filesystem` and `File` protocols together with two
interchangeable backends: `MemoryFilesystem`, a tree of nodes held in process
memory, and `HostFilesystem`, a passthrough to the operating system.

Example usage::

    from fauxfile.filesystem import Filesystem, MemoryFilesystem

    def word_count(fs: Filesystem, path: str) -> int:
        with fs.open(path) as f:
            return len(f.read().split())

    fs = MemoryFilesystem()
    with fs.create("/notes.txt") as f:
        f.write_string("Hello world")
    assert word_count(fs, "/notes.txt") == 2
"""

from __future__ import annotations

from ._handle import MemoryFile
from ._host import HostFile, HostFilesystem
from ._memory import MemoryFilesystem
from ._path import ROOT, SEPARATOR, clean_path, get_path, path_parts, split_path
from ._protocol import File, Filesystem
from ._types import (
    DEFAULT_DIR_MODE,
    DEFAULT_FILE_MODE,
    PERMISSION_MASK,
    FileInfo,
    Whence,
)

__all__ = [
    "DEFAULT_DIR_MODE",
    "DEFAULT_FILE_MODE",
    "PERMISSION_MASK",
    "ROOT",
    "SEPARATOR",
    "File",
    "FileInfo",
    "Filesystem",
    "HostFile",
    "HostFilesystem",
    "MemoryFile",
    "MemoryFilesystem",
    "Whence",
    "clean_path",
    "get_path",
    "path_parts",
    "split_path",
]
