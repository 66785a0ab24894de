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

"""Path normalization for slash-separated filesystem paths.

Every path handed to a backend is first turned into an absolute, clean path
with :func:`get_path`. Clean paths:

- start with ``/`` and never end with one (except the root itself),
- contain no empty, ``.`` or ``..`` segments.

``..`` at the root stays at the root, as on POSIX systems.
"""

from __future__ import annotations

from typing import Final

SEPARATOR: Final[str] = "/"
ROOT: Final[str] = "/"


def path_parts(path: str) -> list[str]:
    """Split a path into its meaningful segments, resolving ``.`` and ``..``.

    Examples:
        >>> path_parts("/a//b/./c/../d/")
        ['a', 'b', 'd']
        >>> path_parts("/../x")
        ['x']
    """
    result: list[str] = []
    for segment in path.split(SEPARATOR):
        if not segment or segment == ".":
            continue
        if segment == "..":
            if result:
                _ = result.pop()
            continue
        result.append(segment)
    return result


def clean_path(path: str) -> str:
    """Return the absolute clean form of ``path``.

    Relative input is treated as relative to the root.

    Examples:
        >>> clean_path("/foo//bar/")
        '/foo/bar'
        >>> clean_path("/foo/../..")
        '/'
    """
    return ROOT + SEPARATOR.join(path_parts(path))


def get_path(cwd: str, path: str) -> str:
    """Resolve ``path`` against the working directory ``cwd``.

    Absolute input ignores ``cwd``; an empty path names ``cwd`` itself.

    Examples:
        >>> get_path("/home/test", "src/../docs")
        '/home/test/docs'
        >>> get_path("/home/test", "/etc//hosts")
        '/etc/hosts'
    """
    if path.startswith(SEPARATOR):
        return clean_path(path)
    return clean_path(f"{cwd}{SEPARATOR}{path}")


def join_path(parent: str, name: str) -> str:
    """Join a clean directory path and a single entry name."""
    if parent == ROOT:
        return f"{ROOT}{name}"
    return f"{parent}{SEPARATOR}{name}"


def split_path(path: str) -> tuple[str, str]:
    """Split a clean path into its parent directory and final segment.

    The root splits into ``("/", "")``.
    """
    if path == ROOT:
        return ROOT, ""
    parent, _, name = path.rpartition(SEPARATOR)
    return parent or ROOT, name


def is_subpath(path: str, base: str) -> bool:
    """Return ``True`` when clean ``path`` equals ``base`` or lies beneath it."""
    if base == ROOT:
        return True
    return path == base or path.startswith(f"{base}{SEPARATOR}")


__all__ = [
    "ROOT",
    "SEPARATOR",
    "clean_path",
    "get_path",
    "is_subpath",
    "join_path",
    "path_parts",
    "split_path",
]
