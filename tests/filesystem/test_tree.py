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

"""Tests for the node tree behind the in-memory filesystem."""

from __future__ import annotations

import logging
import stat

import pytest

from fauxfile.clock import FakeClock
from fauxfile.dbc import dbc_enabled
from fauxfile.errors import NotDirectoryError, NotFoundError
from fauxfile.filesystem._node import Node, NodeKind
from fauxfile.filesystem._tree import Tree
from fauxfile.filesystem._types import DEFAULT_DIR_MODE, dir_mode, file_mode


@pytest.fixture
def tree(clock: FakeClock) -> Tree:
    return Tree(clock)


def _mkdir(tree: Tree, parent: Node, name: str) -> Node:
    node = tree.new_node(name, NodeKind.DIRECTORY, dir_mode(DEFAULT_DIR_MODE))
    tree.attach(parent, node)
    return node


def _mkfile(tree: Tree, parent: Node, name: str, data: bytes = b"") -> Node:
    node = tree.new_node(name, NodeKind.FILE, file_mode(0o644))
    node.buffer.extend(data)
    tree.attach(parent, node)
    return node


class TestRoot:
    """Test the initial tree state."""

    def test_root_is_parentless_directory(self, tree: Tree) -> None:
        assert tree.root.parent is None
        assert tree.root.is_dir
        assert stat.S_IMODE(tree.root.mode) == 0o755

    def test_cwd_starts_at_root(self, tree: Tree) -> None:
        assert tree.cwd is tree.root

    def test_root_path(self, tree: Tree) -> None:
        assert tree.root.path == "/"


class TestResolve:
    """Test resolve and resolve_parent."""

    def test_resolve_root(self, tree: Tree) -> None:
        assert tree.resolve("/") is tree.root

    def test_resolve_nested(self, tree: Tree) -> None:
        a = _mkdir(tree, tree.root, "a")
        b = _mkdir(tree, a, "b")
        assert tree.resolve("/a/b") is b
        assert b.path == "/a/b"

    def test_resolve_missing_raises(self, tree: Tree) -> None:
        with pytest.raises(NotFoundError) as excinfo:
            tree.resolve("/missing/x")
        assert excinfo.value.path == "/missing/x"

    def test_resolve_through_file_raises_not_found(self, tree: Tree) -> None:
        _mkfile(tree, tree.root, "f")
        with pytest.raises(NotFoundError):
            tree.resolve("/f/x")

    def test_resolve_parent_returns_name(self, tree: Tree) -> None:
        a = _mkdir(tree, tree.root, "a")
        assert tree.resolve_parent("/a/new") == (a, "new")

    def test_resolve_parent_of_root(self, tree: Tree) -> None:
        assert tree.resolve_parent("/") == (tree.root, "")

    def test_resolve_parent_file_raises(self, tree: Tree) -> None:
        _mkfile(tree, tree.root, "f")
        with pytest.raises(NotDirectoryError):
            tree.resolve_parent("/f/x")


class TestAttachDetach:
    """Test linking and unlinking nodes."""

    def test_attach_touches_parent(self, tree: Tree, clock: FakeClock) -> None:
        clock.advance(5)
        _ = _mkdir(tree, tree.root, "a")
        assert tree.root.modified == clock.utcnow()

    def test_attach_duplicate_name_violates_contract(self, tree: Tree) -> None:
        _ = _mkdir(tree, tree.root, "a")
        with pytest.raises(AssertionError, match="already exists"):
            _ = _mkdir(tree, tree.root, "a")

    def test_attach_under_file_violates_contract(self, tree: Tree) -> None:
        f = _mkfile(tree, tree.root, "f")
        with pytest.raises(AssertionError, match="parent must be a directory"):
            _ = _mkdir(tree, f, "x")

    def test_attach_invalid_name_violates_contract(self, tree: Tree) -> None:
        with pytest.raises(AssertionError, match="invalid entry name"):
            _ = _mkdir(tree, tree.root, "..")

    def test_contracts_off_skip_checks(self, tree: Tree) -> None:
        _ = _mkdir(tree, tree.root, "a")
        with dbc_enabled(active=False):
            replacement = _mkdir(tree, tree.root, "a")
        assert tree.resolve("/a") is replacement

    def test_detach_unlinks_subtree(self, tree: Tree) -> None:
        a = _mkdir(tree, tree.root, "a")
        b = _mkdir(tree, a, "b")
        tree.detach(a)
        assert a.parent is None
        assert not tree.contains(b)
        with pytest.raises(NotFoundError):
            tree.resolve("/a/b")

    def test_detached_node_keeps_relative_path(self, tree: Tree) -> None:
        a = _mkdir(tree, tree.root, "a")
        b = _mkdir(tree, a, "b")
        tree.detach(a)
        assert b.path == "/b"

    def test_detach_cwd_falls_back_to_parent(
        self, tree: Tree, caplog: pytest.LogCaptureFixture
    ) -> None:
        a = _mkdir(tree, tree.root, "a")
        b = _mkdir(tree, a, "b")
        c = _mkdir(tree, b, "c")
        tree.set_cwd(c)

        with caplog.at_level(logging.WARNING, logger="fauxfile.filesystem._tree"):
            tree.detach(b)

        assert tree.cwd is a
        events = [getattr(record, "event", None) for record in caplog.records]
        assert "memfs.cwd_fallback" in events

    def test_detach_elsewhere_keeps_cwd(self, tree: Tree) -> None:
        a = _mkdir(tree, tree.root, "a")
        b = _mkdir(tree, tree.root, "b")
        tree.set_cwd(a)
        tree.detach(b)
        assert tree.cwd is a


class TestMove:
    """Test relinking nodes."""

    def test_move_renames_and_reparents(self, tree: Tree) -> None:
        a = _mkdir(tree, tree.root, "a")
        b = _mkdir(tree, tree.root, "b")
        f = _mkfile(tree, a, "f", b"x")
        tree.move(f, b, "g")
        assert tree.resolve("/b/g") is f
        assert f.name == "g"
        assert "f" not in a.children

    def test_move_keeps_cwd_inside_moved_subtree(self, tree: Tree) -> None:
        a = _mkdir(tree, tree.root, "a")
        inner = _mkdir(tree, a, "inner")
        tree.set_cwd(inner)
        tree.move(a, tree.root, "z")
        assert tree.cwd is inner
        assert tree.cwd.path == "/z/inner"

    def test_move_into_own_subtree_violates_contract(self, tree: Tree) -> None:
        a = _mkdir(tree, tree.root, "a")
        b = _mkdir(tree, a, "b")
        with pytest.raises(AssertionError):
            tree.move(a, b, "a")


class TestInvariant:
    """Test structural invariant enforcement."""

    def test_corrupted_parent_link_detected(self, tree: Tree) -> None:
        a = _mkdir(tree, tree.root, "a")
        b = _mkdir(tree, a, "b")
        b.parent = tree.root
        with pytest.raises(AssertionError, match="stale parent link"):
            tree.resolve("/")

    def test_directory_with_bytes_detected(self, tree: Tree) -> None:
        a = _mkdir(tree, tree.root, "a")
        a.buffer.extend(b"oops")
        with pytest.raises(AssertionError, match="holds bytes"):
            tree.resolve("/a")

    def test_read_only_helpers_skip_invariant(self, tree: Tree) -> None:
        a = _mkdir(tree, tree.root, "a")
        a.buffer.extend(b"oops")
        node = tree.new_node("n", NodeKind.FILE, file_mode(0o644))
        assert node.parent is None
        assert tree.contains(a)
        with pytest.raises(AssertionError, match="holds bytes"):
            tree.resolve("/")

    def test_set_cwd_to_file_raises(self, tree: Tree) -> None:
        f = _mkfile(tree, tree.root, "f")
        with pytest.raises(NotDirectoryError):
            tree.set_cwd(f)
