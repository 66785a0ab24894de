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

"""Tests for the in-memory filesystem backend."""

from __future__ import annotations

import logging
import os
import stat
from datetime import timedelta

import pytest

from fauxfile.clock import FakeClock
from fauxfile.errors import (
    AlreadyExistsError,
    EndOfFileError,
    InvalidArgumentError,
    NotDirectoryError,
    NotFoundError,
    OutOfRangeError,
    UnsupportedError,
)
from fauxfile.filesystem import MemoryFilesystem, Whence
from tests.helpers.filesystem import FilesystemContractSuite


class TestMemoryFilesystemContract(FilesystemContractSuite):
    """Run the shared contract suite against ``MemoryFilesystem``."""

    @pytest.fixture
    def fs(self, memfs: MemoryFilesystem) -> MemoryFilesystem:
        return memfs


class TestInitialState:
    """Test a freshly constructed filesystem."""

    def test_cwd_is_root(self, memfs: MemoryFilesystem) -> None:
        assert memfs.getwd() == "/"

    def test_root_mode(self, memfs: MemoryFilesystem) -> None:
        info = memfs.stat("/")
        assert info.name == "/"
        assert info.mode == stat.S_IFDIR | 0o755
        assert info.sys is None

    def test_instances_are_isolated(self, clock: FakeClock) -> None:
        first = MemoryFilesystem(clock=clock)
        second = MemoryFilesystem(clock=clock)
        first.mkdir("/only-here")
        assert second.exists("/only-here") is False

    def test_default_clock_stamps_root(self) -> None:
        assert MemoryFilesystem().stat("/").mod_time.tzinfo is not None


class TestHelloWorld:
    """End-to-end scenario on a single file."""

    def test_write_close_reopen_read(self, memfs: MemoryFilesystem) -> None:
        with memfs.create("/foo.txt") as f:
            _ = f.write(b"Hello world")

        with memfs.open("/foo.txt") as f:
            assert f.stat().size == 11
            assert f.read() == b"Hello world"


class TestResolution:
    """Test that created entries resolve back to their own path."""

    @pytest.mark.parametrize(
        "path", ["/a", "/a/b", "/a/b/c", "/a/b/c/file.txt", "/a/b/other.bin"]
    )
    def test_created_entries_resolve_to_their_path(
        self, memfs: MemoryFilesystem, path: str
    ) -> None:
        memfs.mkdir_all("/a/b/c")
        with memfs.create("/a/b/c/file.txt"):
            pass
        with memfs.create("/a/b/other.bin"):
            pass
        assert memfs.stat(path).name == path.rsplit("/", 1)[1]
        with memfs.open(path) as handle:
            handle.chdir()
        expected = path if memfs.stat(path).is_dir else path.rsplit("/", 1)[0]
        assert memfs.getwd() == expected

    def test_mode_defaults(self, memfs: MemoryFilesystem) -> None:
        memfs.mkdir("/d")
        with memfs.create("/f"):
            pass
        assert memfs.stat("/d").mode == stat.S_IFDIR | 0o777
        assert memfs.stat("/f").mode == stat.S_IFREG | 0o666

    def test_mkdir_mode_is_stored(self, memfs: MemoryFilesystem) -> None:
        memfs.mkdir("/private", 0o700)
        assert memfs.stat("/private").perm == 0o700

    def test_directory_size_is_zero(self, memfs: MemoryFilesystem) -> None:
        memfs.mkdir_all("/a/b")
        assert memfs.stat("/a").size == 0

    def test_mkdir_root_raises(self, memfs: MemoryFilesystem) -> None:
        with pytest.raises(AlreadyExistsError):
            memfs.mkdir("/")

    def test_mkdir_under_file_raises(self, memfs: MemoryFilesystem) -> None:
        with memfs.create("/f"):
            pass
        with pytest.raises(NotDirectoryError):
            memfs.mkdir("/f/sub")


class TestTimestamps:
    """Test modification-time bookkeeping."""

    def test_mkdir_touches_parent(
        self, memfs: MemoryFilesystem, clock: FakeClock
    ) -> None:
        memfs.mkdir("/a")
        clock.advance(10)
        memfs.mkdir("/a/b")
        assert memfs.stat("/a").mod_time == clock.utcnow()

    def test_write_touches_file(
        self, memfs: MemoryFilesystem, clock: FakeClock
    ) -> None:
        with memfs.create("/f") as f:
            created = f.stat().mod_time
            clock.advance(3)
            _ = f.write(b"x")
            assert f.stat().mod_time - created == timedelta(seconds=3)

    def test_remove_touches_parent(
        self, memfs: MemoryFilesystem, clock: FakeClock
    ) -> None:
        memfs.mkdir_all("/a/b")
        clock.advance(7)
        memfs.remove("/a/b")
        assert memfs.stat("/a").mod_time == clock.utcnow()

    def test_read_does_not_touch(
        self, memfs: MemoryFilesystem, clock: FakeClock
    ) -> None:
        with memfs.create("/f") as f:
            _ = f.write(b"abc")
        before = memfs.stat("/f").mod_time
        clock.advance(1)
        with memfs.open("/f") as f:
            _ = f.read()
        assert memfs.stat("/f").mod_time == before


class TestRemoval:
    """Test remove and remove_all edge cases."""

    def test_remove_after_emptying(self, memfs: MemoryFilesystem) -> None:
        memfs.mkdir_all("/a")
        with memfs.create("/a/child"):
            pass
        memfs.remove("/a/child")
        memfs.remove("/a")
        with pytest.raises(NotFoundError):
            _ = memfs.open("/a")

    def test_remove_all_descendants_unreachable(
        self, memfs: MemoryFilesystem
    ) -> None:
        memfs.mkdir_all("/a/b/c")
        with memfs.create("/a/b/c/f"):
            pass
        memfs.remove_all("/a")
        for path in ("/a", "/a/b", "/a/b/c", "/a/b/c/f"):
            with pytest.raises(NotFoundError):
                _ = memfs.open(path)

    def test_remove_all_root_raises(self, memfs: MemoryFilesystem) -> None:
        memfs.mkdir("/keep")
        with pytest.raises(UnsupportedError):
            memfs.remove_all("/")
        assert memfs.exists("/keep")

    def test_removing_cwd_falls_back_to_parent(
        self, memfs: MemoryFilesystem, caplog: pytest.LogCaptureFixture
    ) -> None:
        memfs.mkdir_all("/a/b/c")
        memfs.chdir("/a/b/c")
        with caplog.at_level(logging.WARNING, logger="fauxfile.filesystem._tree"):
            memfs.remove_all("/a/b")
        assert memfs.getwd() == "/a"
        assert any(
            getattr(record, "event", None) == "memfs.cwd_fallback"
            for record in caplog.records
        )

    def test_removing_cwd_itself(self, memfs: MemoryFilesystem) -> None:
        memfs.mkdir_all("/a/b")
        memfs.chdir("/a/b")
        memfs.remove("/a/b")
        assert memfs.getwd() == "/a"

    def test_removed_directory_handle_cannot_chdir(
        self, memfs: MemoryFilesystem
    ) -> None:
        memfs.mkdir("/gone")
        with memfs.open("/gone") as d:
            memfs.remove("/gone")
            with pytest.raises(NotFoundError):
                d.chdir()
        assert memfs.getwd() == "/"


class TestRename:
    """Test rename edge cases specific to the node tree."""

    def test_rename_keeps_cwd_in_moved_directory(
        self, memfs: MemoryFilesystem
    ) -> None:
        memfs.mkdir_all("/a/inner")
        memfs.chdir("/a/inner")
        memfs.rename("/a", "/z")
        assert memfs.getwd() == "/z/inner"

    def test_rename_to_same_path_is_noop(self, memfs: MemoryFilesystem) -> None:
        with memfs.create("/f") as f:
            _ = f.write(b"x")
        memfs.rename("/f", "/./f")
        assert memfs.stat("/f").size == 1

    def test_rename_root_raises(self, memfs: MemoryFilesystem) -> None:
        with pytest.raises(InvalidArgumentError):
            memfs.rename("/", "/x")

    def test_rename_onto_root_raises(self, memfs: MemoryFilesystem) -> None:
        memfs.mkdir("/a")
        with pytest.raises(InvalidArgumentError):
            memfs.rename("/a", "/")

    def test_rename_open_handle_follows_node(self, memfs: MemoryFilesystem) -> None:
        with memfs.create("/old.txt") as f:
            memfs.rename("/old.txt", "/new.txt")
            _ = f.write(b"moved")
            assert f.name == "new.txt"
        with memfs.open("/new.txt") as f:
            assert f.read() == b"moved"


class TestOpenFile:
    """Test open_file flag handling beyond the shared contract."""

    def test_create_ignores_mode_for_existing(self, memfs: MemoryFilesystem) -> None:
        with memfs.open_file("/f", os.O_RDWR | os.O_CREAT, 0o600):
            pass
        with memfs.open_file("/f", os.O_RDWR | os.O_CREAT, 0o644):
            pass
        assert memfs.stat("/f").perm == 0o600

    def test_truncate_flag_ignored_for_directory(
        self, memfs: MemoryFilesystem
    ) -> None:
        memfs.mkdir("/d")
        with memfs.open_file("/d", os.O_RDONLY | os.O_TRUNC) as d:
            assert d.readdirnames() == []

    def test_create_missing_parent_raises(self, memfs: MemoryFilesystem) -> None:
        with pytest.raises(NotFoundError):
            _ = memfs.open_file("/missing/f", os.O_RDWR | os.O_CREAT)


class TestSeekBehavior:
    """Test unclamped offsets on in-memory handles."""

    def test_seek_end_then_write_extends(self, memfs: MemoryFilesystem) -> None:
        with memfs.create("/f") as f:
            _ = f.write(b"12345")
            assert f.seek(0, Whence.END) == 5
            _ = f.write(b"678")
            assert f.stat().size == 8

    def test_negative_offset_allowed_until_used(
        self, memfs: MemoryFilesystem
    ) -> None:
        with memfs.create("/f") as f:
            _ = f.write(b"abc")
            assert f.seek(-10, Whence.CURRENT) == -7
            with pytest.raises(OutOfRangeError):
                _ = f.read(1)
            with pytest.raises(OutOfRangeError):
                _ = f.write(b"x")

    def test_seek_past_end_then_read_hits_eof(
        self, memfs: MemoryFilesystem
    ) -> None:
        with memfs.create("/f") as f:
            _ = f.write(b"abc")
            _ = f.seek(100)
            with pytest.raises(EndOfFileError):
                _ = f.read(1)
            assert f.stat().size == 3

    def test_invalid_whence_raises(self, memfs: MemoryFilesystem) -> None:
        with memfs.create("/f") as f, pytest.raises(InvalidArgumentError):
            _ = f.seek(0, 7)


class TestLogging:
    """Test mutation events emitted by the facade."""

    def test_mkdir_logs_event(
        self, memfs: MemoryFilesystem, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.DEBUG, logger="fauxfile.filesystem._memory"):
            memfs.mkdir("/a", 0o750)

        records = [
            r for r in caplog.records if getattr(r, "event", "") == "memfs.mkdir"
        ]
        assert len(records) == 1
        assert records[0].context == {
            "component": "memfs",
            "path": "/a",
            "mode": "0o750",
        }
