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

from __future__ import annotations

from collections.abc import Iterator

import pytest

import fauxfile.dbc as dbc_module
from fauxfile.clock import FakeClock
from fauxfile.filesystem import MemoryFilesystem


@pytest.fixture(autouse=True)
def reset_dbc_state(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Run every test with contracts enforced, then restore the toggle."""
    monkeypatch.delenv("FAUXFILE_DBC", raising=False)
    dbc_module.enable_dbc()
    yield
    dbc_module._forced_state = None


@pytest.fixture
def clock() -> FakeClock:
    """Return a fake clock pinned to 2024-01-01 UTC."""
    return FakeClock()


@pytest.fixture
def memfs(clock: FakeClock) -> MemoryFilesystem:
    """Return an empty in-memory filesystem driven by the fake clock."""
    return MemoryFilesystem(clock=clock)
