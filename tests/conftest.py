from __future__ import annotations

import pytest
from fakes import FakeClock

from tunnelward import RemoteTarget


@pytest.fixture
def target() -> RemoteTarget:
    return RemoteTarget("vm-internal", zone="us-east4-b", transport="iap")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
