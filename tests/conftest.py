from __future__ import annotations

import pytest

from fakes import FakeProxy, make_cog, make_music, make_radiccio

from mediaremote.config import Settings
from mediaremote.control import MediaDispatcher, default_registry


@pytest.fixture
def proxy() -> FakeProxy:
    return FakeProxy(make_cog(), make_radiccio(), make_music())


@pytest.fixture
def dispatcher(proxy: FakeProxy) -> MediaDispatcher:
    return MediaDispatcher(default_registry(), proxy, Settings(timeout=3.0))
