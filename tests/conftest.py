from __future__ import annotations

import random

import pytest

from dragon_relay.server.config import Settings
from dragon_relay.server.router import RoomRouter


@pytest.fixture
def settings() -> Settings:
    return Settings(palette=["#FF0000", "#00FF00"])


@pytest.fixture
def router(settings: Settings) -> RoomRouter:
    return RoomRouter(settings, rng=random.Random(1234))
