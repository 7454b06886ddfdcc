"""Shared fixtures for saga engine tests."""

from __future__ import annotations

import pathlib
import random
from typing import Callable

import pytest

from saga.engine import loader
from saga.engine import models
from saga.engine.narrative.models import ScenarioBundle
from saga.engine.rules.engine import BuilderEngine

CONTENT = pathlib.Path(__file__).parent / "content"
DEMO = CONTENT / "demo"


class FixedRandom(random.Random):
    """Returns queued values from random(), repeating the last one."""

    def __init__(self, *values: float):
        super().__init__(0)
        self.values = list(values)
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        if len(self.values) > 1:
            return self.values.pop(0)
        return self.values[0]


@pytest.fixture(scope="session")
def pack() -> loader.ContentPack:
    pack = loader.load_content(DEMO)
    assert pack.bad_defs == []
    return pack


@pytest.fixture
def engine(pack: loader.ContentPack) -> BuilderEngine:
    return pack.engine


@pytest.fixture
def data(pack: loader.ContentPack) -> models.CharacterCreationData:
    return pack.creation


@pytest.fixture
def appearance(pack: loader.ContentPack) -> models.AppearanceConfig:
    return pack.appearance


@pytest.fixture
def bundle(pack: loader.ContentPack) -> ScenarioBundle:
    return pack.scenarios


@pytest.fixture
def state(engine: BuilderEngine) -> models.CharacterBuilderState:
    return engine.new_state()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def fixed_random() -> type[FixedRandom]:
    return FixedRandom


@pytest.fixture
def build(
    engine: BuilderEngine,
) -> Callable[..., models.CharacterBuilderState]:
    """Build a state from "category:option" picks, applied in order."""

    def _build(*picks: str, name: str = "") -> models.CharacterBuilderState:
        state = engine.new_state(name=name)
        for pick in picks:
            category_id, option_id = pick.split(":")
            state = engine.toggle(state, category_id, option_id)
        return state

    return _build
