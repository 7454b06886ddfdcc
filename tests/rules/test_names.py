"""Name suggestions for the chosen sex and race."""

from __future__ import annotations

import random

from saga.engine import models
from saga.engine.rules import builder
from saga.engine.rules.engine import BuilderEngine

MALE_HUMAN = {"Aldric", "Brand", "Corwin", "Doran", "Edmund", "Gareth"}
FEMALE_HUMAN = {"Ysolde", "Mira", "Wenna"}


def test_names_config(engine: BuilderEngine):
    assert engine.names.display_count == 4
    assert engine.names.allow_custom


def test_display_count_cut(engine: BuilderEngine, build, rng):
    names = engine.suggest_names(build("sex:male", "race:human"), rng)
    assert len(names) == 4
    assert len(set(names)) == 4
    assert set(names) <= MALE_HUMAN


def test_race_with_own_names(engine: BuilderEngine, build, rng):
    names = engine.suggest_names(build("sex:male", "race:orc"), rng)
    assert sorted(names) == ["Grom", "Thrak"]


def test_human_fallback(engine: BuilderEngine, build, rng):
    # Female orcs have no list; female elves have an empty one.
    for race in ("orc", "elf"):
        names = engine.suggest_names(build("sex:female", f"race:{race}"), rng)
        assert set(names) == FEMALE_HUMAN

    names = engine.suggest_names(build("sex:male", "race:elf"), rng)
    assert len(names) == 4
    assert set(names) <= MALE_HUMAN


def test_no_sex_chosen(engine: BuilderEngine, build, rng):
    assert engine.suggest_names(build("race:human"), rng) == []


def test_seeded_suggestions(engine: BuilderEngine, build):
    state = build("sex:male", "race:human")
    first = engine.suggest_names(state, random.Random(7))
    assert engine.suggest_names(state, random.Random(7)) == first


def test_unknown_sex_without_fallback(state, rng):
    config = models.NamesConfig(names={"male": {"orc": ["Grom"]}}, display_count=2)
    assert config.names_for("male", "human") == []
    assert config.names_for("female", "orc") == []
    assert builder.suggest_names(config, state, rng) == []
