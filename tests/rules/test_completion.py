from __future__ import annotations

from saga.engine import models
from saga.engine.rules import completion
from saga.engine.rules.engine import BuilderEngine

SOLDIER = ("sex:male", "race:human", "avocation:soldier", "skills:brawling")


def finish_appearance(engine: BuilderEngine, state):
    state = engine.select_appearance(state, "build", "slim")
    state = engine.select_appearance(state, "skin_tone", "fair")
    return engine.select_appearance(state, "hair_color", "black")


def test_new_state_incomplete(data, state):
    ids = [c.id for c in completion.incomplete_categories(data, state)]
    # Spells are locked without the caster trait; feats need no picks.
    assert ids == ["sex", "race", "appearance", "avocation", "skills"]


def test_locked_category_not_required(engine: BuilderEngine, build):
    state = finish_appearance(engine, build(*SOLDIER, name="Aldric"))
    assert engine.is_locked(state, "spells")
    assert not engine.is_category_complete(state, "spells")
    assert engine.is_complete(state)


def test_unlocked_category_required(engine: BuilderEngine, build):
    picks = ("sex:female", "race:elf", "avocation:scholar", "skills:lore")
    state = finish_appearance(engine, build(*picks, name="Ysolde"))
    assert not engine.is_complete(state)
    state = engine.toggle(state, "spells", "fireball")
    assert engine.is_complete(state)


def test_name_required(engine: BuilderEngine, build):
    state = finish_appearance(engine, build(*SOLDIER))
    assert not engine.is_complete(state)
    assert not engine.is_complete(engine.set_name(state, "   "))
    assert engine.is_complete(engine.set_name(state, "Aldric"))


def test_appearance_required(engine: BuilderEngine, build):
    state = build(*SOLDIER, name="Aldric")
    assert not engine.is_complete(state)
    state = engine.select_appearance(state, "build", "slim")
    assert not engine.is_complete(state)


def test_optional_category(engine: BuilderEngine, state):
    assert engine.category("feats").is_optional
    assert engine.is_category_complete(state, "feats")
    assert not engine.is_category_complete(state, "skills")


def test_all_categories_locked(state):
    data = models.CharacterCreationData(
        categories=[models.CategoryConfig(id="empty", name="Empty", min_picks=1)]
    )
    assert completion.incomplete_categories(data, state) == []
    assert not completion.is_character_complete(data, state)
    named = state.model_copy(update={"name": "Nobody"})
    assert completion.is_character_complete(data, named)
