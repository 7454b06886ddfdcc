from __future__ import annotations

from saga.engine import aggregator
from saga.engine import models
from saga.engine import utils


def option(id, fate=None, traits=None, **attributes) -> models.CharacterOption:
    return models.CharacterOption(
        id=id, name=id.title(), fate=fate, traits=traits, attributes=attributes or None
    )


def test_contribution_sums():
    total = aggregator.Contribution.of(
        [
            option("a", fate=2, traits=["x"], strength=1),
            option("b", fate=-3, traits=["y", "x"], strength=1, will=-2),
            option("c"),
        ]
    )
    assert total.fate == -1
    assert total.attributes == {"strength": 2, "will": -2}
    assert total.traits == ["x", "y"]


def test_subtract_keeps_shared_traits():
    agg = aggregator.Aggregator(fate=1, attributes={"agility": 2}, traits=["x", "y"])
    contribution = aggregator.Contribution(fate=1, attributes={"agility": 1}, traits=["x", "y"])
    agg.subtract(contribution, keep_traits=["y"])
    assert agg.fate == 0
    assert agg.attributes["agility"] == 1
    assert agg.attributes["strength"] == 0
    assert agg.traits == ["y"]


def test_recalculate_ignores_appearance_unless_given(data, appearance, state):
    state = state.model_copy(
        update={
            "selections": {**state.selections, "race": ["orc"]},
            "appearance_selections": models.AppearanceSelections(build="muscular"),
        }
    )
    assert aggregator.recalculate_derived_values(state, data).attribute("strength") == 2
    with_appearance = aggregator.recalculate_derived_values(state, data, appearance)
    assert with_appearance.attribute("strength") == 4
    assert with_appearance.attribute("agility") == -1


def test_unresolved_appearance_skipped(appearance):
    selections = models.AppearanceSelections(build="gigantic", hair_color="red")
    total = aggregator.appearance_contribution(selections, appearance)
    assert total.fate == 1
    assert total.traits == ["fiery"]


def test_ordered_union():
    assert utils.ordered_union(["a", "b"], None, "c", ["b", "d"]) == ["a", "b", "c", "d"]
