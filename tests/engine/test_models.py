import pydantic
import pytest

from saga.engine import models


def test_option_parses_camel_case():
    option = models.CharacterOption.model_validate(
        {
            "id": "pious",
            "name": "Pious",
            "isDrawback": False,
            "incompatibleWith": ["heretic"],
            "requires": [
                {
                    "notTrait": "cursed",
                    "selection": {"category": "avocation", "optionId": "scholar"},
                }
            ],
        }
    )
    assert option.incompatible_with == ["heretic"]
    req = option.requires[0]
    assert req.not_trait == "cursed"
    assert req.selection.option_id == "scholar"
    assert req.trait is None


def test_max_picks_below_min_picks():
    with pytest.raises(pydantic.ValidationError):
        models.CategoryConfig(id="skills", name="Skills", min_picks=3, max_picks=2)


def test_max_picks_must_be_positive():
    with pytest.raises(pydantic.ValidationError):
        models.CategoryConfig(id="skills", name="Skills", max_picks=0)


def test_duplicate_option_ids():
    with pytest.raises(pydantic.ValidationError):
        models.CategoryConfig(
            id="race",
            name="Race",
            options=[{"id": "orc", "name": "Orc"}, {"id": "orc", "name": "Also Orc"}],
        )


def test_unknown_fields_rejected():
    with pytest.raises(pydantic.ValidationError):
        models.CharacterOption.model_validate(
            {"id": "orc", "name": "Orc", "strength": 2}
        )


def test_unknown_attribute_rejected():
    with pytest.raises(pydantic.ValidationError):
        models.CharacterOption.model_validate(
            {"id": "orc", "name": "Orc", "attributes": {"luck": 2}}
        )


def test_duplicate_appearance_ids():
    with pytest.raises(pydantic.ValidationError):
        models.AppearanceConfig.model_validate(
            {
                "builds": [
                    {"id": "slim", "name": "Slim"},
                    {"id": "slim", "name": "Slimmer"},
                ]
            }
        )


def test_character_is_frozen():
    character = models.Character(name="Aldric")
    with pytest.raises(pydantic.ValidationError):
        character.name = "Brand"


def test_default_attributes_fresh_each_time():
    a = models.default_attributes()
    a["strength"] = 5
    assert models.default_attributes()["strength"] == 0
    assert set(a) == set(models.ATTRIBUTE_IDS)


def test_dump_uses_aliases():
    state = models.CharacterBuilderState(name="Aldric", calculated_fate=2)
    data = state.dump(as_json=False)
    assert data["calculatedFate"] == 2
    assert "calculated_fate" not in data
    assert data["appearanceSelections"] == {}


@pytest.mark.parametrize(
    "value,op,target,expected",
    [
        (3, ">=", 3, True),
        (3, ">", 3, False),
        (2, "<=", 3, True),
        (3, "<", 3, False),
        (3, "==", 3, True),
        (3, "!=", 3, False),
        (3, "~", 3, False),
    ],
)
def test_compare(value, op, target, expected):
    assert models.compare(value, op, target) == expected
