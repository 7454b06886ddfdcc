"""Builder state transitions.

Every function here returns a new state and leaves its inputs alone.
Category toggles trigger a full recompute of the derived values;
appearance changes patch them incrementally.
"""

from __future__ import annotations

import logging
import random

from .. import aggregator
from .. import models
from ..errors import AppearanceOptionNotFoundError
from ..errors import PortraitNotFoundError

logger = logging.getLogger(__name__)

SEX_CATEGORY = "sex"
RACE_CATEGORY = "race"


def create_initial_state(
    data: models.CharacterCreationData, name: str = ""
) -> models.CharacterBuilderState:
    return models.CharacterBuilderState(
        name=name,
        selections={category.id: [] for category in data.categories},
    )


def set_name(
    name: str, state: models.CharacterBuilderState
) -> models.CharacterBuilderState:
    return state.model_copy(update={"name": name})


def toggle_option(
    option_id: models.Identifier,
    category: models.CategoryConfig,
    state: models.CharacterBuilderState,
    data: models.CharacterCreationData,
    appearance: models.AppearanceConfig | None = None,
) -> models.CharacterBuilderState:
    """Select or deselect an option.

    Deselecting just removes the id. Selecting in a single-select category
    replaces the current pick; in a multi-select category at capacity the
    call does nothing and returns `state` itself.

    Any change recomputes fate, attributes and traits across all
    categories, since a pick can affect requirements anywhere. Pass
    `appearance` to keep the current appearance contribution in the totals.
    """
    current = list(state.selected(category.id))
    if option_id in current:
        updated = [id for id in current if id != option_id]
    elif category.is_single_select:
        updated = [option_id]
    elif len(current) >= category.max_picks:
        logger.debug(
            "Category %s is full (%d picks), ignoring %s",
            category.id,
            category.max_picks,
            option_id,
        )
        return state
    else:
        updated = current + [option_id]

    new_state = state.model_copy(
        update={"selections": {**state.selections, category.id: updated}}
    )
    return aggregator.recalculate_derived_values(new_state, data, appearance)


def validate_appearance(
    selections: models.AppearanceSelections, config: models.AppearanceConfig
) -> None:
    """Raise if any chosen appearance id isn't declared in the config."""
    for kind in models.APPEARANCE_KINDS:
        if (id := getattr(selections, kind)) and not config.get_option(kind, id):
            raise AppearanceOptionNotFoundError(id, scope=kind)
    if selections.portrait_id and not config.get_portrait(selections.portrait_id):
        raise PortraitNotFoundError(selections.portrait_id)


def update_appearance_selections(
    new_selections: models.AppearanceSelections,
    state: models.CharacterBuilderState,
    appearance: models.AppearanceConfig,
    data: models.CharacterCreationData,
) -> models.CharacterBuilderState:
    """Replace the appearance selections, patching the derived values.

    The old appearance contribution is subtracted and the new one added;
    category selections are left alone, though `data` is read so that traits
    a selected option also grants are kept.

    Raises:
        AppearanceOptionNotFoundError: A build, skin tone or hair color id
            isn't in the config.
        PortraitNotFoundError: The portrait id isn't in the config.
        ValueError: The portrait doesn't match the other appearance choices
            or the character's sex.
    """
    validate_appearance(new_selections, appearance)
    if portrait_id := new_selections.portrait_id:
        sex = first_selection(state, SEX_CATEGORY)
        matches = matching_portraits(appearance, new_selections, sex)
        if portrait_id not in {p.id for p in matches}:
            raise ValueError(
                f"Portrait {portrait_id} does not match the chosen appearance"
            )
    if new_selections == state.appearance_selections:
        return state
    return aggregator.apply_appearance_delta(state, new_selections, appearance, data)


def clear_appearance_from(
    step: models.AppearanceStep, selections: models.AppearanceSelections
) -> models.AppearanceSelections:
    """Clear the given step and every step after it."""
    index = models.APPEARANCE_STEPS.index(step)
    return selections.model_copy(
        update={s: None for s in models.APPEARANCE_STEPS[index:]}
    )


def is_step_accessible(
    step: models.AppearanceStep, selections: models.AppearanceSelections
) -> bool:
    """A step can be chosen once every earlier step has been."""
    index = models.APPEARANCE_STEPS.index(step)
    return all(getattr(selections, s) for s in models.APPEARANCE_STEPS[:index])


def select_appearance(
    step: models.AppearanceStep,
    value: models.Identifier,
    state: models.CharacterBuilderState,
    appearance: models.AppearanceConfig,
    data: models.CharacterCreationData,
) -> models.CharacterBuilderState:
    """Choose a value for one appearance step.

    Later steps are cleared, since a portrait (and the options offered
    after a build or skin tone) depend on the earlier choices.

    Raises:
        ValueError: The step isn't reachable yet. Also raised for a portrait
            that isn't among the matching portraits.
    """
    current = state.appearance_selections
    if not is_step_accessible(step, current):
        raise ValueError(f"Appearance step {step} is not accessible yet")
    selections = clear_appearance_from(step, current).model_copy(
        update={step: value}
    )
    return update_appearance_selections(selections, state, appearance, data)


def first_selection(
    state: models.CharacterBuilderState, category_id: models.Identifier
) -> models.Identifier | None:
    selected = state.selected(category_id)
    return selected[0] if selected else None


def matching_portraits(
    config: models.AppearanceConfig,
    selections: models.AppearanceSelections,
    sex: models.Identifier | None,
    race: models.Identifier | None = None,
) -> list[models.Portrait]:
    """Portraits that fit the chosen build, skin tone, hair color and sex.

    Nothing matches until build, skin tone and hair color are all chosen.
    When `race` is given, portraits tagged with another race are left out.
    """
    if not selections.is_complete:
        return []
    return [
        p
        for p in config.portraits
        if p.sex == sex
        and p.build == selections.build
        and p.skin_tone == selections.skin_tone
        and p.hair_color == selections.hair_color
        and (race is None or p.race is None or p.race == race)
    ]


def suggest_names(
    config: models.NamesConfig,
    state: models.CharacterBuilderState,
    rng: random.Random,
) -> list[str]:
    """A random handful of names for the chosen sex and race.

    Races without names of their own borrow the human list. At most
    `display_count` names are returned, in shuffled order; call again for
    a different handful.
    """
    names = config.names_for(
        first_selection(state, SEX_CATEGORY), first_selection(state, RACE_CATEGORY)
    )
    return rng.sample(names, k=min(config.display_count, len(names)))


def build_character(state: models.CharacterBuilderState) -> models.Character:
    """Freeze the builder state into a Character.

    No validation is done here; check `is_character_complete` first.
    """
    return models.Character(
        name=state.name,
        fate=state.calculated_fate,
        attributes=dict(state.calculated_attributes),
        traits=list(state.calculated_traits),
        selections={k: list(v) for k, v in state.selections.items()},
    )
