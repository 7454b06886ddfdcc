"""Playing a scenario bundle with a finished character.

Choice availability is rolled once when a scenario is entered and stays
fixed for that visit. Coming back to the same scenario later rolls again.
"""

from __future__ import annotations

import logging
import random

from .. import models
from ..errors import ScenarioNotFoundError
from .conditions import is_choice_available
from .conditions import resolve_outcome
from .models import Choice
from .models import GameState
from .models import Scenario
from .models import ScenarioBundle

logger = logging.getLogger(__name__)


def find_start(bundle: ScenarioBundle) -> Scenario:
    """The scenario marked isStart.

    Raises:
        ValueError: No scenario is marked as the start.
    """
    starts = bundle.start_scenarios()
    if not starts:
        raise ValueError("No scenario is marked with isStart")
    if len(starts) > 1:
        logger.warning(
            "Multiple start scenarios (%s), using %s",
            ", ".join(s.id for s in starts),
            starts[0].id,
        )
    return starts[0]


def get_scenario(bundle: ScenarioBundle, scenario_id: models.Identifier) -> Scenario:
    if scenario := bundle.get(scenario_id):
        return scenario
    raise ScenarioNotFoundError(scenario_id)


def roll_choices(
    scenario: Scenario, character: models.Character, rng: random.Random
) -> list[int]:
    """Indices of the choices offered on this visit, in order."""
    return [
        index
        for index, choice in enumerate(scenario.choices)
        if is_choice_available(choice, character, rng)
    ]


def start_game(
    bundle: ScenarioBundle, character: models.Character, rng: random.Random
) -> GameState:
    scenario = find_start(bundle)
    return GameState(
        character=character,
        current_scenario_id=scenario.id,
        available_choices=roll_choices(scenario, character, rng),
    )


def current_scenario(state: GameState, bundle: ScenarioBundle) -> Scenario:
    return get_scenario(bundle, state.current_scenario_id)


def available_choices(state: GameState, bundle: ScenarioBundle) -> list[Choice]:
    """The choices offered on the current visit."""
    scenario = current_scenario(state, bundle)
    return [scenario.choices[i] for i in state.available_choices]


def is_ending(state: GameState, bundle: ScenarioBundle) -> bool:
    return current_scenario(state, bundle).is_ending


def choose(
    state: GameState, bundle: ScenarioBundle, index: int, rng: random.Random
) -> GameState:
    """Take the choice at `index` of the current scenario.

    Raises:
        ValueError: The choice wasn't offered on this visit.
        ScenarioNotFoundError: The outcome points at a missing scenario.
    """
    if index not in state.available_choices:
        raise ValueError(
            f"Choice {index} is not available in scenario {state.current_scenario_id}"
        )
    choice = current_scenario(state, bundle).choices[index]
    next_id = resolve_outcome(choice.outcomes, state.character)
    if next_id is None:
        logger.warning(
            "No outcome of choice %r in scenario %s matches character %s",
            choice.text,
            state.current_scenario_id,
            state.character.name,
        )
        return state
    return enter(state, bundle, next_id, rng)


def enter(
    state: GameState,
    bundle: ScenarioBundle,
    scenario_id: models.Identifier,
    rng: random.Random,
) -> GameState:
    scenario = get_scenario(bundle, scenario_id)
    return state.model_copy(
        update={
            "current_scenario_id": scenario.id,
            "history": state.history + [state.current_scenario_id],
            "available_choices": roll_choices(scenario, state.character, rng),
        }
    )
