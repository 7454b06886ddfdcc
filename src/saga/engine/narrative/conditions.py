from __future__ import annotations

import logging
import random
from typing import assert_never

from .. import models
from .models import AttributeCondition
from .models import Choice
from .models import Condition
from .models import DefaultCondition
from .models import Outcome
from .models import TraitCondition

logger = logging.getLogger(__name__)


def evaluate_condition(condition: Condition, character: models.Character) -> bool:
    match condition:
        case DefaultCondition():
            return True
        case AttributeCondition() | TraitCondition():
            return condition.evaluate(character)
        case _:
            assert_never(condition)


def is_choice_available(
    choice: Choice, character: models.Character, rng: random.Random
) -> bool:
    """Whether a choice is offered to the character.

    The chance roll comes first and draws exactly one number from `rng`
    per call; the requirement is only checked if the roll passes.
    """
    if choice.available is None:
        return True
    available = choice.available
    if available.chance is not None:
        roll = rng.random()
        if roll > available.chance:
            logger.debug(
                "Choice %r failed chance roll (%.3f > %.3f)",
                choice.text,
                roll,
                available.chance,
            )
            return False
    if available.requires is not None:
        if not evaluate_condition(available.requires, character):
            return False
    return True


def get_available_choices(
    choices: list[Choice], character: models.Character, rng: random.Random
) -> list[Choice]:
    return [c for c in choices if is_choice_available(c, character, rng)]


def resolve_outcome(
    outcomes: list[Outcome], character: models.Character
) -> models.Identifier | None:
    """The destination of the first outcome whose condition holds.

    Returns None if nothing matches, which well-formed content avoids by
    ending each outcome list with a "default" outcome.
    """
    for outcome in outcomes:
        if evaluate_condition(outcome.condition, character):
            return outcome.next
    return None
