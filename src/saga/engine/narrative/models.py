"""Scenario content and the condition language that gates it.

Conditions arrive as `"default"`, `{"attribute": ..., "op": ..., "value": ...}`
or `{"trait": ..., "has": ...}`. They are tagged with a `kind` on the way
in so every condition is one of three explicit variants.
"""

from __future__ import annotations

from abc import ABC
from abc import abstractmethod
from typing import Annotated
from typing import Any
from typing import Literal
from typing import TypeAlias

import pydantic
from pydantic import ConfigDict
from pydantic import Field

from .. import models
from .. import utils

ConditionOp: TypeAlias = Literal[">", "<", ">=", "<=", "==", "!="]
DEFAULT = "default"


class BoolExpr(models.BaseModel, ABC):
    model_config = ConfigDict(frozen=True)

    @abstractmethod
    def evaluate(self, character: models.Character) -> bool:
        ...


class DefaultCondition(BoolExpr):
    """Always true. Written as the bare string "default" in content."""

    kind: Literal["default"] = "default"

    def evaluate(self, character: models.Character) -> bool:
        return True

    def __repr__(self) -> str:
        return DEFAULT


class AttributeCondition(BoolExpr):
    """Compares a character attribute. Unknown attributes count as 0."""

    kind: Literal["attribute"] = "attribute"
    attribute: str
    op: ConditionOp
    value: int

    def evaluate(self, character: models.Character) -> bool:
        return models.compare(character.attribute(self.attribute), self.op, self.value)

    def __repr__(self) -> str:
        return f"{self.attribute}{self.op}{self.value}"


class TraitCondition(BoolExpr):
    """Checks for a trait, or for its absence when `has` is False."""

    kind: Literal["trait"] = "trait"
    trait: str
    has: bool = True

    def evaluate(self, character: models.Character) -> bool:
        return character.has_trait(self.trait) == self.has

    def __repr__(self) -> str:
        return self.trait if self.has else f"!{self.trait}"


def tag_condition(raw: Any) -> Any:
    """Tag raw condition data with its variant.

    Anything already tagged, or that isn't recognizable, is passed through
    for the model validator to accept or reject.
    """
    if raw == DEFAULT:
        return {"kind": "default"}
    if isinstance(raw, dict) and "kind" not in raw:
        if "attribute" in raw:
            return {"kind": "attribute", **raw}
        if "trait" in raw:
            return {"kind": "trait", **raw}
    return raw


Condition: TypeAlias = Annotated[
    DefaultCondition | AttributeCondition | TraitCondition,
    Field(discriminator="kind"),
    pydantic.BeforeValidator(tag_condition),
]
Requirement: TypeAlias = Annotated[
    AttributeCondition | TraitCondition,
    Field(discriminator="kind"),
    pydantic.BeforeValidator(tag_condition),
]


class AvailabilityRequirement(models.BaseModel):
    """
    Attributes:
        requires: A single condition the character must meet.
        chance: Probability (0 to 1) that the choice is offered at all.
    """

    requires: Requirement | None = None
    chance: float | None = Field(default=None, ge=0.0, le=1.0)


class Outcome(models.BaseModel):
    condition: Condition
    next: models.Identifier


class Choice(models.BaseModel):
    text: str
    available: AvailabilityRequirement | None = None
    outcomes: list[Outcome] = Field(default_factory=list)


class Scenario(models.BaseModel):
    id: models.Identifier
    content: str = ""
    choices: list[Choice] = Field(default_factory=list)
    is_start: bool = False
    is_ending: bool = False
    ending_title: str | None = None


class ScenarioBundle(pydantic.RootModel[dict[models.Identifier, Scenario]]):
    """All scenarios, keyed by id."""

    def __getitem__(self, scenario_id: models.Identifier) -> Scenario:
        return self.root[scenario_id]

    def __contains__(self, scenario_id: object) -> bool:
        return scenario_id in self.root

    def __len__(self) -> int:
        return len(self.root)

    def items(self):
        return self.root.items()

    def values(self):
        return self.root.values()

    def get(self, scenario_id: models.Identifier) -> Scenario | None:
        return self.root.get(scenario_id)

    def start_scenarios(self) -> list[Scenario]:
        return [s for s in self.root.values() if s.is_start]

    def dump(self, as_json=True) -> str | dict:
        data = {id: s.dump(as_json=False) for id, s in self.root.items()}
        return utils.dump(data, as_json)


class GameState(models.BaseModel):
    """Where a playthrough stands.

    Attributes:
        character: The character being played.
        current_scenario_id: The scenario on screen.
        history: Scenario ids visited before the current one, oldest first.
        available_choices: Indices of the current scenario's choices that
            were offered on this visit. Rolled once on entering the scenario.
    """

    model_config = ConfigDict(frozen=True)

    character: models.Character
    current_scenario_id: models.Identifier
    history: list[models.Identifier] = Field(default_factory=list)
    available_choices: list[int] = Field(default_factory=list)
