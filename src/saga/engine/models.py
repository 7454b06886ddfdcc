from __future__ import annotations

import operator
from typing import Any
from typing import Callable
from typing import Iterable
from typing import Literal
from typing import TypeAlias

import pydantic
from pydantic import ConfigDict
from pydantic import Field
from pydantic import NonNegativeInt
from pydantic import PositiveInt
from pydantic.alias_generators import to_camel

from . import utils

Identifier: TypeAlias = str
AttributeId: TypeAlias = Literal[
    "strength", "agility", "endurance", "cunning", "charisma", "will"
]
Comparison: TypeAlias = Literal[">=", ">", "<=", "<"]
AppearanceKind: TypeAlias = Literal["build", "skin_tone", "hair_color"]
AppearanceStep: TypeAlias = Literal["build", "skin_tone", "hair_color", "portrait_id"]

ATTRIBUTE_IDS: tuple[AttributeId, ...] = (
    "strength",
    "agility",
    "endurance",
    "cunning",
    "charisma",
    "will",
)
APPEARANCE_CATEGORY: Identifier = "appearance"
APPEARANCE_KINDS: tuple[AppearanceKind, ...] = ("build", "skin_tone", "hair_color")
APPEARANCE_STEPS: tuple[AppearanceStep, ...] = APPEARANCE_KINDS + ("portrait_id",)
FALLBACK_NAME_RACE: Identifier = "human"

COMPARATORS: dict[str, Callable[[int, int], bool]] = {
    ">=": operator.ge,
    ">": operator.gt,
    "<=": operator.le,
    "<": operator.lt,
    "==": operator.eq,
    "!=": operator.ne,
}


def default_attributes() -> dict[str, int]:
    """A fresh attribute snapshot with every attribute at zero."""
    return {attr: 0 for attr in ATTRIBUTE_IDS}


def compare(value: int, op: str, target: int) -> bool:
    if comparator := COMPARATORS.get(op):
        return comparator(value, target)
    return False


class BaseModel(pydantic.BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def dump(self, as_json=True) -> str | dict:
        return utils.dump(self, as_json)


class AttributeRequirement(BaseModel):
    id: AttributeId
    op: Comparison
    value: int

    def __repr__(self) -> str:
        return f"{self.id}{self.op}{self.value}"


class SelectionRef(BaseModel):
    category: Identifier
    option_id: Identifier


class OptionRequirement(BaseModel):
    """A prerequisite on a character option.

    Every populated field is an independent check and all of them must hold.
    A requirement with nothing populated is always met.

    Attributes:
        trait: This trait must be present in the current trait set.
        not_trait: This trait must be absent.
        attribute: Compares the current derived attribute total.
        selection: The referenced option must currently be selected.
        not_selection: The referenced option must not be selected.
    """

    trait: str | None = None
    not_trait: str | None = None
    attribute: AttributeRequirement | None = None
    selection: SelectionRef | None = None
    not_selection: SelectionRef | None = None


class CharacterOption(BaseModel):
    """One pickable entry in a category.

    Attributes:
        fate: Signed contribution to the character's fate.
        attributes: Partial attribute deltas.
        traits: Traits granted while the option is selected.
        requires: All of these must hold for the option to be available.
        incompatible_with: Option ids in the same category that block this
            option while selected.
        is_drawback: Display-only marker.
        subcategory: Display-only grouping key.
    """

    id: Identifier
    name: str
    description: str = ""
    fate: int | None = None
    attributes: dict[AttributeId, int] | None = None
    traits: list[str] | None = None
    requires: list[OptionRequirement] | None = None
    incompatible_with: list[Identifier] | None = None
    is_drawback: bool = False
    subcategory: str | None = None
    image: str | None = None


class CategoryConfig(BaseModel):
    id: Identifier
    name: str
    description: str = ""
    min_picks: NonNegativeInt = 0
    max_picks: PositiveInt = 1
    options: list[CharacterOption] = Field(default_factory=list)

    @pydantic.model_validator(mode="after")
    def check_picks(self) -> CategoryConfig:
        if self.max_picks < self.min_picks:
            raise ValueError(
                f"Category {self.id}: maxPicks ({self.max_picks}) is less than minPicks ({self.min_picks})"
            )
        _check_unique(self.id, (o.id for o in self.options))
        return self

    @property
    def is_optional(self) -> bool:
        return self.min_picks == 0

    @property
    def is_single_select(self) -> bool:
        return self.max_picks == 1

    def get_option(self, option_id: Identifier) -> CharacterOption | None:
        for option in self.options:
            if option.id == option_id:
                return option
        return None


class CharacterCreationData(BaseModel):
    categories: list[CategoryConfig] = Field(default_factory=list)

    @pydantic.model_validator(mode="after")
    def check_ids(self) -> CharacterCreationData:
        _check_unique("categories", (c.id for c in self.categories))
        return self

    def get_category(self, category_id: Identifier) -> CategoryConfig | None:
        for category in self.categories:
            if category.id == category_id:
                return category
        return None


class AppearanceOption(BaseModel):
    id: Identifier
    name: str
    description: str = ""
    fate: int | None = None
    attributes: dict[AttributeId, int] | None = None
    traits: list[str] | None = None
    image: str | None = None


class Portrait(BaseModel):
    id: Identifier
    name: str = ""
    image: str | None = None
    build: Identifier
    skin_tone: Identifier
    hair_color: Identifier
    sex: Identifier
    race: Identifier | None = None
    fate: int | None = None
    attributes: dict[AttributeId, int] | None = None
    traits: list[str] | None = None


class AppearanceConfig(BaseModel):
    """Bespoke appearance choices.

    The ids in each of the three option lists form the closed set of legal
    values for that appearance kind.
    """

    builds: list[AppearanceOption] = Field(default_factory=list)
    skin_tones: list[AppearanceOption] = Field(default_factory=list)
    hair_colors: list[AppearanceOption] = Field(default_factory=list)
    portraits: list[Portrait] = Field(default_factory=list)
    portrait_config: dict[str, Any] | None = None

    @pydantic.model_validator(mode="after")
    def check_ids(self) -> AppearanceConfig:
        for kind in APPEARANCE_KINDS:
            _check_unique(kind, (o.id for o in self.options_for(kind)))
        _check_unique("portraits", (p.id for p in self.portraits))
        return self

    def options_for(self, kind: AppearanceKind) -> list[AppearanceOption]:
        match kind:
            case "build":
                return self.builds
            case "skin_tone":
                return self.skin_tones
            case "hair_color":
                return self.hair_colors
        raise ValueError(f"Unknown appearance kind {kind}")

    def get_option(self, kind: AppearanceKind, id: Identifier) -> AppearanceOption | None:
        for option in self.options_for(kind):
            if option.id == id:
                return option
        return None

    def get_portrait(self, portrait_id: Identifier) -> Portrait | None:
        for portrait in self.portraits:
            if portrait.id == portrait_id:
                return portrait
        return None


class AppearanceSelections(BaseModel):
    model_config = ConfigDict(frozen=True)

    build: Identifier | None = None
    skin_tone: Identifier | None = None
    hair_color: Identifier | None = None
    portrait_id: Identifier | None = None

    @property
    def is_complete(self) -> bool:
        """Build, skin tone and hair color chosen. Portrait is optional."""
        return bool(self.build and self.skin_tone and self.hair_color)


class CharacterBuilderState(BaseModel):
    """Builder state, replaced wholesale by every transition.

    The calculated_* fields are derived from the selections and the
    appearance selections and are never set independently.
    """

    model_config = ConfigDict(frozen=True)

    name: str = ""
    selections: dict[Identifier, list[Identifier]] = Field(default_factory=dict)
    appearance_selections: AppearanceSelections = Field(
        default_factory=AppearanceSelections
    )
    calculated_fate: int = 0
    calculated_attributes: dict[str, int] = Field(default_factory=default_attributes)
    calculated_traits: list[str] = Field(default_factory=list)

    def selected(self, category_id: Identifier) -> list[Identifier]:
        return self.selections.get(category_id, [])

    def is_selected(self, option_id: Identifier, category_id: Identifier) -> bool:
        return option_id in self.selected(category_id)

    def attribute(self, attribute_id: str) -> int:
        return self.calculated_attributes.get(attribute_id, 0)


class Character(BaseModel):
    """A finished character. Read-only."""

    model_config = ConfigDict(frozen=True)

    name: str
    fate: int = 0
    attributes: dict[str, int] = Field(default_factory=default_attributes)
    traits: list[str] = Field(default_factory=list)
    selections: dict[Identifier, list[Identifier]] = Field(default_factory=dict)

    def has_trait(self, trait: str) -> bool:
        return trait in self.traits

    def attribute(self, attribute_id: str) -> int:
        return self.attributes.get(attribute_id, 0)


class BadDefinition(BaseModel):
    """Represents a content file that could not be parsed.

    Attributes:
        path: The path of the offending file or folder.
        data: Data as parsed from the json/yaml/toml file, if it got that far.
        exception_type: Exception from the model parser, or a short label.
        exception_message: What went wrong.
    """

    path: str
    data: Any = None
    exception_type: str
    exception_message: str


class NamesConfig(BaseModel):
    """Name suggestions for the name step.

    Attributes:
        names: Name lists keyed by sex id, then race id. Races without a
            list of their own use the "human" list.
        display_count: How many names to suggest at a time.
        allow_custom: Whether the player may type a name of their own.
    """

    names: dict[Identifier, dict[Identifier, list[str]]] = Field(default_factory=dict)
    display_count: PositiveInt = 6
    allow_custom: bool = True

    def names_for(self, sex: Identifier | None, race: Identifier | None) -> list[str]:
        by_race = self.names.get(sex or "", {})
        return by_race.get(race or "") or by_race.get(FALLBACK_NAME_RACE, [])


class ContentManifest(BaseModel):
    """The `content.(toml|json|ya?ml)` file at the root of a content directory.

    Attributes:
        id: Content identifier, stamped on exported builder state.
        version: Content version. State exported by a newer version
            can't be loaded by an older one.
        character_creation: Path (relative to the manifest) to the
            category data. The suffix may be omitted.
        appearance: Path to the appearance configuration.
        scenarios: Path to a scenario bundle file or a directory of
            scenario folders.
        names: Path to the name suggestions, if the content has any.
    """

    id: Identifier
    name: str
    version: str = "0.0a"
    character_creation: str = "character_creation"
    appearance: str = "appearance"
    scenarios: str = "scenarios"
    names: str | None = None


def _check_unique(scope: str, ids: Iterable[Identifier]) -> None:
    seen: set[Identifier] = set()
    for id in ids:
        if id in seen:
            raise ValueError(f"Non-unique id {id} in {scope}")
        seen.add(id)
