"""Derived value aggregation.

Fate, attributes and traits are never stored independently of the choices
that produce them. Every selected option, appearance option and portrait
is a *source* with an optional fate delta, a partial attribute delta and a
trait list; the derived values are the sum over all sources.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Iterable
from typing import Protocol

from . import models
from .utils import maybe_iter
from .utils import ordered_union

logger = logging.getLogger(__name__)


class Source(Protocol):
    fate: int | None
    attributes: dict[str, int] | None
    traits: list[str] | None


@dataclasses.dataclass
class Contribution:
    """The additive effect of a group of sources.

    Attributes:
        fate: Sum of fate deltas.
        attributes: Sum of attribute deltas. Only attributes that some source
            touched are present.
        traits: Traits granted, deduplicated in first-seen order.
    """

    fate: int = 0
    attributes: dict[str, int] = dataclasses.field(default_factory=dict)
    traits: list[str] = dataclasses.field(default_factory=list)

    @classmethod
    def of(cls, sources: Iterable[Source]) -> Contribution:
        total = cls()
        for source in sources:
            total.add(source)
        return total

    def add(self, source: Source | Contribution) -> None:
        self.fate += source.fate or 0
        for attr, value in (source.attributes or {}).items():
            self.attributes[attr] = self.attributes.get(attr, 0) + value
        self.traits = ordered_union(self.traits, source.traits)


class Aggregator:
    """Accumulates sources on top of a starting snapshot."""

    fate: int
    attributes: dict[str, int]
    _traits: dict[str, None]

    def __init__(
        self,
        fate: int = 0,
        attributes: dict[str, int] | None = None,
        traits: Iterable[str] | None = None,
    ):
        self.fate = fate
        self.attributes = models.default_attributes()
        self.attributes.update(attributes or {})
        self._traits = dict.fromkeys(traits or [])

    @classmethod
    def from_state(cls, state: models.CharacterBuilderState) -> Aggregator:
        return cls(
            fate=state.calculated_fate,
            attributes=state.calculated_attributes,
            traits=state.calculated_traits,
        )

    @property
    def traits(self) -> list[str]:
        return list(self._traits)

    def add(self, source: Source | Contribution) -> None:
        self.fate += source.fate or 0
        for attr, value in (source.attributes or {}).items():
            self.attributes[attr] = self.attributes.get(attr, 0) + value
        for trait in maybe_iter(source.traits):
            self._traits.setdefault(trait, None)

    def subtract(
        self, contribution: Contribution, keep_traits: Iterable[str] = ()
    ) -> None:
        """Take a previously added contribution back out.

        Traits in `keep_traits` are still granted by some other source and
        stay in the set.
        """
        self.fate -= contribution.fate
        for attr, value in contribution.attributes.items():
            self.attributes[attr] = self.attributes.get(attr, 0) - value
        keep = set(keep_traits)
        for trait in contribution.traits:
            if trait not in keep:
                self._traits.pop(trait, None)

    def apply_to(
        self, state: models.CharacterBuilderState
    ) -> models.CharacterBuilderState:
        return state.model_copy(
            update={
                "calculated_fate": self.fate,
                "calculated_attributes": dict(self.attributes),
                "calculated_traits": self.traits,
            }
        )


def selected_options(
    state: models.CharacterBuilderState, data: models.CharacterCreationData
) -> list[models.CharacterOption]:
    """Every selected option across all categories, in category order.

    Ids that don't resolve to an option (stale references, categories that
    no longer exist) are skipped.
    """
    options: list[models.CharacterOption] = []
    for category in data.categories:
        for option_id in state.selected(category.id):
            if option := category.get_option(option_id):
                options.append(option)
            else:
                logger.debug(
                    "Skipping unresolved option %s in category %s",
                    option_id,
                    category.id,
                )
    return options


def appearance_sources(
    selections: models.AppearanceSelections, config: models.AppearanceConfig
) -> list[Source]:
    """The appearance options and portrait named by the selections.

    Unresolved ids are skipped, the same as for category options.
    """
    sources: list[Source] = []
    for kind in models.APPEARANCE_KINDS:
        if not (id := getattr(selections, kind)):
            continue
        if option := config.get_option(kind, id):
            sources.append(option)
        else:
            logger.debug("Skipping unresolved %s %s", kind, id)
    if selections.portrait_id:
        if portrait := config.get_portrait(selections.portrait_id):
            sources.append(portrait)
        else:
            logger.debug("Skipping unresolved portrait %s", selections.portrait_id)
    return sources


def appearance_contribution(
    selections: models.AppearanceSelections, config: models.AppearanceConfig
) -> Contribution:
    return Contribution.of(appearance_sources(selections, config))


def recalculate_derived_values(
    state: models.CharacterBuilderState,
    data: models.CharacterCreationData,
    appearance: models.AppearanceConfig | None = None,
) -> models.CharacterBuilderState:
    """Recompute fate, attributes and traits from scratch.

    Walks every selected category option. Appearance contributions are
    folded in only when `appearance` is provided; otherwise they are left
    to the incremental path (`apply_appearance_delta`).
    """
    aggregator = Aggregator()
    for option in selected_options(state, data):
        aggregator.add(option)
    if appearance is not None:
        aggregator.add(appearance_contribution(state.appearance_selections, appearance))
    return aggregator.apply_to(state)


def apply_appearance_delta(
    state: models.CharacterBuilderState,
    new_selections: models.AppearanceSelections,
    appearance: models.AppearanceConfig,
    data: models.CharacterCreationData,
) -> models.CharacterBuilderState:
    """Swap the old appearance contribution for the new one.

    The cached derived values are patched in place of a full recompute;
    category selections are not walked for fate or attributes. Traits that a
    selected category option also grants survive the removal of the old
    appearance traits.
    """
    old = appearance_contribution(state.appearance_selections, appearance)
    new = appearance_contribution(new_selections, appearance)

    keep_traits = set(new.traits)
    for option in selected_options(state, data):
        keep_traits.update(maybe_iter(option.traits))

    aggregator = Aggregator.from_state(state)
    aggregator.subtract(old, keep_traits=keep_traits)
    aggregator.add(new)
    return aggregator.apply_to(
        state.model_copy(update={"appearance_selections": new_selections})
    )
