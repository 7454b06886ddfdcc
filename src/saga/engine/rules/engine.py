from __future__ import annotations

import random
from functools import cached_property

from packaging import version

from .. import aggregator
from .. import models
from ..decision import Decision
from ..errors import AppearanceOptionNotFoundError
from ..errors import CategoryNotFoundError
from ..errors import OptionNotFoundError
from ..errors import PortraitNotFoundError
from . import availability
from . import builder
from . import completion


class StateEnvelope(models.BaseModel):
    """Builder state as exchanged with the UI layer."""

    content_id: str
    content_version: str
    state: models.CharacterBuilderState


class BuilderEngine:
    """Character builder bound to one set of loaded content.

    The module-level functions in `builder`, `availability` and
    `completion` do the work; the engine resolves ids against the content,
    raising a NotFoundError for ids that don't exist, and always keeps the
    appearance contribution in the derived totals.
    """

    def __init__(
        self,
        data: models.CharacterCreationData,
        appearance: models.AppearanceConfig | None = None,
        manifest: models.ContentManifest | None = None,
        names: models.NamesConfig | None = None,
    ):
        self._data = data
        self._appearance = appearance or models.AppearanceConfig()
        self._manifest = manifest or models.ContentManifest(id="local", name="Local")
        self._names = names or models.NamesConfig()

    @property
    def data(self) -> models.CharacterCreationData:
        return self._data

    @property
    def appearance(self) -> models.AppearanceConfig:
        return self._appearance

    @property
    def manifest(self) -> models.ContentManifest:
        return self._manifest

    @property
    def names(self) -> models.NamesConfig:
        return self._names

    @cached_property
    def categories(self) -> dict[str, models.CategoryConfig]:
        return {c.id: c for c in self._data.categories}

    def new_state(self, name: str = "") -> models.CharacterBuilderState:
        return builder.create_initial_state(self._data, name=name)

    def category(self, category_id: str) -> models.CategoryConfig:
        if category := self.categories.get(category_id):
            return category
        raise CategoryNotFoundError(category_id)

    def option(self, category_id: str, option_id: str) -> models.CharacterOption:
        if option := self.category(category_id).get_option(option_id):
            return option
        raise OptionNotFoundError(option_id, scope=category_id)

    def appearance_option(
        self, kind: models.AppearanceKind, id: str
    ) -> models.AppearanceOption:
        if option := self._appearance.get_option(kind, id):
            return option
        raise AppearanceOptionNotFoundError(id, scope=kind)

    def portrait(self, portrait_id: str) -> models.Portrait:
        if portrait := self._appearance.get_portrait(portrait_id):
            return portrait
        raise PortraitNotFoundError(portrait_id)

    def set_name(
        self, state: models.CharacterBuilderState, name: str
    ) -> models.CharacterBuilderState:
        return builder.set_name(name, state)

    def toggle(
        self, state: models.CharacterBuilderState, category_id: str, option_id: str
    ) -> models.CharacterBuilderState:
        self.option(category_id, option_id)
        return builder.toggle_option(
            option_id, self.category(category_id), state, self._data, self._appearance
        )

    def is_available(
        self, state: models.CharacterBuilderState, category_id: str, option_id: str
    ) -> bool:
        return availability.is_option_available(
            self.option(category_id, option_id), self.category(category_id), state
        )

    def can_select(
        self, state: models.CharacterBuilderState, category_id: str, option_id: str
    ) -> Decision:
        return availability.can_select(
            self.option(category_id, option_id), self.category(category_id), state
        )

    def is_locked(self, state: models.CharacterBuilderState, category_id: str) -> bool:
        return availability.is_category_fully_locked(self.category(category_id), state)

    def list_options(
        self,
        state: models.CharacterBuilderState,
        category_id: str,
        available: bool | None = None,
        selected: bool | None = None,
    ) -> list[availability.OptionEntry]:
        return availability.list_options(
            self.category(category_id), state, available=available, selected=selected
        )

    def update_appearance(
        self,
        state: models.CharacterBuilderState,
        selections: models.AppearanceSelections,
    ) -> models.CharacterBuilderState:
        return builder.update_appearance_selections(
            selections, state, self._appearance, self._data
        )

    def select_appearance(
        self,
        state: models.CharacterBuilderState,
        step: models.AppearanceStep,
        value: str,
    ) -> models.CharacterBuilderState:
        return builder.select_appearance(
            step, value, state, self._appearance, self._data
        )

    def clear_appearance_from(
        self, state: models.CharacterBuilderState, step: models.AppearanceStep
    ) -> models.CharacterBuilderState:
        selections = builder.clear_appearance_from(step, state.appearance_selections)
        return self.update_appearance(state, selections)

    def matching_portraits(
        self, state: models.CharacterBuilderState, match_race: bool = False
    ) -> list[models.Portrait]:
        race = builder.first_selection(state, builder.RACE_CATEGORY) if match_race else None
        return builder.matching_portraits(
            self._appearance,
            state.appearance_selections,
            builder.first_selection(state, builder.SEX_CATEGORY),
            race=race,
        )

    def suggest_names(
        self, state: models.CharacterBuilderState, rng: random.Random
    ) -> list[str]:
        return builder.suggest_names(self._names, state, rng)

    def is_category_complete(
        self, state: models.CharacterBuilderState, category_id: str
    ) -> bool:
        return completion.is_category_complete(self.category(category_id), state)

    def is_complete(self, state: models.CharacterBuilderState) -> bool:
        return completion.is_character_complete(self._data, state)

    def build_character(self, state: models.CharacterBuilderState) -> models.Character:
        return builder.build_character(state)

    def dump_state(self, state: models.CharacterBuilderState) -> dict:
        envelope = StateEnvelope(
            content_id=self._manifest.id,
            content_version=self._manifest.version,
            state=state,
        )
        return envelope.dump(as_json=False)

    def load_state(self, data: dict) -> models.CharacterBuilderState:
        """Load builder state exported by `dump_state`.

        Derived values are recomputed rather than trusted.

        Raises:
            ValueError: if the state was made with different content, or a
                newer version of this content.
        """
        updated_data = self.update_data(data)
        envelope = StateEnvelope.model_validate(updated_data)
        return aggregator.recalculate_derived_values(
            envelope.state, self._data, self._appearance
        )

    def update_data(self, data: dict) -> dict:
        """If the data is from a different but compatible content version, update it.

        The default behavior is to reject state made with a different content
        ID, and assume newer versions are backward (but not forward) compatible.
        """
        if data["contentId"] != self._manifest.id:
            raise ValueError(
                f'Can not load state for content {data["contentId"]} with content {self._manifest.id}'
            )
        if version.parse(self._manifest.version) < version.parse(data["contentVersion"]):
            raise ValueError(
                f'Can not load state from {data["contentId"]} v{data["contentVersion"]}'
                f" with {self._manifest.id} v{self._manifest.version}"
            )
        return data
