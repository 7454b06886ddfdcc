from __future__ import annotations

from .. import models
from .availability import is_category_fully_locked


def is_category_complete(
    category: models.CategoryConfig, state: models.CharacterBuilderState
) -> bool:
    if category.id == models.APPEARANCE_CATEGORY:
        return state.appearance_selections.is_complete
    return len(state.selected(category.id)) >= category.min_picks


def incomplete_categories(
    data: models.CharacterCreationData, state: models.CharacterBuilderState
) -> list[models.CategoryConfig]:
    """Categories still needing picks. Fully locked categories are skipped."""
    return [
        category
        for category in data.categories
        if not is_category_fully_locked(category, state)
        and not is_category_complete(category, state)
    ]


def is_character_complete(
    data: models.CharacterCreationData, state: models.CharacterBuilderState
) -> bool:
    if incomplete_categories(data, state):
        return False
    return bool(state.name.strip())
