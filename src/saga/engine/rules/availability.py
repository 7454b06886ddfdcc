from __future__ import annotations

from dataclasses import dataclass

from .. import models
from ..decision import Decision
from .requirements import meets_requirements


def is_option_available(
    option: models.CharacterOption,
    category: models.CategoryConfig,
    state: models.CharacterBuilderState,
) -> bool:
    """True if all of the option's requirements hold and nothing it's
    incompatible with is selected in the same category."""
    if not meets_requirements(option.requires, state):
        return False
    selected = state.selected(category.id)
    for incompatible_id in option.incompatible_with or ():
        if incompatible_id in selected:
            return False
    return True


def can_select(
    option: models.CharacterOption,
    category: models.CategoryConfig,
    state: models.CharacterBuilderState,
) -> Decision:
    """Whether the UI should let the user pick (or keep) this option.

    An already-selected option can always be toggled off. Otherwise the
    category must have room, single-select categories included: the
    current pick has to be cleared before another is offered, even though
    `toggle_option` itself replaces single picks.
    """
    if not is_option_available(option, category, state):
        return Decision.UNAVAILABLE
    selected = state.selected(category.id)
    if option.id in selected or len(selected) < category.max_picks:
        return Decision.SUCCESS
    return Decision.AT_CAPACITY


def is_category_fully_locked(
    category: models.CategoryConfig, state: models.CharacterBuilderState
) -> bool:
    """True if no option in the category can currently be picked.

    Appearance uses its own step selector and is never locked. A category
    with no options at all is always locked.
    """
    if category.id == models.APPEARANCE_CATEGORY:
        return False
    for option in category.options:
        if is_option_available(option, category, state):
            return False
    return True


@dataclass
class OptionEntry:
    """What a category screen needs to render one option."""

    id: str
    name: str
    description: str
    selected: bool
    available: bool
    can_select: bool
    is_drawback: bool = False
    subcategory: str | None = None
    reason: str | None = None


def list_options(
    category: models.CategoryConfig,
    state: models.CharacterBuilderState,
    available: bool | None = None,
    selected: bool | None = None,
) -> list[OptionEntry]:
    """Entries for a category's options, in content order.

    Args:
        available: If set, only include options whose availability matches.
        selected: If set, only include options whose selection state matches.
    """
    entries: list[OptionEntry] = []
    for option in category.options:
        is_available = is_option_available(option, category, state)
        is_selected = state.is_selected(option.id, category.id)
        if available is not None and available != is_available:
            continue
        if selected is not None and selected != is_selected:
            continue
        decision = can_select(option, category, state)
        entries.append(
            OptionEntry(
                id=option.id,
                name=option.name,
                description=option.description,
                selected=is_selected,
                available=is_available,
                can_select=bool(decision),
                is_drawback=option.is_drawback,
                subcategory=option.subcategory,
                reason=decision.reason,
            )
        )
    return entries


def group_by_subcategory(
    entries: list[OptionEntry],
) -> dict[str | None, list[OptionEntry]]:
    """Group entries by subcategory, keeping first-seen group order.

    Options without a subcategory are grouped under None.
    """
    groups: dict[str | None, list[OptionEntry]] = {}
    for entry in entries:
        groups.setdefault(entry.subcategory, []).append(entry)
    return groups
