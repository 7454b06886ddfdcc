from __future__ import annotations

from typing import Iterable

from .. import models


def check_requirement(
    req: models.OptionRequirement, state: models.CharacterBuilderState
) -> bool:
    """Evaluate one option requirement against the builder state.

    Each populated field is checked independently and all must pass.
    Attribute checks read the current derived totals, with missing
    attributes counting as 0.
    """
    if req.trait and req.trait not in state.calculated_traits:
        return False
    if req.not_trait and req.not_trait in state.calculated_traits:
        return False
    if req.attribute:
        value = state.attribute(req.attribute.id)
        if not models.compare(value, req.attribute.op, req.attribute.value):
            return False
    if req.selection:
        if not state.is_selected(req.selection.option_id, req.selection.category):
            return False
    if req.not_selection:
        if state.is_selected(req.not_selection.option_id, req.not_selection.category):
            return False
    return True


def meets_requirements(
    requirements: Iterable[models.OptionRequirement] | None,
    state: models.CharacterBuilderState,
) -> bool:
    for req in requirements or ():
        if not check_requirement(req, state):
            return False
    return True
