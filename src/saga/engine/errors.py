"""Errors raised when a caller names something the loaded content lacks.

Lookups that merely fail to match (unresolved selections, missing attribute
keys, locked categories) never raise; they degrade to 0, False or None.
"""

from __future__ import annotations


class NotFoundError(LookupError):
    kind: str = "item"

    def __init__(self, id: str, scope: str | None = None):
        self.id = id
        self.scope = scope
        if scope:
            message = f'{self.kind.capitalize()} "{id}" not found in {scope}.'
        else:
            message = f'{self.kind.capitalize()} "{id}" not found.'
        super().__init__(message)


class CategoryNotFoundError(NotFoundError):
    kind = "category"


class OptionNotFoundError(NotFoundError):
    kind = "option"


class AppearanceOptionNotFoundError(NotFoundError):
    kind = "appearance option"


class PortraitNotFoundError(NotFoundError):
    kind = "portrait"


class ScenarioNotFoundError(NotFoundError):
    kind = "scenario"
