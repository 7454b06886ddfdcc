from __future__ import annotations

import json
from typing import Iterable
from typing import TypeVar

import pydantic

_T = TypeVar("_T")


def maybe_iter(value: str | _T | list[str | _T] | None) -> Iterable[str | _T]:
    if not value:
        return
    if isinstance(value, str):
        yield value
    elif isinstance(value, (list, tuple)):
        yield from value
    else:
        yield value


def ordered_union(*groups: Iterable[str] | None) -> list[str]:
    """Merge string groups into one list, keeping the first occurrence of each."""
    seen: dict[str, None] = {}
    for group in groups:
        for item in maybe_iter(group):
            seen.setdefault(item, None)
    return list(seen)


def threshold_label(table: dict[int, str], value: int, above: str) -> str:
    """Label for the first threshold the value doesn't exceed.

    Args:
        table: Map of inclusive upper bounds to labels.
        value: The value to describe.
        above: Label for values past the highest bound.
    """
    for bound in sorted(table):
        if value <= bound:
            return table[bound]
    return above


class JSONEncoder(json.JSONEncoder):
    def default(self, obj):
        if isinstance(obj, (set, frozenset)):
            return list(obj)
        return json.JSONEncoder.default(self, obj)


def dump(data: pydantic.BaseModel | dict, as_json=True, *args, **kwargs) -> str | dict:
    if not isinstance(data, dict):
        data = data.model_dump(by_alias=True, exclude_none=True, mode="json")
    if as_json:
        return json.dumps(data, cls=JSONEncoder, *args, **kwargs)
    else:
        return data
