"""Descriptive words for derived values, shared by summary and review screens."""

from __future__ import annotations

from . import utils

# Thresholds are upper bounds, checked in order.
_FATE_LABELS: dict[int, str] = {
    -5: "Cursed",
    -2: "Ill-Starred",
    0: "Unremarkable",
    3: "Promising",
    6: "Destined",
    10: "Fated for Greatness",
}

_ATTRIBUTE_LABELS: dict[int, str] = {
    -2: "Feeble",
    -1: "Weak",
    0: "Average",
    1: "Capable",
    2: "Strong",
    3: "Exceptional",
    4: "Remarkable",
}


def describe_attribute(value: int) -> str:
    if value <= -3:
        return "Crippled"
    if value >= 5:
        return "Legendary"
    return _ATTRIBUTE_LABELS[value]


def describe_fate(fate: int) -> str:
    return utils.threshold_label(_FATE_LABELS, fate, "Chosen by Heaven")
