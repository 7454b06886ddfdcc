import pytest

from saga.engine.describe import describe_attribute
from saga.engine.describe import describe_fate


@pytest.mark.parametrize(
    "value,label",
    [
        (-7, "Crippled"),
        (-3, "Crippled"),
        (-2, "Feeble"),
        (-1, "Weak"),
        (0, "Average"),
        (1, "Capable"),
        (2, "Strong"),
        (3, "Exceptional"),
        (4, "Remarkable"),
        (5, "Legendary"),
        (12, "Legendary"),
    ],
)
def test_describe_attribute(value, label):
    assert describe_attribute(value) == label


@pytest.mark.parametrize(
    "fate,label",
    [
        (-9, "Cursed"),
        (-5, "Cursed"),
        (-4, "Ill-Starred"),
        (-1, "Unremarkable"),
        (0, "Unremarkable"),
        (1, "Promising"),
        (6, "Destined"),
        (10, "Fated for Greatness"),
        (11, "Chosen by Heaven"),
    ],
)
def test_describe_fate(fate, label):
    assert describe_fate(fate) == label
