import pytest

from orca_converters.values import (
    format_number,
    format_speed,
    is_decimal,
    is_percent,
    is_truthy,
    mm_to_percent,
    multivalue_to_array,
    percent_to_mm,
    percent_to_ratio,
    remove_percent,
    split_quoted_list,
    to_number,
    unescape_gcode,
    unquote,
)


@pytest.mark.parametrize("value,expected", [
    ("12", True),
    ("-0.5", True),
    ("+3.25", True),
    ("50%", False),
    ("0.2mm", False),
    ("", False),
    (None, False),
])
def test_is_decimal(value, expected):
    assert is_decimal(value) is expected


def test_is_percent():
    assert is_percent("50%")
    assert is_percent("-12.5%")
    assert not is_percent("50")
    assert not is_percent("%")
    assert remove_percent("50%") == "50"


def test_percent_to_mm():
    """Percentages are resolved against the reference, absolute values pass through."""
    assert percent_to_mm(10, "50%") == "5"
    assert percent_to_mm(10, "5") == "5"
    assert percent_to_mm("0.4", "75%") == "0.3"


def test_percent_to_mm_unusable_reference():
    assert percent_to_mm("50%", "50%") is None
    assert percent_to_mm(None, "50%") is None
    assert percent_to_mm("fast", "50%") is None


def test_mm_to_percent():
    assert mm_to_percent("0.4", "0.4") == "100%"
    assert mm_to_percent("0.4", "0.1") == "25%"
    assert mm_to_percent("0.4", "100%") == "100%"
    assert mm_to_percent("0", "0.4") is None
    assert mm_to_percent(None, "0.4") is None


def test_percent_to_ratio():
    assert percent_to_ratio("150%") == "1.5"
    assert percent_to_ratio("95%") == "0.95"
    assert percent_to_ratio("300%") == "2"
    assert percent_to_ratio("0.9") == "0.9"


def test_format_number():
    assert format_number(5.0) == "5"
    assert format_number(0.1 + 0.2) == "0.3"
    assert format_number(-0.0) == "0"


def test_format_speed():
    assert format_speed("48") == "48"
    assert format_speed("33.333333") == "33.3"
    assert format_speed("20.04") == "20"
    assert format_speed("50%") == "50%"


def test_to_number():
    assert to_number("0.2mm") == 0.2
    assert to_number("") == 0.0
    assert to_number(None) == 0.0
    assert to_number("abc") == 0.0
    assert to_number(7) == 7.0


@pytest.mark.parametrize("value,expected", [
    (None, False),
    ("", False),
    ("0", False),
    ("1", True),
    ("yes", True),
])
def test_is_truthy(value, expected):
    assert is_truthy(value) is expected


def test_multivalue_to_array():
    assert multivalue_to_array("9000,1000") == ["9000", "1000"]
    assert multivalue_to_array("0.4;0.6") == ["0.4", "0.6"]
    assert multivalue_to_array("0.4") == ["0.4"]


def test_unquote_and_unescape():
    assert unquote('"Generic PLA"') == "Generic PLA"
    assert unquote('Generic PLA') == "Generic PLA"
    assert unescape_gcode(r'G28\nM117 \"Hi\"\\') == 'G28\nM117 "Hi"\\'


def test_split_quoted_list():
    assert split_quoted_list('"Printer A";"Printer B"') == ["Printer A", "Printer B"]
    assert split_quoted_list('') == []
