import pytest

from insider_pulse.util.normalization import normalize_insider_name, normalize_ticker


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("  jane   Q DOE ", "Jane Q Doe"),
        ("COOK TIMOTHY D", "Cook Timothy D"),
        ("o'NEIL\tmary\n", "O'neil Mary"),
        ("smith-JONES a", "Smith-jones A"),
        ("x", "X"),
        ("", ""),
        ("   ", ""),
        (None, ""),
    ],
)
def test_normalize_insider_name(raw, expected):
    assert normalize_insider_name(raw) == expected


def test_normalize_insider_name_is_idempotent():
    once = normalize_insider_name("  BERKSHIRE   hathaway INC ")
    assert normalize_insider_name(once) == once == "Berkshire Hathaway Inc"


@pytest.mark.parametrize("raw, expected", [(" aapl ", "AAPL"), ("brk.b", "BRK.B"), (None, ""), ("", "")])
def test_normalize_ticker(raw, expected):
    assert normalize_ticker(raw) == expected
