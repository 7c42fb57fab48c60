import pytest

from numeric import answers_match, eval_numeric, format_number, to_number


def test_eval_plain_and_fraction():
    assert eval_numeric("12.5") == 12.5
    assert eval_numeric("3/4") == pytest.approx(0.75)
    assert eval_numeric("2^3") == 8.0


def test_eval_strips_currency_and_thousands():
    assert eval_numeric("$1,250") == 1250.0


@pytest.mark.parametrize("text", ["abc", "", "1" * 101, "1/0", "3 4"])
def test_eval_rejects(text):
    with pytest.raises(ValueError):
        eval_numeric(text)


def test_to_number():
    assert to_number(7) == 7.0
    assert to_number("7") == 7.0
    with pytest.raises(ValueError):
        to_number(True)
    with pytest.raises(ValueError):
        to_number({"value": 7})


def test_answers_match_tolerance():
    assert answers_match(42, 42.00005)
    assert answers_match(0.1 + 0.2, 0.3)
    assert not answers_match(42, 42.001)
    assert not answers_match(42, 43)


def test_format_number():
    assert format_number(42.0) == "42"
    assert format_number(2.5) == "2.5"
