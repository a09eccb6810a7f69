import pytest

from answers import AnswerRequired, parse_answer, validate_answer_text


@pytest.mark.parametrize(
    "value,expected",
    [
        (42, 42),
        ("42", 42),
        ("  42 ", 42),
        ("+42", 42),
        ("42.0", 42),
        (42.0, 42),
        ("-3", -3),
        ("042", 42),
        ("007", 7),
        ("08", 8),
        ("0", 0),
        ("-05", -5),
    ],
)
def test_parse_whole_numbers(value, expected):
    assert parse_answer(value) == expected


@pytest.mark.parametrize("value", ["abc", "6*7", "4.5", "1e3", "42abc", "1" * 13, True, 4.5])
def test_malformed_answers_never_match(value):
    assert parse_answer(value) is None


@pytest.mark.parametrize("value", ["", "   ", None])
def test_blank_answer_is_required(value):
    with pytest.raises(AnswerRequired):
        parse_answer(value)


def test_validate_messages():
    assert validate_answer_text("") == "Answer required."
    assert "too long" in validate_answer_text("1" * 13).lower()
    assert "whole numbers" in validate_answer_text("x").lower()
    assert validate_answer_text("56") is None
