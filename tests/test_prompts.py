import re

import pytest

from errors import InvalidParameter
from prompts import (
    Difficulty,
    ProblemType,
    build_feedback_prompt,
    build_hint_prompt,
    build_problem_prompt,
    build_solution_prompt,
)

_PLACEHOLDER_RE = re.compile(r"\{[a-z_]+\}")


@pytest.mark.parametrize("difficulty", [d.value for d in Difficulty])
@pytest.mark.parametrize("problem_type", [p.value for p in ProblemType])
def test_problem_prompt_substitutes_parameters(difficulty, problem_type):
    prompt = build_problem_prompt(difficulty, problem_type)
    assert f"Difficulty: {difficulty}" in prompt
    assert f"Operation Type: {problem_type}" in prompt
    assert _PLACEHOLDER_RE.search(prompt) is None
    assert '"correct_answer": number' in prompt


def test_problem_prompt_rejects_unknown_difficulty():
    with pytest.raises(InvalidParameter):
        build_problem_prompt("impossible", "addition")


def test_problem_prompt_rejects_unknown_operation():
    with pytest.raises(InvalidParameter) as exc:
        build_problem_prompt("easy", "exponentiation")
    assert "problem_type" in exc.value.detail


def test_hint_prompt_levels():
    for level in (1, 2, 3):
        prompt = build_hint_prompt("What is 2 + 2?", "easy", "addition", level)
        assert f"Current Hint Level: {level}" in prompt
        assert "Problem: What is 2 + 2?" in prompt
        assert _PLACEHOLDER_RE.search(prompt) is None


def test_hint_prompt_rejects_level_out_of_range():
    with pytest.raises(InvalidParameter):
        build_hint_prompt("What is 2 + 2?", "easy", "addition", 4)


def test_solution_prompt_formats_whole_answer():
    prompt = build_solution_prompt("What is 40 + 2?", "medium", "addition", 42.0)
    assert "Final Answer: 42\n" in prompt
    assert "Difficulty: medium" in prompt
    assert _PLACEHOLDER_RE.search(prompt) is None


def test_problem_text_with_braces_is_kept_verbatim():
    prompt = build_solution_prompt("Sets like {a} hold 3 items", "easy", "addition", 3)
    assert "Problem: Sets like {a} hold 3 items" in prompt


def test_feedback_prompt():
    prompt = build_feedback_prompt("What is 40 + 2?", 42.0, 41.5, False)
    assert "Correct Answer: 42" in prompt
    assert "Student's Answer: 41.5" in prompt
    assert "Is Correct: false" in prompt
