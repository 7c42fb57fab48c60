# Prompt templates for the Gemini calls.
# Templates are filled with str.format; every placeholder must be supplied.
from __future__ import annotations

from enum import Enum
from typing import Any

from errors import InvalidParameter
from numeric import format_number


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class ProblemType(str, Enum):
    ADDITION = "addition"
    SUBTRACTION = "subtraction"
    MULTIPLICATION = "multiplication"
    DIVISION = "division"


# Points awarded for a correct answer, fixed on the session at creation.
SCORE_VALUES = {
    Difficulty.EASY: 10,
    Difficulty.MEDIUM: 20,
    Difficulty.HARD: 30,
}

# 1=basic guidance, 2=problem-solving strategy, 3=detailed approach
HINT_LEVELS = (1, 2, 3)

_DIFFICULTY_GUIDANCE = {
    Difficulty.EASY: "Use whole numbers up to 1,000 and a single step.",
    Difficulty.MEDIUM: "Use numbers up to 100,000 (decimals allowed) and two steps.",
    Difficulty.HARD: (
        "Use numbers up to 10 million, fractions or decimals, and three or more steps "
        "that may need order of operations or brackets."
    ),
}

PROBLEM_PROMPT = """Generate a Primary 5 level math word problem.

Difficulty: {difficulty}
Operation Type: {problem_type}
Guidance: {guidance}

The problem should:
1. Be appropriate for Primary 5 students (11-12 years old)
2. Mainly require {problem_type} to solve
3. Have a clear numerical answer
4. Be engaging and related to real-world situations
5. Include all necessary information to solve the problem

Also write three progressive hints (basic guidance, problem-solving strategy, detailed approach)
that never reveal the final answer.

Return the response in this JSON format only, no need to add any markdown characters:
{{
  "problem_text": "The complete word problem text",
  "correct_answer": number,
  "hints": ["hint 1", "hint 2", "hint 3"]
}}"""

HINT_PROMPT = """Generate a helpful hint for a Primary 5 student solving this math problem. The hint should guide them towards the solution without giving it away.

Problem: {problem_text}
Difficulty: {difficulty}
Operation Type: {problem_type}
Current Hint Level: {hint_level} (1=basic guidance, 2=problem-solving strategy, 3=detailed approach)

Requirements:
1. Be encouraging and supportive
2. Help identify key information or steps
3. Don't reveal the complete solution
4. Use age-appropriate language
5. Progressive difficulty based on hint level

Return just the hint text with no additional formatting or quotes."""

SOLUTION_PROMPT = """Generate a detailed, step-by-step solution for this Primary 5 math problem. The solution should be clear, thorough, and educational.

Problem: {problem_text}
Difficulty: {difficulty}
Operation Type: {problem_type}
Final Answer: {correct_answer}

Guidelines for the solution:
1. Break down the problem into clear, numbered steps
2. Explain the reasoning at each step
3. Show all calculations clearly
4. Include relevant formulas or rules used
5. Conclude with the final answer and check
6. Use age-appropriate language (Primary 5 level)

Return a step-by-step solution with no additional formatting or quotes.
Each step should be a sentence or two, clearly numbered."""

FEEDBACK_PROMPT = """Generate brief, encouraging feedback for a Primary 5 (11-12 years old) student who just attempted a math problem.

Original Problem: {problem_text}
Correct Answer: {correct_answer}
Student's Answer: {user_answer}
Is Correct: {is_correct}

Requirements:
1. Keep feedback concise but insightful.
2. Be encouraging and positive
3. If incorrect, briefly mention why without giving away the answer
4. Use age-appropriate language
5. Focus on learning and growth

Return only the feedback text with no additional formatting or quotes."""


def coerce_difficulty(value: Any) -> Difficulty:
    try:
        return Difficulty(value)
    except (TypeError, ValueError):
        allowed = ", ".join(d.value for d in Difficulty)
        raise InvalidParameter(f"Invalid difficulty {value!r}; expected one of: {allowed}")


def coerce_problem_type(value: Any) -> ProblemType:
    try:
        return ProblemType(value)
    except (TypeError, ValueError):
        allowed = ", ".join(p.value for p in ProblemType)
        raise InvalidParameter(f"Invalid problem_type {value!r}; expected one of: {allowed}")


def build_problem_prompt(difficulty: Any, problem_type: Any) -> str:
    d = coerce_difficulty(difficulty)
    p = coerce_problem_type(problem_type)
    return PROBLEM_PROMPT.format(
        difficulty=d.value,
        problem_type=p.value,
        guidance=_DIFFICULTY_GUIDANCE[d],
    )


def build_hint_prompt(problem_text: str, difficulty: Any, problem_type: Any, hint_level: int) -> str:
    if hint_level not in HINT_LEVELS:
        raise InvalidParameter(f"Invalid hint level {hint_level!r}; expected 1, 2 or 3")
    return HINT_PROMPT.format(
        problem_text=problem_text,
        difficulty=coerce_difficulty(difficulty).value,
        problem_type=coerce_problem_type(problem_type).value,
        hint_level=hint_level,
    )


def build_solution_prompt(
    problem_text: str, difficulty: Any, problem_type: Any, correct_answer: float
) -> str:
    return SOLUTION_PROMPT.format(
        problem_text=problem_text,
        difficulty=coerce_difficulty(difficulty).value,
        problem_type=coerce_problem_type(problem_type).value,
        correct_answer=format_number(correct_answer),
    )


def build_feedback_prompt(
    problem_text: str, correct_answer: float, user_answer: float, is_correct: bool
) -> str:
    return FEEDBACK_PROMPT.format(
        problem_text=problem_text,
        correct_answer=format_number(correct_answer),
        user_answer=format_number(user_answer),
        is_correct="true" if is_correct else "false",
    )
