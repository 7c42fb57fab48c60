from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, List, Optional

from errors import ParseFailure
from numeric import to_number

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```json\s*([\s\S]*?)\s*```")
_LEADING_FENCE_RE = re.compile(r"^```(json)?\s*")
_TRAILING_FENCE_RE = re.compile(r"\s*```$")


@dataclass
class GeneratedProblem:
    problem_text: str
    correct_answer: float
    hints: List[str] = field(default_factory=list)


def parse_model_json(raw: Optional[str]) -> Any:
    """
    Parse JSON out of a model response, tolerating a ```json fenced block.
    Returns None (never raises) when the cleaned text is not valid JSON.
    """
    if not raw:
        return None
    m = _FENCE_RE.search(raw)
    text = m.group(1) if m else raw.strip()

    # leftover fences, e.g. an unlabelled ``` block or a missing closing fence
    text = _LEADING_FENCE_RE.sub("", text)
    text = _TRAILING_FENCE_RE.sub("", text).strip()

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning("model response is not valid JSON: %s", e)
        return None


def _get_raw_answer(data: dict) -> Any:
    # the model does not always stick to the key we asked for
    for key in ("correct_answer", "final_answer", "answer"):
        if key in data and data[key] is not None:
            return data[key]
    return None


def extract_problem(data: Any) -> GeneratedProblem:
    if not isinstance(data, dict):
        raise ParseFailure("model response is not a JSON object")

    problem_text = data.get("problem_text")
    if not isinstance(problem_text, str) or not problem_text.strip():
        raise ParseFailure("model response is missing problem_text")

    raw_answer = _get_raw_answer(data)
    if raw_answer is None:
        raise ParseFailure("model response is missing correct_answer")
    try:
        correct_answer = to_number(raw_answer)
    except ValueError as e:
        raise ParseFailure(f"correct_answer {raw_answer!r} is not numeric: {e}")

    hints = data.get("hints") or []
    if not isinstance(hints, list):
        hints = []
    hints = [h.strip() for h in hints if isinstance(h, str) and h.strip()]

    return GeneratedProblem(
        problem_text=problem_text.strip(),
        correct_answer=correct_answer,
        hints=hints,
    )
