from __future__ import annotations

import math
import re
from typing import Any, Optional

from sympy import nan, oo, zoo
from sympy.parsing.sympy_parser import (
    convert_xor,
    parse_expr,
    standard_transformations,
)

# Answers closer than this to the stored answer are treated as equal.
ANSWER_TOLERANCE = 1e-4

# --- Parsing / validation helpers ------------------------------------------------
LEN_LIMIT = 100
_INVALID_CHARS_MSG = (
    "Only numeric answers using digits, spaces, + - * / ^ . and parentheses are allowed."
)
_NON_FINITE_MSG = "Answer is not finite (e.g., division by zero)."
_TOO_COMPLEX_MSG = "Answer is too complex."
_ALLOWED_RE = re.compile(r"^[0-9+\-*/^().\s]{1,100}$")
# thousands separators ("1,250") and a leading currency sign ("$4.50") are common in AI output
_THOUSANDS_RE = re.compile(r"(?<=\d),(?=\d{3}\b)")
_CURRENCY_RE = re.compile(r"^\s*[$€£]\s*")

TRANSFORMS = standard_transformations + (convert_xor,)

_MAX_OPS = 50


def validate_answer_text(s: Any) -> Optional[str]:
    if s is None or not isinstance(s, str) or not s.strip():
        return "Answer required."
    if len(s) > LEN_LIMIT:
        return "Answer too long (> 100)."
    if _ALLOWED_RE.fullmatch(s) is None:
        return _INVALID_CHARS_MSG
    return None


def _clean(text: str) -> str:
    text = _CURRENCY_RE.sub("", text)
    return _THOUSANDS_RE.sub("", text).strip()


def _assert_finite_sym(val: Any) -> None:
    if getattr(val, "is_finite", None) is False:
        raise ValueError(_NON_FINITE_MSG)
    if val in (oo, -oo, zoo, nan):
        raise ValueError(_NON_FINITE_MSG)


def eval_numeric(text: str) -> float:
    """
    Evaluate a plain numeric answer ("12", "12.5", "3/4", "$1,250") to a float.
    Raises ValueError with a user-facing message when the text is not a number.
    """
    cleaned = _clean(text) if isinstance(text, str) else text
    msg = validate_answer_text(cleaned)
    if msg:
        raise ValueError(msg)

    # Fast path: plain number without going through sympy.
    try:
        val = float(cleaned)
    except ValueError:
        try:
            sym = parse_expr(cleaned, transformations=TRANSFORMS, evaluate=True)
        except Exception:
            raise ValueError(_INVALID_CHARS_MSG)
        if hasattr(sym, "count_ops") and sym.count_ops() > _MAX_OPS:
            raise ValueError(_TOO_COMPLEX_MSG)
        _assert_finite_sym(sym)
        try:
            val = float(sym.evalf())
        except (TypeError, ValueError):
            raise ValueError(_INVALID_CHARS_MSG)

    if not math.isfinite(val):
        raise ValueError(_NON_FINITE_MSG)
    return val


def to_number(value: Any) -> float:
    """Coerce a JSON value (number or numeric string) to float."""
    if isinstance(value, bool):
        raise ValueError("Answer must be a number.")
    if isinstance(value, (int, float)):
        val = float(value)
        if not math.isfinite(val):
            raise ValueError(_NON_FINITE_MSG)
        return val
    if isinstance(value, str):
        return eval_numeric(value)
    raise ValueError("Answer must be a number.")


def answers_match(user_answer: float, correct_answer: float) -> bool:
    return abs(float(user_answer) - float(correct_answer)) < ANSWER_TOLERANCE


def format_number(x: float) -> str:
    """Render whole floats without a trailing .0 ("42" rather than "42.0")."""
    if math.isfinite(x) and abs(x - round(x)) < 1e-12:
        return str(int(round(x)))
    return str(x)
