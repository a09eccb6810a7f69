from __future__ import annotations

import math
import re
from typing import Any, Optional

from sympy import nan, oo, zoo
from sympy.parsing.sympy_parser import parse_expr, standard_transformations

LEN_LIMIT = 12
_REQUIRED_MSG = "Answer required."
_TOO_LONG_MSG = f"Answer too long (> {LEN_LIMIT})."
_INVALID_CHARS_MSG = "Only whole numbers are accepted."
# Typed answers are plain numbers; no operators, so "6*7" is not accepted as 42
_ALLOWED_RE = re.compile(r"^\s*[+-]?\s*[0-9]+(\.[0-9]*)?\s*$")
# Python number literals reject leading zeros ("042"), so drop them before parsing
_LEADING_ZEROS_RE = re.compile(r"^([+-]?)0+(?=\d)")


class AnswerRequired(ValueError):
    """Blank submission: nothing to evaluate yet."""


def validate_answer_text(s: Any) -> Optional[str]:
    if s is None or not isinstance(s, str) or not s.strip():
        return _REQUIRED_MSG
    if len(s) > LEN_LIMIT:
        return _TOO_LONG_MSG
    if _ALLOWED_RE.fullmatch(s) is None:
        return _INVALID_CHARS_MSG
    return None


def _text_to_int(text: str) -> Optional[int]:
    text = _LEADING_ZEROS_RE.sub(r"\1", text.replace(" ", ""))
    try:
        sym = parse_expr(text, transformations=standard_transformations, evaluate=True)
    except Exception:
        return None
    if sym in (oo, -oo, zoo, nan):
        return None
    if getattr(sym, "is_Integer", False):
        return int(sym)
    try:
        val = float(sym)
    except (TypeError, ValueError):
        return None
    if math.isfinite(val) and val == int(val):
        return int(val)
    return None


def parse_answer(value: Any) -> Optional[int]:
    """
    Turn a submitted answer into an int.

    Returns None for anything that is not a whole number, which never matches a
    product and is scored as a wrong answer. Raises ``AnswerRequired`` for blank text.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) and value == int(value) else None
    if value is None or (isinstance(value, str) and not value.strip()):
        raise AnswerRequired(_REQUIRED_MSG)
    if validate_answer_text(value) is not None:
        return None
    return _text_to_int(value)
