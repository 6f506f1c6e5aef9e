"""Patterns that must never appear in emitted output.

Their presence indicates leaked bundler runtime or foreign module-system
artifacts. The patterns are unanchored so violations are found regardless of
formatting; string literals containing them are flagged too.
"""

from __future__ import annotations

import re
from typing import Optional, Sequence

FORBIDDEN_RUNTIME_PATTERNS: Sequence[re.Pattern[str]] = (
    re.compile(r"__webpack_", re.IGNORECASE),
    re.compile(r"\.__esModule\b", re.IGNORECASE),
    re.compile(r"\bexports\.", re.IGNORECASE),
    re.compile(r"\bmodule\.exports\b", re.IGNORECASE),
    re.compile(r"Object\.defineProperty\s*\(\s*exports\b", re.IGNORECASE),
)


def first_violation(text: str) -> Optional[re.Pattern[str]]:
    """Return the first forbidden pattern found in ``text``, if any."""
    for pattern in FORBIDDEN_RUNTIME_PATTERNS:
        if pattern.search(text):
            return pattern
    return None


__all__ = ["FORBIDDEN_RUNTIME_PATTERNS", "first_violation"]
