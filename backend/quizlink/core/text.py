from __future__ import annotations

STUDENT_NAME_MAX = 100
STUDENT_IDENTIFIER_MAX = 50

_ESCAPES = (
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#039;"),
)


def sanitize_input(value: str) -> str:
    # "&" is intentionally not escaped.
    out = str(value or "")
    for raw, escaped in _ESCAPES:
        out = out.replace(raw, escaped)
    return out.strip()


def sanitize_capped(value: str, max_len: int) -> str:
    return sanitize_input(value)[:max_len]


def sanitize_optional(value: str | None) -> str | None:
    if not value:
        return None
    return sanitize_input(value)
