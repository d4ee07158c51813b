"""Label canonicalization for header/field comparison."""

from __future__ import annotations

import re

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")

# Applied in order, after character stripping.
CONTRACTIONS: tuple[tuple[str, str], ...] = (
    ("number", "num"),
    ("address", "addr"),
    ("telephone", "phone"),
    ("email", "mail"),
)


def normalize(label: str) -> str:
    """Lowercase, drop everything but ASCII letters/digits, then contract synonyms.

    >>> normalize("E-Mail Address")
    'mailaddr'
    """
    text = _NON_ALNUM_RE.sub("", label.lower())
    for long, short in CONTRACTIONS:
        text = text.replace(long, short)
    return text
