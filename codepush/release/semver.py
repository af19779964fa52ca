"""Semantic version range grammar for ``--target-binary-version``.

Accepts the npm-style range syntax used by CodePush clients to match
binary versions:

    1.2.3            exact version
    1.2 / 1.2.x / *  partial and wildcard versions
    ~1.2.3 ^1.2.3    tilde and caret ranges
    >=1.0.0 <2.0.0   comparator sets (whitespace = AND)
    1.0.0 - 1.4.0    hyphen ranges
    1.x || >=2.5.0   alternatives
"""

from __future__ import annotations

import re

__all__ = ["is_valid_range"]

_NR = r"(?:0|[1-9]\d*)"
_XR = rf"(?:[xX*]|{_NR})"
_PRE_ID = r"(?:0|[1-9]\d*|\d*[A-Za-z-][0-9A-Za-z-]*)"
_BUILD_ID = r"[0-9A-Za-z-]+"
_QUALIFIER = rf"(?:-{_PRE_ID}(?:\.{_PRE_ID})*)?(?:\+{_BUILD_ID}(?:\.{_BUILD_ID})*)?"
_PARTIAL = rf"=?v?{_XR}(?:\.{_XR}(?:\.{_XR}{_QUALIFIER})?)?"

_PARTIAL_RE = re.compile(rf"^{_PARTIAL}$")
_SIMPLE_RE = re.compile(rf"^(?:<=|>=|<|>|=|~>?|\^)?{_PARTIAL}$")
_HYPHEN_RE = re.compile(rf"^({_PARTIAL})\s+-\s+({_PARTIAL})$")
_OPERATOR_GAP_RE = re.compile(r"(<=|>=|<|>|=|~>?|\^)\s+")


def _is_valid_comparator_set(text: str) -> bool:
    text = text.strip()
    if not text:
        # An empty set matches any version, as in `1.x || ` or `""`.
        return True

    if _HYPHEN_RE.match(text):
        return True

    # ">= 1.2.3" is the same comparator as ">=1.2.3"
    text = _OPERATOR_GAP_RE.sub(r"\1", text)
    return all(_SIMPLE_RE.match(token) for token in text.split())


def is_valid_range(value: str) -> bool:
    """Return True if value parses as a version range."""
    if not value.strip():
        return False
    return all(_is_valid_comparator_set(part) for part in value.split("||"))
