"""ASCII folding used for keyword and placeholder matching."""

import re

import icu

_FOLD = icu.Transliterator.createInstance("Any-Latin; Latin-ASCII; Lower")
_WHITESPACE_RE = re.compile(r"\s+")


def fold(text: str) -> str:
    """Return lowercase ASCII text with whitespace runs collapsed.

    Folding is used only for matching; stored values keep their original form.
    """
    if not text:
        return ""
    return _WHITESPACE_RE.sub(" ", _FOLD.transliterate(text)).strip()
