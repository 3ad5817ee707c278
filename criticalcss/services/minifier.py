"""Deterministic whitespace and comment stripping for CSS text."""

from __future__ import annotations

import re

_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
_WHITESPACE_RE = re.compile(r"\s+")
_PUNCTUATION_RE = re.compile(r"\s*([{}:;,])\s*")
_TRAILING_SEMICOLON_RE = re.compile(r";+}")


def _minify_once(css: str) -> str:
    css = _COMMENT_RE.sub("", css)
    css = _WHITESPACE_RE.sub(" ", css)
    css = _PUNCTUATION_RE.sub(r"\1", css)
    css = _TRAILING_SEMICOLON_RE.sub("}", css)
    return css.strip()


def minify_css(css: str) -> str:
    """Minify CSS text without parsing it.

    Each pass only deletes characters, so repeating it until the text stops
    changing terminates and makes the result idempotent (a pass can expose a
    new comment such as ``/*a*/`` inside ``//*x*/*a*/``).
    """

    current = css or ""
    while True:
        minified = _minify_once(current)
        if minified == current:
            return minified
        current = minified
