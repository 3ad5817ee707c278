"""Recover structural CSS that coverage tends to miss.

Font faces, keyframes, ``:root`` custom properties and coarse selectors on
``html``/``body``/``*``/pseudo-elements are often needed for the first paint
even when the coverage window never exercised that exact rule. This is a
heuristic text scan over top-level blocks, not a CSS parser: a selector such
as ``.bodytext`` matches ``body`` and is kept, while anything nested in a
group at-rule such as ``@media print`` is left alone.
"""

from __future__ import annotations

import re
from typing import Iterator, List, Mapping, Sequence, Tuple

_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
_FONT_FACE_RE = re.compile(r"@font-face", re.IGNORECASE)
_KEYFRAMES_RE = re.compile(r"@keyframes\s+\S", re.IGNORECASE)

GLOBAL_SELECTOR_MARKERS = ("html", "body", "*", "::before", "::after")


def _top_level_blocks(css: str) -> Iterator[Tuple[str, str]]:
    """Yield ``(prelude, block)`` for every block whose opening brace sits at depth 0.

    Rules nested in ``@media``/``@supports`` only apply conditionally, so they
    stay inside their group block and are never yielded on their own.
    """

    depth = 0
    prelude_start = 0
    block_start = 0
    for index, char in enumerate(css):
        if char == "{":
            if depth == 0:
                block_start = index
            depth += 1
        elif char == "}":
            if depth == 0:
                prelude_start = index + 1
                continue
            depth -= 1
            if depth == 0:
                # Statements such as @import end with ';' and bleed into the next prelude.
                prelude = css[prelude_start:block_start].rsplit(";", 1)[-1].strip()
                yield prelude, css[block_start : index + 1]
                prelude_start = index + 1


def _is_simple(block: str) -> bool:
    return "{" not in block[1:-1]


def collect_global_base_blocks(css: str) -> List[str]:
    """Return deduplicated global blocks in extraction order."""

    if not css:
        return []

    top_level = [
        (prelude, block)
        for prelude, block in _top_level_blocks(_COMMENT_RE.sub("", css))
        if prelude
    ]

    blocks: List[str] = []
    blocks.extend(
        prelude + block
        for prelude, block in top_level
        if _FONT_FACE_RE.fullmatch(prelude) and _is_simple(block)
    )
    blocks.extend(prelude + block for prelude, block in top_level if _KEYFRAMES_RE.match(prelude))
    blocks.extend(prelude + block for prelude, block in top_level if prelude == ":root" and _is_simple(block))
    blocks.extend(
        prelude + block
        for prelude, block in top_level
        if not prelude.startswith("@")
        and _is_simple(block)
        and any(marker in prelude for marker in GLOBAL_SELECTOR_MARKERS)
    )
    return list(dict.fromkeys(blocks))


def extract_global_base(css: str) -> str:
    """Concatenate the global base blocks of ``css`` with newlines."""

    return "\n".join(collect_global_base_blocks(css))


def select_base_sheets(
    sheet_ids: Sequence[str],
    sheet_texts: Mapping[str, str],
    limit: int = 2,
) -> List[str]:
    """Pick the ``limit`` touched sheets with the longest text; large sheets usually hold base styles."""

    candidates = [sheet_id for sheet_id in sheet_ids if sheet_texts.get(sheet_id)]
    return sorted(candidates, key=lambda sheet_id: len(sheet_texts[sheet_id]), reverse=True)[:limit]
