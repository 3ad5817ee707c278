"""Turn rule-usage coverage into CSS text."""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

from criticalcss.models.coverage import UsageRecord

Span = Tuple[int, int]


def merge_ranges(ranges: Iterable[Sequence[int]]) -> List[Span]:
    """Coalesce overlapping or touching ``[start, end)`` ranges into sorted maximal spans.

    Zero-width and inverted ranges are dropped.
    """

    pairs = [(int(start), int(end)) for start, end in ranges]

    merged: List[Span] = []
    for start, end in sorted(pair for pair in pairs if pair[1] > pair[0]):
        if merged and start <= merged[-1][1]:
            merged[-1] = (merged[-1][0], max(merged[-1][1], end))
        else:
            merged.append((start, end))
    return merged


def group_used_ranges(usage: Iterable[UsageRecord]) -> Dict[str, List[Span]]:
    """Group used records by stylesheet (first-seen order) and merge each sheet's ranges."""

    by_sheet: Dict[str, List[Span]] = {}
    for record in usage:
        if not record.used:
            continue
        by_sheet.setdefault(record.sheet_id, []).append((record.start_offset, record.end_offset))
    return {sheet_id: merge_ranges(ranges) for sheet_id, ranges in by_sheet.items()}


def assemble_coverage(spans_by_sheet: Mapping[str, Sequence[Span]], sheet_texts: Mapping[str, str]) -> str:
    """Slice every sheet's text at its spans, one line per span."""

    parts: List[str] = []
    for sheet_id, spans in spans_by_sheet.items():
        text = sheet_texts.get(sheet_id) or ""
        if not text:
            continue
        size = len(text)
        for start, end in spans:
            start = min(max(start, 0), size)
            end = min(max(end, 0), size)
            if end > start:
                parts.append(text[start:end] + "\n")
    return "".join(parts)
