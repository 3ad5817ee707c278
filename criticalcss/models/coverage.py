"""Coverage data handed over by the rendering collaborator."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List


@dataclass(frozen=True)
class UsageRecord:
    """One style rule evaluated during a tracking window."""

    sheet_id: str
    start_offset: int
    end_offset: int
    used: bool


@dataclass
class CoverageSnapshot:
    """Usage records of the retained tracking window plus the text of every touched sheet."""

    usage: List[UsageRecord] = field(default_factory=list)
    sheet_texts: Dict[str, str] = field(default_factory=dict)
