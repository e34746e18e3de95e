#!/usr/bin/env python3
"""
CONFIGDIFF COMPARISON CONTEXT
-----------------------------
The record of a single comparison: what came in, what it was
canonicalized to, and the rows that came out. Created by the
ComparePipeline and filled in phase by phase.

Author: ConfigDiff Team
Date: 2026-10-18
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from configdiff.core.models import CanonicalDocument, ConfigFormat, DiffRow, DiffStatus


@dataclass
class CompareContext:
    format: ConfigFormat
    left_text: str = ""                               # Raw left input
    right_text: str = ""                              # Raw right input
    left: Optional[CanonicalDocument] = None          # Sorted left document
    right: Optional[CanonicalDocument] = None         # Sorted right document
    rows: List[DiffRow] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def counts(self) -> Dict[str, int]:
        totals = {status.value: 0 for status in DiffStatus}
        for row in self.rows:
            totals[row.status.value] += 1
        return totals

    @property
    def has_changes(self) -> bool:
        return any(row.status is not DiffStatus.UNCHANGED for row in self.rows)
