#!/usr/bin/env python3
"""
CONFIGDIFF CHARACTER DIFFER - LCS Engine
----------------------------------------
Character-level alignment of two values via a full Longest Common
Subsequence table. O(len(a) * len(b)) time and memory: fine for config
values, callers should cap input size for anything pathological.

Author: ConfigDiff Team
Date: 2026-10-18
"""

from typing import List, Optional, Tuple

from configdiff.core.models import CharSegment, SegmentRole


def compute_lcs(a: Optional[str], b: Optional[str]) -> List[List[int]]:
    """
    Returns the (len(a)+1) x (len(b)+1) LCS length table. Row and column 0
    stay zero for the empty prefixes.
    """
    a = a or ''
    b = b or ''
    m, n = len(a), len(b)
    table = [[0] * (n + 1) for _ in range(m + 1)]

    for i in range(1, m + 1):
        for j in range(1, n + 1):
            if a[i - 1] == b[j - 1]:
                table[i][j] = table[i - 1][j - 1] + 1
            else:
                table[i][j] = max(table[i - 1][j], table[i][j - 1])

    return table


def highlight_differences(a: Optional[str], b: Optional[str]) -> Tuple[List[CharSegment], List[CharSegment]]:
    """
    Backtracks the LCS table into (left, right) segment lists. Left holds
    UNCHANGED and REMOVED characters of `a`, right holds UNCHANGED and
    ADDED characters of `b`.

    On a tie the character from `b` is consumed first (`>=`), which fixes
    one alignment among several optimal ones.
    """
    a = a or ''
    b = b or ''
    table = compute_lcs(a, b)
    left: List[CharSegment] = []
    right: List[CharSegment] = []

    i, j = len(a), len(b)
    while i > 0 or j > 0:
        if i > 0 and j > 0 and a[i - 1] == b[j - 1]:
            left.append(CharSegment(a[i - 1], SegmentRole.UNCHANGED))
            right.append(CharSegment(b[j - 1], SegmentRole.UNCHANGED))
            i -= 1
            j -= 1
        elif j > 0 and (i == 0 or table[i][j - 1] >= table[i - 1][j]):
            right.append(CharSegment(b[j - 1], SegmentRole.ADDED))
            j -= 1
        else:
            left.append(CharSegment(a[i - 1], SegmentRole.REMOVED))
            i -= 1

    # Built back to front
    left.reverse()
    right.reverse()
    return left, right
