#!/usr/bin/env python3
"""
CONFIGDIFF DIFF ENGINE
----------------------
Key-level comparison of two canonical documents. Every key in the union
of both sides yields exactly one DiffRow, in plain lexicographic key
order; modified values also get a character-level highlight.

Author: ConfigDiff Team
Date: 2026-10-18
"""

from typing import Dict, Iterable, List, Optional, Union

from configdiff.core.models import (
    CanonicalDocument, ConfigFormat, DiffRow, DiffStatus, Entry, FlatEntry, YamlNode
)
from configdiff.diff.lcs import highlight_differences
from configdiff.parsing.yaml_tree import YamlParser

DocumentBody = Union[CanonicalDocument, Iterable[Entry], YamlNode, None]


class DiffEngine:

    def __init__(self):
        self.yaml_parser = YamlParser()

    def compare(self, left: DocumentBody, right: DocumentBody,
                fmt: Union[str, ConfigFormat] = ConfigFormat.PROPERTIES) -> List[DiffRow]:
        fmt = ConfigFormat.coerce(fmt)
        if left is None and right is None:
            return []

        left_map = self._to_map(left, fmt)
        right_map = self._to_map(right, fmt)

        rows = []
        for key in sorted(set(left_map) | set(right_map)):
            # Membership, not truthiness: '' is a legitimate value
            has_left = key in left_map
            has_right = key in right_map
            left_value = left_map.get(key)
            right_value = right_map.get(key)

            if has_right and not has_left:
                rows.append(DiffRow(
                    status=DiffStatus.ADDED, key=key, format=fmt,
                    right_line=self.format_line(key, right_value, fmt)
                ))
            elif has_left and not has_right:
                rows.append(DiffRow(
                    status=DiffStatus.REMOVED, key=key, format=fmt,
                    left_line=self.format_line(key, left_value, fmt)
                ))
            elif left_value != right_value:
                left_segments, right_segments = highlight_differences(left_value, right_value)
                rows.append(DiffRow(
                    status=DiffStatus.MODIFIED, key=key, format=fmt,
                    left_line=self.format_line(key, left_value, fmt),
                    right_line=self.format_line(key, right_value, fmt),
                    left_segments=left_segments,
                    right_segments=right_segments
                ))
            else:
                line = self.format_line(key, left_value, fmt)
                rows.append(DiffRow(
                    status=DiffStatus.UNCHANGED, key=key, format=fmt,
                    left_line=line, right_line=line
                ))

        return rows

    def _to_map(self, body: DocumentBody, fmt: ConfigFormat) -> Dict[str, str]:
        if isinstance(body, CanonicalDocument):
            if body.format is not fmt:
                raise ValueError(f"Cannot compare a {body.format.value} document as {fmt.value}.")
            body = body.entries if body.format is ConfigFormat.PROPERTIES else body.root

        if fmt is ConfigFormat.PROPERTIES:
            return self.properties_to_map(body)
        if isinstance(body, YamlNode):
            return self.yaml_to_map(self.yaml_parser.flatten(body))
        return self.yaml_to_map(body)

    def properties_to_map(self, entries: Optional[Iterable[Entry]]) -> Dict[str, str]:
        """Later duplicates win; comments and blanks are dropped."""
        mapping: Dict[str, str] = {}
        if entries is None or isinstance(entries, YamlNode):
            return mapping
        for entry in entries:
            if isinstance(entry, Entry) and entry.is_property:
                mapping[entry.key or ''] = entry.value or ''
        return mapping

    def yaml_to_map(self, flat_entries: Optional[Iterable[FlatEntry]]) -> Dict[str, str]:
        mapping: Dict[str, str] = {}
        if flat_entries is None:
            return mapping
        for entry in flat_entries:
            if isinstance(entry, FlatEntry):
                mapping[entry.key or ''] = entry.value or ''
        return mapping

    @staticmethod
    def format_line(key: Optional[str], value: Optional[str],
                    fmt: Union[str, ConfigFormat] = ConfigFormat.PROPERTIES) -> str:
        key = key if key is not None else ''
        value = value if value is not None else ''
        if ConfigFormat.coerce(fmt) is ConfigFormat.PROPERTIES:
            return f"{key}={value}"
        return f"{key}: {value}"
