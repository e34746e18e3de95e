#!/usr/bin/env python3
"""
CONFIGDIFF PROPERTIES PARSER
----------------------------
Tokenizes Java-properties text into typed Entries, sorts them into a
canonical key order while keeping comment blocks glued to the key they
annotate, and renders them back to text.

Malformed lines are never fatal: anything that is not a blank, a comment
or a recognisable `key=value` / `key: value` / `key value` line is kept
as a comment so no text is lost.

Author: ConfigDiff Team
Date: 2026-10-18
"""

import re
from typing import Iterable, List, Optional, Tuple

from configdiff.core.models import Entry, EntryKind


def normalize_text(text: str) -> str:
    """Removes a UTF-8 BOM and turns CRLF line endings into LF. A lone CR is kept."""
    text = text.lstrip('\ufeff')
    return text.replace('\r\n', '\n')


class PropertiesParser:
    """
    Stateless parser for `.properties` documents. One instance may be
    reused across documents.
    """

    # Group 1: Key (no separator or whitespace), Group 2: Value
    SEPARATOR_PATTERN = re.compile(r'^([^=:\s]+)\s*[:=]\s*(.*)$')
    # Fallback: first token is the key, the rest is the value
    WHITESPACE_PATTERN = re.compile(r'^(\S+)\s+(.+)$')

    COMMENT_MARKERS = ('#', '!')

    def parse(self, text: Optional[str]) -> List[Entry]:
        if text is None:
            return []

        lines = normalize_text(str(text)).split('\n')
        entries = []
        i = 0

        while i < len(lines):
            line = lines[i]
            stripped = line.strip()

            if not stripped:
                entries.append(Entry.blank())
                i += 1
                continue

            if stripped.startswith(self.COMMENT_MARKERS):
                entries.append(Entry.comment(line))
                i += 1
                continue

            parsed = self._parse_property(lines, i)
            if parsed is None:
                # Unparseable: keep the physical line as a comment
                entries.append(Entry.comment(line, malformed=True))
                i += 1
                continue

            key, value, full_line, next_index = parsed
            entries.append(Entry.prop(key, value, full_line))
            i = next_index

        return entries

    def _join_continuations(self, lines: List[str], start: int) -> Tuple[str, int]:
        """
        Folds backslash-continued lines into one logical line.
        Returns the joined text and the index of the last consumed line.
        """
        full_line = lines[start]
        current = start

        while full_line.rstrip().endswith('\\') and current + 1 < len(lines):
            current += 1
            full_line = full_line.rstrip()[:-1] + lines[current]

        return full_line, current

    def _parse_property(self, lines: List[str], start: int) -> Optional[Tuple[str, str, str, int]]:
        full_line, last = self._join_continuations(lines, start)

        match = self.SEPARATOR_PATTERN.match(full_line) or self.WHITESPACE_PATTERN.match(full_line)
        if not match:
            return None

        key, value = match.groups()
        return key.strip(), value.strip(), full_line, last + 1

    def sort(self, entries: Optional[Iterable[Entry]]) -> List[Entry]:
        """
        Stable-sorts properties by key. Comments and blanks seen since the
        previous property travel with the next property; whatever trails
        the last property stays at the end.
        """
        if entries is None:
            return []

        groups: List[Tuple[Entry, List[Entry]]] = []
        pending: List[Entry] = []

        for entry in entries:
            if entry.kind is EntryKind.PROPERTY:
                groups.append((entry, pending))
                pending = []
            else:
                pending.append(entry)

        groups.sort(key=lambda group: self._collation_key(group[0].key))

        result = []
        for prop, comments in groups:
            result.extend(comments)
            result.append(prop)
        result.extend(pending)
        return result

    @staticmethod
    def _collation_key(key: Optional[str]) -> Tuple[str, str]:
        """
        Dictionary-style ordering: letters compare case-insensitively first,
        and on a tie the lowercase spelling sorts ahead of the uppercase one.
        """
        key = key or ""
        return key.casefold(), key.swapcase()

    def stringify(self, entries: Optional[Iterable[Entry]]) -> str:
        if entries is None:
            return ""
        return '\n'.join(
            f"{entry.key}={entry.value}" if entry.is_property else entry.line
            for entry in entries
        )
