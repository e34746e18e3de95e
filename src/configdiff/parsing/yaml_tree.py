#!/usr/bin/env python3
"""
CONFIGDIFF YAML PARSER - Indentation Tree Builder
-------------------------------------------------
Recursive-descent parser for the simplified YAML dialect used in
application config files: nested `key: value` mappings with full-line
`#` comments. Comments are attached to the key that follows them.

Deliberately NOT supported: anchors/aliases, flow collections, block
scalars, tags, multi-document streams. Sequence items (`- x`) are kept
as synthetic `_array_<line>` keys rather than as an ordered list.

Author: ConfigDiff Team
Date: 2026-10-18
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Optional

from configdiff.core.models import FlatEntry, YamlNode
from configdiff.parsing.properties import normalize_text

ARRAY_KEY_PREFIX = "_array_"


def indent_of(line: str) -> int:
    """Column of the first non-whitespace character, -1 for blank lines."""
    content = line.lstrip()
    if not content:
        return -1
    return len(line) - len(content)


@dataclass
class LineCursor:
    """
    Read position over the physical lines of one document. A fresh cursor
    is created per parse() call and threaded through the recursion.
    """
    lines: List[str]
    position: int = 0

    @property
    def exhausted(self) -> bool:
        return self.position >= len(self.lines)

    @property
    def current(self) -> str:
        return self.lines[self.position]

    def advance(self):
        self.position += 1

    def peek_indent(self) -> int:
        if self.exhausted:
            return -1
        return indent_of(self.current)


class YamlParser:
    """
    Builds, sorts, renders and flattens YamlNode trees.
    Holds no per-document state, so one instance is safe to share.
    """

    # Group 1: Key (no colon or hash), Group 2: Rest of line
    KEY_VALUE_PATTERN = re.compile(r'^([^:#]+):\s*(.*)$')

    def parse(self, text: Optional[str]) -> YamlNode:
        if text is None:
            return YamlNode.branch({})

        cursor = LineCursor(normalize_text(str(text)).split('\n'))
        return YamlNode.branch(self._parse_level(cursor, 0))

    def _parse_level(self, cursor: LineCursor, base_indent: int) -> Dict[str, YamlNode]:
        nodes: Dict[str, YamlNode] = {}
        pending_comments: List[str] = []

        while not cursor.exhausted:
            stripped = cursor.current.strip()

            # 1. Blank lines never end a level
            if not stripped:
                cursor.advance()
                continue

            # 2. Comments wait for the next key
            if stripped.startswith('#'):
                pending_comments.append(stripped)
                cursor.advance()
                continue

            # 3. Level boundaries
            indent = indent_of(cursor.current)
            if indent < base_indent:
                break
            # The root level (base 0) never stops on deeper lines
            if indent > base_indent and base_indent != 0:
                break

            # 4. Key/value pairs, possibly opening a nested block
            match = self.KEY_VALUE_PATTERN.match(stripped)
            if match:
                key = match.group(1).strip()
                value = match.group(2).strip()
                cursor.advance()

                next_indent = cursor.peek_indent()
                if next_indent > indent:
                    nodes[key] = YamlNode.branch(self._parse_level(cursor, next_indent), pending_comments)
                elif value == '':
                    nodes[key] = YamlNode.branch({}, pending_comments)
                else:
                    nodes[key] = YamlNode.leaf(value, pending_comments)
                pending_comments = []

            # 5. Sequence items degrade to line-numbered keys
            elif stripped.startswith('-'):
                nodes[f"{ARRAY_KEY_PREFIX}{cursor.position}"] = YamlNode.leaf(stripped[1:].strip(), pending_comments)
                cursor.advance()
                pending_comments = []

            else:
                cursor.advance()

        return nodes

    def sort_recursively(self, node: YamlNode) -> YamlNode:
        """Returns a copy of `node` with every mapping level key-sorted."""
        if not node.is_mapping:
            return node

        ordered = {}
        for key in sorted(node.children):
            child = node.children[key]
            ordered[key] = self.sort_recursively(child) if child.is_mapping else child

        return YamlNode.branch(ordered, node.comments)

    def stringify(self, node: YamlNode, depth: int = 0) -> str:
        if not node.is_mapping:
            return node.text

        lines = []
        indent_str = '  ' * depth

        for key, child in node.children.items():
            for comment in child.comments:
                lines.append(indent_str + comment)

            if child.has_children:
                lines.append(f"{indent_str}{key}:")
                lines.append(self.stringify(child, depth + 1))
            else:
                lines.append(f"{indent_str}{key}: {child.text}")

        return '\n'.join(lines)

    def flatten(self, node: YamlNode, prefix: str = "") -> List[FlatEntry]:
        """
        Depth-first walk producing one FlatEntry per leaf, keyed by its
        dotted path. Comments on intermediate mappings are not carried.
        """
        if not node.is_mapping:
            return [FlatEntry(prefix, node.text, node.comments)]

        result = []
        for key, child in node.children.items():
            full_key = f"{prefix}.{key}" if prefix else key

            if child.has_children:
                result.extend(self.flatten(child, full_key))
            else:
                result.append(FlatEntry(full_key, child.text, child.comments))

        return result
