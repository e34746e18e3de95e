#!/usr/bin/env python3
"""
CONFIGDIFF CORE MODELS
----------------------
Defines the fundamental data structures used across the ConfigDiff engine.
Every structure is built once per comparison and never mutated afterwards.

Author: ConfigDiff Team
Date: 2026-10-18
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union


class ConfigFormat(str, Enum):
    """The two document dialects the engine understands."""
    PROPERTIES = "properties"
    YAML = "yaml"

    @classmethod
    def coerce(cls, value: Union[str, "ConfigFormat", None]) -> "ConfigFormat":
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.PROPERTIES
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unsupported format '{value}'. Use 'properties' or 'yaml'.")


class EntryKind(str, Enum):
    BLANK = "blank"
    COMMENT = "comment"
    PROPERTY = "property"


@dataclass(frozen=True)
class Entry:
    """
    One logical line of a properties document.

    A PROPERTY entry may span several physical lines when continuation
    backslashes were used; `line` then holds the joined text.
    """
    kind: EntryKind
    line: str = ""                  # The raw (joined) text, kept verbatim
    key: Optional[str] = None       # Only set for PROPERTY entries
    value: Optional[str] = None     # Only set for PROPERTY entries
    malformed: bool = False         # True if degraded from an unparseable property line

    @classmethod
    def blank(cls) -> "Entry":
        return cls(EntryKind.BLANK, "")

    @classmethod
    def comment(cls, line: str, malformed: bool = False) -> "Entry":
        return cls(EntryKind.COMMENT, line, malformed=malformed)

    @classmethod
    def prop(cls, key: str, value: str, line: str) -> "Entry":
        return cls(EntryKind.PROPERTY, line, key=key, value=value)

    @property
    def is_property(self) -> bool:
        return self.kind is EntryKind.PROPERTY


@dataclass(frozen=True)
class YamlNode:
    """
    A node of the simplified YAML tree.

    Exactly one of `scalar` / `children` carries the value: a leaf holds a
    string, a branch holds an ordered key -> YamlNode mapping. An empty
    mapping is the placeholder for a key written with no value.
    """
    scalar: Optional[str] = None
    children: Optional[Dict[str, "YamlNode"]] = None
    comments: Tuple[str, ...] = ()

    @classmethod
    def leaf(cls, value: str, comments: Tuple[str, ...] = ()) -> "YamlNode":
        return cls(scalar=value, comments=tuple(comments))

    @classmethod
    def branch(cls, children: Dict[str, "YamlNode"], comments: Tuple[str, ...] = ()) -> "YamlNode":
        return cls(children=dict(children), comments=tuple(comments))

    @property
    def is_mapping(self) -> bool:
        return self.children is not None

    @property
    def has_children(self) -> bool:
        return bool(self.children)

    @property
    def text(self) -> str:
        """Scalar text for display; empty mappings read as ''."""
        return self.scalar if self.scalar is not None else ""


@dataclass(frozen=True)
class FlatEntry:
    """The unit of comparison: one dotted-path leaf."""
    key: str
    value: str
    comments: Tuple[str, ...] = ()


class SegmentRole(str, Enum):
    UNCHANGED = "unchanged"
    ADDED = "added"
    REMOVED = "removed"


@dataclass(frozen=True)
class CharSegment:
    text: str
    role: SegmentRole


class DiffStatus(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class DiffRow:
    """
    One displayed line pair. Segments are only populated for MODIFIED rows.
    """
    status: DiffStatus
    key: str
    format: ConfigFormat
    left_line: str = ""
    right_line: str = ""
    left_segments: Optional[List[CharSegment]] = None
    right_segments: Optional[List[CharSegment]] = None

    def to_dict(self) -> dict:
        def _segments(segs):
            if segs is None:
                return None
            return [{"text": s.text, "type": s.role.value} for s in segs]

        return {
            "status": self.status.value,
            "key": self.key,
            "format": self.format.value,
            "left_line": self.left_line,
            "right_line": self.right_line,
            "left_highlight": _segments(self.left_segments),
            "right_highlight": _segments(self.right_segments),
        }


@dataclass(frozen=True)
class CanonicalDocument:
    """
    A parsed and key-sorted document, ready for comparison.
    Properties documents carry `entries`; YAML documents carry `root`.
    """
    format: ConfigFormat
    entries: Tuple[Entry, ...] = field(default_factory=tuple)
    root: YamlNode = field(default_factory=lambda: YamlNode.branch({}))
