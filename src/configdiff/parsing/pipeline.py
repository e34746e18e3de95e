#!/usr/bin/env python3
"""
CONFIGDIFF PIPELINE - The Coordinator
-------------------------------------
Runs a comparison in a strict sequence:

    raw text x 2 -> parser -> canonical sort -> (flatten if YAML) -> diff

Each call builds fresh documents; nothing is shared between calls, so a
pipeline (and the module-level helpers below) can be used from several
threads at once.

Author: ConfigDiff Team
Date: 2026-10-18
"""

from typing import List, Optional, Union

from configdiff.core.models import CanonicalDocument, ConfigFormat, DiffRow
from configdiff.diff.differ import DiffEngine
from configdiff.parsing.context import CompareContext
from configdiff.parsing.properties import PropertiesParser
from configdiff.parsing.yaml_tree import YamlParser


class ComparePipeline:

    def __init__(self):
        self.properties = PropertiesParser()
        self.yaml = YamlParser()
        self.engine = DiffEngine()

    def canonicalize(self, text: Optional[str], fmt: Union[str, ConfigFormat]) -> CanonicalDocument:
        fmt = ConfigFormat.coerce(fmt)
        if fmt is ConfigFormat.PROPERTIES:
            entries = self.properties.sort(self.properties.parse(text))
            return CanonicalDocument(format=fmt, entries=tuple(entries))
        root = self.yaml.sort_recursively(self.yaml.parse(text))
        return CanonicalDocument(format=fmt, root=root)

    def render(self, document: CanonicalDocument) -> str:
        """Canonical text of a document (the format's stringify)."""
        if document.format is ConfigFormat.PROPERTIES:
            return self.properties.stringify(document.entries)
        return self.yaml.stringify(document.root)

    def run(self, left_text: Optional[str], right_text: Optional[str],
            fmt: Union[str, ConfigFormat]) -> CompareContext:
        fmt = ConfigFormat.coerce(fmt)
        context = CompareContext(format=fmt, left_text=left_text or "", right_text=right_text or "")

        # --- PHASE 1: PARSE & CANONICALIZE ---
        context.left = self.canonicalize(left_text, fmt)
        context.right = self.canonicalize(right_text, fmt)

        # --- PHASE 2: KEY-LEVEL DIFF ---
        context.rows = self.engine.compare(context.left, context.right, fmt)
        return context


def parse_and_canonicalize(text: Optional[str], fmt: Union[str, ConfigFormat]) -> CanonicalDocument:
    return ComparePipeline().canonicalize(text, fmt)


def diff(left: Optional[CanonicalDocument], right: Optional[CanonicalDocument],
         fmt: Union[str, ConfigFormat, None] = None) -> List[DiffRow]:
    """Diff two canonical documents; the format defaults to the documents' own."""
    if fmt is None:
        source = left or right
        fmt = source.format if source is not None else ConfigFormat.PROPERTIES
    return DiffEngine().compare(left, right, fmt)
