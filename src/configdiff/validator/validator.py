#!/usr/bin/env python3
"""
CONFIGDIFF VALIDATOR - Pre-Flight Check
---------------------------------------
Optional gate run by the CompareEngine before the core parsers see a
document. The core never fails on bad input, it degrades; this module
is where those degradations become visible to the user.

YAML is checked against a real YAML loader (ruamel.yaml) and scanned for
constructs the simplified dialect does not model. Properties documents
are checked for lines that could not be read as a key/value pair.

Author: ConfigDiff Team
Date: 2026-10-18
"""

import logging
import re
from typing import List, Optional, Tuple, Union

from ruamel.yaml import YAML, YAMLError

from configdiff.core.models import ConfigFormat
from configdiff.parsing.properties import PropertiesParser, normalize_text

logger = logging.getLogger("configdiff.validator")


class DocumentValidator:
    """
    Produces (valid, message) verdicts plus advisory warnings for a
    single document.
    """

    ANCHOR_PATTERN = re.compile(r':\s*[&*][\w-]+')
    BLOCK_SCALAR_PATTERN = re.compile(r':\s*[|>][-+]?\d*\s*$')
    FLOW_PATTERN = re.compile(r':\s*[\[{]')

    def __init__(self):
        self.yaml = YAML(typ='safe')
        self.properties = PropertiesParser()

    def validate(self, text: Optional[str], fmt: Union[str, ConfigFormat]) -> Tuple[bool, str, List[str]]:
        """Returns (valid, message, warnings)."""
        fmt = ConfigFormat.coerce(fmt)
        text = text or ""

        if fmt is ConfigFormat.YAML:
            valid, message = self.check_yaml_structure(text)
            return valid, message, self.unsupported_yaml_features(text)

        warnings = self.malformed_property_lines(text)
        return True, "Properties document parsed.", warnings

    def check_yaml_structure(self, text: str) -> Tuple[bool, str]:
        """Structural validation via ruamel.yaml."""
        try:
            docs = [doc for doc in self.yaml.load_all(normalize_text(text)) if doc is not None]
        except YAMLError as e:
            mark = getattr(e, 'problem_mark', None) or getattr(e, 'context_mark', None)
            if mark:
                return False, f"STRUCTURE_ERROR:L{mark.line + 1}:C{mark.column + 1}:{str(e)}"
            return False, f"STRUCTURE_ERROR:{str(e)}"

        if docs and not isinstance(docs[0], dict):
            return False, "STRUCTURE_ERROR:Top level of the document is not a mapping."
        return True, "STRUCTURE_OK"

    def unsupported_yaml_features(self, text: str) -> List[str]:
        warnings = []
        seen_content = False

        for i, line in enumerate(normalize_text(text).split('\n'), 1):
            stripped = line.strip()
            if not stripped or stripped.startswith('#'):
                continue

            if stripped == '---':
                if seen_content:
                    warnings.append(f"Line {i}: multi-document stream, later documents are merged into one tree.")
                continue
            seen_content = True

            if stripped.startswith('-'):
                warnings.append(f"Line {i}: sequence item compared as a line-numbered key.")
            elif self.ANCHOR_PATTERN.search(stripped):
                warnings.append(f"Line {i}: anchor/alias compared as plain text.")
            elif self.BLOCK_SCALAR_PATTERN.search(stripped):
                warnings.append(f"Line {i}: block scalar content is not joined into the value.")
            elif self.FLOW_PATTERN.search(stripped):
                warnings.append(f"Line {i}: flow collection compared as plain text.")

        if warnings:
            logger.debug(f"{len(warnings)} unsupported YAML construct(s) found")
        return warnings

    def malformed_property_lines(self, text: str) -> List[str]:
        return [
            f"Unparseable line kept as comment: {entry.line.strip()}"
            for entry in self.properties.parse(text)
            if entry.malformed
        ]

    def rewrite_findings(self, original: str, canonical: str, fmt: Union[str, ConfigFormat]) -> List[str]:
        """
        Reasons why writing `canonical` over `original` would lose content.
        Properties sorting keeps every line, so only YAML is checked.
        """
        if ConfigFormat.coerce(fmt) is not ConfigFormat.YAML:
            return []

        findings = []
        valid, message = self.check_yaml_structure(original)
        if not valid:
            findings.append(message)
        findings.extend(self.unsupported_yaml_features(original))

        lost = self._count_comments(original) - self._count_comments(canonical)
        if lost > 0:
            findings.append(f"{lost} comment line(s) would be dropped.")
        return findings

    def _count_comments(self, text: str) -> int:
        return sum(1 for line in normalize_text(text).split('\n') if line.strip().startswith('#'))
