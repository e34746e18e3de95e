#!/usr/bin/env python3
"""
CONFIGDIFF ENGINE - The File Orchestrator
-----------------------------------------
CompareEngine sits between the CLI and the pure comparison core. It owns
everything the core deliberately does not: file I/O, input size limits,
pre-flight validation, logging, and atomic write-back of canonicalized
files.

Author: ConfigDiff Team
Date: 2026-10-18
"""

import os
import shutil
import time
import logging
from pathlib import Path
from typing import Dict, Any, List, Optional, Union

from configdiff.core.models import ConfigFormat
from configdiff.parsing.context import CompareContext
from configdiff.parsing.pipeline import ComparePipeline
from configdiff.validator.validator import DocumentValidator

logger = logging.getLogger("configdiff.engine")

DEFAULT_MAX_INPUT_BYTES = 1024 * 1024

SUFFIX_FORMATS = {
    ".properties": ConfigFormat.PROPERTIES,
    ".yaml": ConfigFormat.YAML,
    ".yml": ConfigFormat.YAML,
}


class CompareEngine:
    """
    Compares config files (or raw texts) and returns report dicts.
    Failures never escape as exceptions; they come back as error reports.
    """

    def __init__(self, workspace_path: str = ".", max_input_bytes: int = DEFAULT_MAX_INPUT_BYTES,
                 validate: bool = True, strict: bool = False):
        self.workspace = Path(workspace_path).resolve()
        try:
            self.max_input_bytes = int(max_input_bytes)
        except (ValueError, TypeError):
            logger.warning(f"Invalid max_input_bytes '{max_input_bytes}'. Falling back to default.")
            self.max_input_bytes = DEFAULT_MAX_INPUT_BYTES
        self.validate = validate
        self.strict = strict

        self.pipeline = ComparePipeline()
        self.validator = DocumentValidator()

    def detect_format(self, path: Union[str, Path], explicit: Union[str, ConfigFormat, None] = None) -> ConfigFormat:
        if explicit:
            return ConfigFormat.coerce(explicit)
        return SUFFIX_FORMATS.get(Path(path).suffix.lower(), ConfigFormat.PROPERTIES)

    def _resolve(self, path: Union[str, Path]) -> Path:
        return (self.workspace / path).resolve()

    def compare_files(self, left: Union[str, Path], right: Union[str, Path],
                      fmt: Union[str, ConfigFormat, None] = None) -> Dict[str, Any]:
        label = f"{left} <-> {right}"
        left_path, right_path = self._resolve(left), self._resolve(right)

        for path in (left_path, right_path):
            if not path.is_file():
                return self._file_error(label, "FILE_NOT_FOUND", f"Path missing: {path}")
            size = path.stat().st_size
            if size > self.max_input_bytes:
                return self._file_error(
                    label, "INPUT_TOO_LARGE",
                    f"{path.name} is {size} bytes, limit is {self.max_input_bytes}"
                )

        try:
            fmt = self.detect_format(left_path, fmt)
            left_text = left_path.read_text(encoding='utf-8-sig')
            right_text = right_path.read_text(encoding='utf-8-sig')
        except (OSError, UnicodeDecodeError, ValueError) as e:
            logger.error(f"Error reading {label}: {str(e)}")
            return self._file_error(label, "ENGINE_ERROR", str(e))

        report = self.compare_texts(left_text, right_text, fmt, label=label)
        report["left"] = str(left)
        report["right"] = str(right)
        return report

    def compare_texts(self, left_text: Optional[str], right_text: Optional[str],
                      fmt: Union[str, ConfigFormat], label: str = "<text>") -> Dict[str, Any]:
        warnings: List[str] = []

        try:
            fmt = ConfigFormat.coerce(fmt)

            for side, text in (("left", left_text), ("right", right_text)):
                if text is not None and len(text.encode('utf-8')) > self.max_input_bytes:
                    return self._file_error(label, "INPUT_TOO_LARGE",
                                            f"{side} input exceeds {self.max_input_bytes} bytes")

            # Pre-flight validation
            if self.validate:
                for side, text in (("left", left_text), ("right", right_text)):
                    valid, message, notes = self.validator.validate(text, fmt)
                    warnings.extend(f"{side}: {note}" for note in notes)
                    if not valid:
                        warnings.append(f"{side}: {message}")
                        if self.strict:
                            report = self._file_error(label, "VALIDATION_FAILED", message)
                            report["warnings"] = warnings
                            return report

            context = self.pipeline.run(left_text, right_text, fmt)
            context.warnings.extend(warnings)

        except Exception as e:
            logger.error(f"Error comparing {label}: {str(e)}")
            return self._file_error(label, "ENGINE_ERROR", str(e))

        for warning in context.warnings:
            logger.debug(f"{label}: {warning}")

        return self._build_report(label, context)

    def _build_report(self, label: str, context: CompareContext) -> Dict[str, Any]:
        return {
            "file_path": label,
            "format": context.format.value,
            "status": "CHANGED" if context.has_changes else "IDENTICAL",
            "success": True,
            "rows": context.rows,
            "counts": context.counts(),
            "warnings": context.warnings,
            "timestamp": time.time()
        }

    def canonicalize_file(self, relative_path: Union[str, Path], fmt: Union[str, ConfigFormat, None] = None,
                          dry_run: bool = True, force: bool = False) -> Dict[str, Any]:
        """
        Sorts a single file into canonical key order, optionally writing it back.
        A YAML rewrite that would lose content is refused unless `force` is set.
        """
        full_path = self._resolve(relative_path)
        if not full_path.is_file():
            return self._file_error(str(relative_path), "FILE_NOT_FOUND", f"Path missing: {full_path}")

        try:
            fmt = self.detect_format(full_path, fmt)
            raw_text = full_path.read_text(encoding='utf-8-sig')
            if len(raw_text.encode('utf-8')) > self.max_input_bytes:
                return self._file_error(str(relative_path), "INPUT_TOO_LARGE",
                                        f"File exceeds {self.max_input_bytes} bytes")
            document = self.pipeline.canonicalize(raw_text, fmt)
            canonical = self.pipeline.render(document)
        except Exception as e:
            logger.error(f"Error processing {relative_path}: {str(e)}")
            return self._file_error(str(relative_path), "ENGINE_ERROR", str(e))

        is_modified = raw_text.rstrip('\n') != canonical.rstrip('\n')
        result = {
            "file_path": str(relative_path),
            "format": fmt.value,
            "status": "UNCHANGED" if not is_modified else ("PREVIEW" if dry_run else "SORTED"),
            "success": True,
            "written": False,
            "backup_created": None,
            "original_content": raw_text,
            "canonical_content": canonical,
            "timestamp": time.time()
        }

        if not dry_run and is_modified:
            findings = self.validator.rewrite_findings(raw_text, canonical, fmt)
            if findings and not force:
                logger.warning(f"Refusing to rewrite {relative_path}: {len(findings)} lossy construct(s)")
                result.update(status="UNSAFE_REWRITE", success=False, findings=findings)
                return result

            backup_path = self._create_unique_backup(full_path)
            try:
                shutil.copy2(full_path, backup_path)
                result["backup_created"] = str(backup_path)
            except OSError as e:
                result["backup_warning"] = f"Backup failed: {str(e)}"

            try:
                content = canonical if canonical.endswith("\n") else canonical + "\n"
                self._atomic_write(full_path, content)
                result["written"] = True
            except IOError as e:
                result["write_error"] = str(e)
                result["success"] = False

        return result

    def generate_summary(self, reports: List[Dict[str, Any]]) -> Dict[str, Any]:
        totals = {"added": 0, "removed": 0, "modified": 0, "unchanged": 0}
        for r in reports:
            for status, count in r.get("counts", {}).items():
                totals[status] = totals.get(status, 0) + count

        return {
            "total_comparisons": len(reports),
            "identical": sum(1 for r in reports if r.get("status") == "IDENTICAL"),
            "changed": sum(1 for r in reports if r.get("status") == "CHANGED"),
            "errors": sum(1 for r in reports if not r.get("success", False)),
            "warnings": sum(len(r.get("warnings", [])) for r in reports),
            **totals,
            "summary_timestamp": time.strftime("%Y-%m-%d %H:%M:%S")
        }

    def _atomic_write(self, target_path: Path, content: str):
        if not os.access(target_path.parent, os.W_OK):
            raise PermissionError(f"No write access to {target_path.parent}")
        temp_file = target_path.with_suffix(target_path.suffix + '.configdiff.tmp')
        try:
            temp_file.write_text(content, encoding='utf-8')
            os.replace(temp_file, target_path)
        except Exception as e:
            if temp_file.exists():
                temp_file.unlink()
            raise IOError(f"Atomic write failed: {str(e)}")

    def _create_unique_backup(self, target_path: Path) -> Path:
        backup_path = target_path.with_name(f"{target_path.name}.configdiff.backup")
        counter = 1
        while backup_path.exists():
            backup_path = target_path.with_name(f"{target_path.name}-{counter}.configdiff.backup")
            counter += 1
        return backup_path

    def _file_error(self, path: str, status: str, error: str) -> Dict[str, Any]:
        return {
            "file_path": path, "status": status, "error": error,
            "success": False, "rows": [], "counts": {}, "warnings": []
        }
