#!/usr/bin/env python3
"""
CONFIGDIFF CLI - Side-by-Side Config Comparison
-----------------------------------------------
Primary interface: compares two .properties or YAML files after sorting
both into canonical key order, and renders a key-level diff with
character highlights for modified values.

Author: ConfigDiff Team
Date: 2026-10-18
"""

import sys
import argparse
import logging
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax

from configdiff.cli.formatter import DiffFormatter
from configdiff.core.engine import CompareEngine, DEFAULT_MAX_INPUT_BYTES

VERSION = "1.0.0"

# Global console for consistent styling across the application
console = Console()


class ConfigDiffCLI:
    """
    CLI wrapper that translates user commands into Engine actions.
    """

    def __init__(self, output: Optional[Console] = None):
        self.console = output or console
        self.formatter = DiffFormatter(self.console)
        self.parser = argparse.ArgumentParser(
            prog="configdiff",
            description="ConfigDiff - Order-insensitive diff for .properties and YAML config files",
            formatter_class=argparse.RawDescriptionHelpFormatter
        )
        self._setup_args()

    def _setup_args(self):
        self.parser.add_argument("-v", "--version", action="version", version=f"configdiff v{VERSION}")
        self.parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
        subparsers = self.parser.add_subparsers(dest="command", metavar="Command")

        # 'compare' subcommand
        compare_parser = subparsers.add_parser("compare", help="🔍 Compare two config files")
        compare_parser.add_argument("left", help="Original file")
        compare_parser.add_argument("right", help="Changed file")
        compare_parser.add_argument("--format", choices=["properties", "yaml"],
                                    help="Document format (default: from file extension)")
        compare_parser.add_argument("--changes-only", action="store_true", help="Hide unchanged keys")
        compare_parser.add_argument("--json", action="store_true", help="Print the diff as JSON")
        compare_parser.add_argument("--max-size", type=int, default=DEFAULT_MAX_INPUT_BYTES,
                                    help=f"Reject inputs larger than this many bytes (default: {DEFAULT_MAX_INPUT_BYTES})")
        compare_parser.add_argument("--strict", action="store_true", help="Fail if a YAML input is not well-formed")
        compare_parser.add_argument("--no-validate", action="store_true", help="Skip pre-flight validation")

        # 'sort' subcommand
        sort_parser = subparsers.add_parser("sort", help="🔤 Print or write a file in canonical key order")
        sort_parser.add_argument("path", help="Config file to sort")
        sort_parser.add_argument("--format", choices=["properties", "yaml"],
                                 help="Document format (default: from file extension)")
        sort_parser.add_argument("--in-place", action="store_true", help="Write the sorted result back to the file")
        sort_parser.add_argument("-y", "--yes", action="store_true", help="Skip the confirmation prompt")
        sort_parser.add_argument("--force", action="store_true",
                                 help="Write even if the file uses YAML constructs the sort cannot keep")

    def print_header(self, subtitle: str):
        self.console.print(Panel.fit(
            f"[bold cyan]ConfigDiff v{VERSION}[/bold cyan]",
            title=f"[bold white]{subtitle}[/bold white]",
            border_style="cyan"
        ))

    def _compare(self, args: argparse.Namespace) -> int:
        engine = CompareEngine(
            max_input_bytes=args.max_size,
            validate=not args.no_validate,
            strict=args.strict
        )
        report = engine.compare_files(args.left, args.right, args.format)

        if args.json:
            self.formatter.display_json(report)
            return 0 if report["success"] else 1

        if not report["success"]:
            self.formatter.show_warnings(report.get("warnings", []))
            self.console.print(f"[bold red]Error ({report['status']}):[/bold red] {escape(str(report.get('error')))}")
            return 1

        self.formatter.show_warnings(report["warnings"])
        self.formatter.display_diff(
            report["rows"],
            title=f"{escape(args.left)}  ⟷  {escape(args.right)}",
            changes_only=args.changes_only
        )
        self.formatter.show_summary(report)
        return 0

    def _sort(self, args: argparse.Namespace) -> int:
        engine = CompareEngine()
        preview = engine.canonicalize_file(args.path, args.format, dry_run=True)
        if not preview["success"]:
            self.console.print(f"[bold red]Error ({preview['status']}):[/bold red] {escape(str(preview.get('error')))}")
            return 1

        if not args.in_place:
            lexer = "yaml" if preview["format"] == "yaml" else "properties"
            self.console.print(Syntax(preview["canonical_content"], lexer, theme="monokai", line_numbers=True))
            return 0

        if preview["status"] == "UNCHANGED":
            self.console.print(f"[dim]ℹ {escape(args.path)} is already in canonical order.[/dim]")
            return 0

        if not args.yes:
            choice = self.console.input(f"\n[bold yellow]Rewrite {escape(args.path)} in sorted order? (y/N): [/bold yellow]").lower()
            if choice != 'y':
                self.console.print("[bold red]Operation cancelled by user.[/bold red]")
                return 1

        result = engine.canonicalize_file(args.path, args.format, dry_run=False, force=args.force)
        if result["status"] == "UNSAFE_REWRITE":
            self.formatter.show_warnings(result.get("findings", []))
            self.console.print(f"[bold red]Refusing to rewrite {escape(args.path)}:[/bold red] "
                               "sorting would lose content. Use --force to write anyway.")
            return 1
        if not result["written"]:
            self.console.print(f"[bold red]Write failed:[/bold red] {escape(str(result.get('write_error', result.get('error'))))}")
            return 1

        self.console.print(f"[green]✅ Sorted {escape(args.path)}[/green] (backup: {escape(str(result['backup_created']))})")
        return 0

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Primary routing entry point."""
        argv = sys.argv[1:] if argv is None else argv
        if not argv:
            self.print_header("Config Diff")
            self.parser.print_help()
            return 0

        args = self.parser.parse_args(argv)
        logging.basicConfig(
            level=logging.DEBUG if args.verbose else logging.WARNING,
            format="%(message)s",
            handlers=[RichHandler(console=self.console, show_path=False)]
        )

        if args.command == "compare":
            if not args.json:
                self.print_header("Config Compare")
            return self._compare(args)
        if args.command == "sort":
            return self._sort(args)

        self.parser.print_help()
        return 0


def main():
    """Application entry point with interrupt handling."""
    try:
        sys.exit(ConfigDiffCLI().run())
    except KeyboardInterrupt:
        console.print("\n[bold red]Terminated by user.[/bold red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
