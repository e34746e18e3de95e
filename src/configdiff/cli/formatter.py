# src/configdiff/cli/formatter.py
import json
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from configdiff.core.models import CharSegment, ConfigFormat, DiffRow, DiffStatus, SegmentRole

# Initialize the Rich console for high-quality terminal output
console = Console()



class DiffFormatter:
    """
    DiffFormatter: side-by-side rendering of DiffRows.
    Left column is the old document, right column the new one.
    """

    def __init__(self, output: Optional[Console] = None):
        self.console = output or console

    def highlight_line(self, row: DiffRow, segments: List[CharSegment], role: SegmentRole) -> Text:
        """
        Renders `key<sep>` plus the value, marking characters of `role`.
        Characters belonging to the other side are skipped.
        """
        separator = "=" if row.format is ConfigFormat.PROPERTIES else ": "
        style = "bold white on dark_green" if role is SegmentRole.ADDED else "bold white on dark_red"

        text = Text(f"{row.key}{separator}")
        for segment in segments:
            if segment.role is role:
                text.append(segment.text, style=style)
            elif segment.role is SegmentRole.UNCHANGED:
                text.append(segment.text)
        return text

    def build_table(self, rows: List[DiffRow], title: str = "Config Diff") -> Table:
        table = Table(title=title, show_header=True, header_style="bold magenta", expand=True)
        table.add_column("", width=1, justify="center")
        table.add_column("Left", ratio=1, overflow="fold")
        table.add_column("", width=1, justify="center")
        table.add_column("Right", ratio=1, overflow="fold")

        for row in rows:
            if row.status is DiffStatus.ADDED:
                table.add_row("", "", Text("+", style="green"), Text(row.right_line, style="green"))
            elif row.status is DiffStatus.REMOVED:
                table.add_row(Text("-", style="red"), Text(row.left_line, style="red"), "", "")
            elif row.status is DiffStatus.MODIFIED:
                if row.left_segments is not None and row.right_segments is not None:
                    left = self.highlight_line(row, row.left_segments, SegmentRole.REMOVED)
                    right = self.highlight_line(row, row.right_segments, SegmentRole.ADDED)
                else:
                    left, right = Text(row.left_line), Text(row.right_line)
                table.add_row(Text("-", style="red"), left, Text("+", style="green"), right)
            else:
                table.add_row("", Text(row.left_line, style="dim"), "", Text(row.right_line, style="dim"))

        return table

    def display_diff(self, rows: List[DiffRow], title: str = "Config Diff", changes_only: bool = False):
        if changes_only:
            rows = [r for r in rows if r.status is not DiffStatus.UNCHANGED]

        if not rows:
            self.console.print("[dim]ℹ No differences found.[/dim]")
            return

        self.console.print(self.build_table(rows, title))

    def display_json(self, report: Dict[str, Any]):
        payload = {k: v for k, v in report.items() if k != "rows"}
        payload["rows"] = [row.to_dict() for row in report.get("rows", [])]
        self.console.print_json(json.dumps(payload, ensure_ascii=False))

    def show_warnings(self, warnings: List[str]):
        for warning in warnings:
            self.console.print(f"[bold yellow]⚠  Warning:[/bold yellow] {escape(warning)}")

    def show_summary(self, report: Dict[str, Any]):
        counts = report.get("counts", {})
        self.console.print(Panel(
            f"[bold white]Summary Report[/bold white]\n"
            f"════════════════════════════════════════\n"
            f"Format:     {report.get('format', 'unknown')}\n"
            f"Added:      [green]{counts.get('added', 0)}[/green]\n"
            f"Removed:    [red]{counts.get('removed', 0)}[/red]\n"
            f"Modified:   [yellow]{counts.get('modified', 0)}[/yellow]\n"
            f"Unchanged:  {counts.get('unchanged', 0)}",
            border_style="dim"
        ))
