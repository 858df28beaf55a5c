"""
Conversion summary printed at the end of a run.
"""
import textwrap
from pathlib import Path
from typing import Dict, List, Optional

CONVERTED = "YES"
NOT_CONVERTED = "NO"
MERGED = "MERGED"

TITLE = "CONVERSION SUMMARY"

# Widest a profile name column gets before names are wrapped
MAX_NAME_WIDTH = 40
MIN_PHYSICAL_PRINTER_WIDTH = 17


class ConversionRecord:
    """Outcome of converting one profile."""

    def __init__(self, profile_type: Optional[str], name: str, source_path: Path,
                 slicer_flavor: Optional[str], status: str, output_path: Path = None,
                 error: str = '', physical_printer: str = None):
        self.profile_type = profile_type
        self.name = name
        self.source_path = Path(source_path)
        self.slicer_flavor = slicer_flavor or "Unknown"
        self.status = status
        self.output_path = Path(output_path) if output_path else None
        self.error = error or ''
        self.physical_printer = physical_printer

    @property
    def table_title(self) -> str:
        return (self.profile_type or "unsupported").capitalize()


def _wrap(text: str, width: int) -> List[str]:
    lines = []
    for line in str(text).split('\n'):
        lines.extend(textwrap.wrap(line, width) or [''])
    return lines


def render_table(headings: List[str], widths: List[int], rows: List[List[str]]) -> str:
    """
    Draw a boxed text table.

    Headings and cells longer than their column width wrap onto more lines.
    """
    def border(left, middle, right):
        return left + middle.join('-' * (width + 2) for width in widths) + right

    def draw_row(cells):
        wrapped = [_wrap(cell, width) for cell, width in zip(cells, widths)]
        height = max(len(lines) for lines in wrapped)
        lines = []
        for index in range(height):
            parts = [
                (cell_lines[index] if index < len(cell_lines) else '').ljust(width)
                for cell_lines, width in zip(wrapped, widths)
            ]
            lines.append('| ' + ' | '.join(parts) + ' |')
        return lines

    lines = [border('.', '+', '.')]
    lines.extend(draw_row(headings))
    lines.append(border('+', '+', '+'))
    for row in rows:
        lines.extend(draw_row(row))
    lines.append(border("'", '+', "'"))
    return '\n'.join(lines)


def render_type_table(title: str, records: List[ConversionRecord]) -> str:
    """Table for the profiles of one type."""
    names = [record.name for record in records]
    name_width = min(max(len(name) for name in names), MAX_NAME_WIDTH)
    name_heading = f"{title} Profile Name"
    if name_width < len(name_heading):
        name_heading = f"{title} Profile\nName"
        name_width = max(name_width, len(f"{title} Profile"))

    headings = ["Source File\nGenerated By", name_heading]
    widths = [12, name_width]
    columns = [lambda record: record.slicer_flavor, lambda record: record.name]

    if title == 'Printer':
        printer_names = [record.physical_printer or "None" for record in records]
        printer_width = max(MIN_PHYSICAL_PRINTER_WIDTH, max(len(name) for name in printer_names))
        headings.append("Imported Physical Printer Data" if printer_width >= 30
                        else "Imported Physical\nPrinter Data")
        widths.append(printer_width)
        columns.append(lambda record: record.physical_printer or "None")

    headings.append("Converted?")
    widths.append(10)
    columns.append(lambda record: record.status)

    error_width = max(len(record.error) for record in records)
    if error_width:
        headings.append("Error")
        widths.append(max(error_width, len("Error")))
        columns.append(lambda record: record.error)

    rows = [[column(record) for column in columns] for record in records]
    return render_table(headings, widths, rows)


def render_summary(records: List[ConversionRecord]) -> str:
    """
    Render the summary of a run: one table per profile type, then the
    source and destination directories.

    Returns:
        The summary text, or an empty string if nothing was processed
    """
    if not records:
        return ''

    by_type: Dict[str, List[ConversionRecord]] = {}
    for record in records:
        by_type.setdefault(record.table_title, []).append(record)

    tables = {title: render_type_table(title, type_records)
              for title, type_records in by_type.items()}
    table_width = max(len(table.split('\n', 1)[0]) for table in tables.values())

    lines = [TITLE.center(table_width).rstrip()]
    for title, table in tables.items():
        lines.append('')
        lines.append(f"{title} Files Converted")
        lines.append(table)

    source_dir = records[0].source_path.parent
    output_dir = next((record.output_path.parent for record in records if record.output_path), '')
    lines.append('')
    lines.append(f"Source Directory:      {source_dir}")
    lines.append(f"Destination Directory: {output_dir}")
    return '\n'.join(lines)
