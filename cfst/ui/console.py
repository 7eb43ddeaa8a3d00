"""Console rendering of the result table."""

import unicodedata

from PySide6.QtCore import Qt

from cfst.models import ProbeRecord
from cfst.ui.result_model import ResultTableModel


def display_width(text: str) -> int:
    """Terminal cell width of text; CJK characters take two cells."""
    return sum(2 if unicodedata.east_asian_width(ch) in ("W", "F") else 1 for ch in text)


def pad(text: str, width: int, right: bool) -> str:
    fill = " " * max(0, width - display_width(text))
    return fill + text if right else text + fill


def is_right_aligned(model: ResultTableModel, column: int) -> bool:
    """Whether the model asks for column to be right-aligned."""
    if model.rowCount() == 0:
        return False
    alignment = model.data(model.index(0, column), Qt.TextAlignmentRole)
    return alignment is not None and bool(alignment & Qt.AlignRight)


def render_table(model: ResultTableModel, limit: int) -> list[str]:
    """Render the first limit rows of model as aligned text lines."""
    rows = min(limit, model.rowCount())
    columns = model.columnCount()

    cells = [[model.headerData(col, Qt.Horizontal) for col in range(columns)]]
    for row in range(rows):
        cells.append([model.data(model.index(row, col)) for col in range(columns)])

    widths = [max(display_width(line[col]) for line in cells) for col in range(columns)]
    right_aligned = [is_right_aligned(model, col) for col in range(columns)]

    return [
        "  ".join(pad(text, widths[col], right_aligned[col]) for col, text in enumerate(line))
        for line in cells
    ]


def print_results(records: list[ProbeRecord], limit: int) -> None:
    """Print the top rows of the result set; limit 0 skips the table."""
    if limit <= 0:
        return

    if not records:
        print("\n[信息] 完整测速结果 IP 数量为 0，跳过输出结果。")
        return

    model = ResultTableModel(records)
    print()
    for line in render_table(model, limit):
        print(line)
