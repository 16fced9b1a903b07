"""
Column aligned text tables.

Every cell except the last one of a row is padded to the width of its
column; the last cell is written as is.
"""

from typing import List


class Table:
    """Collects rows and formats them into aligned columns."""

    def __init__(self, min_width: int = 4, padding: int = 3):
        """
        Initialize the table.

        Args:
            min_width: Minimum width of a column, including padding
            padding: Spaces added to the widest cell of a column
        """
        self.min_width = min_width
        self.padding = padding
        self.rows: List[List[str]] = []

    def add_row(self, *cells: str) -> None:
        self.rows.append([str(c) for c in cells])

    def _widths(self) -> List[int]:
        widths: List[int] = []
        for row in self.rows:
            for i, cell in enumerate(row[:-1]):
                width = max(len(cell) + self.padding, self.min_width)
                if i == len(widths):
                    widths.append(width)
                elif width > widths[i]:
                    widths[i] = width
        return widths

    def render(self) -> str:
        widths = self._widths()
        lines = []
        for row in self.rows:
            padded = [cell.ljust(widths[i]) for i, cell in enumerate(row[:-1])]
            lines.append("".join(padded + row[-1:]) + "\n")
        return "".join(lines)
