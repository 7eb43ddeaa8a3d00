"""Qt table model for the final result set."""

from collections.abc import Iterable

from PySide6.QtCore import QAbstractTableModel, QModelIndex, Qt

from cfst.models import ProbeRecord
from cfst.results import CSV_HEADER, format_row


class ResultTableModel(QAbstractTableModel):
    """Read-only table model over ordered ProbeRecords.

    Cell text comes from the same formatter as the CSV export, so the console
    table and the result file always agree.
    """

    NUMERIC_COLUMNS = range(1, len(CSV_HEADER))

    def __init__(self, records: Iterable[ProbeRecord] = (), parent=None):
        super().__init__(parent)
        self._records = list(records)
        self._columns = list(CSV_HEADER)

    def rowCount(self, parent=QModelIndex()):
        """Return the number of rows (records)."""
        if parent.isValid():
            return 0
        return len(self._records)

    def columnCount(self, parent=QModelIndex()):
        """Return the number of columns."""
        if parent.isValid():
            return 0
        return len(self._columns)

    def data(self, index, role=Qt.DisplayRole):
        """Return data for a given cell."""
        if not index.isValid():
            return None

        if index.row() >= len(self._records) or index.row() < 0:
            return None

        if role == Qt.DisplayRole:
            return format_row(self._records[index.row()])[index.column()]

        if role == Qt.TextAlignmentRole:
            if index.column() in self.NUMERIC_COLUMNS:
                return Qt.AlignRight | Qt.AlignVCenter
            return Qt.AlignLeft | Qt.AlignVCenter

        return None

    def headerData(self, section, orientation, role=Qt.DisplayRole):
        """Return header data."""
        if role == Qt.DisplayRole and orientation == Qt.Horizontal:
            if 0 <= section < len(self._columns):
                return self._columns[section]
        return None
