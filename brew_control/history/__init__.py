"""History retention and export of simulation samples."""

from brew_control.history.buffer import (
    HistoryRecord,
    HistoryBuffer,
    CSV_HEADER,
    export_filename,
    format_csv,
    read_csv,
    records_to_arrays,
)
from brew_control.history.csv_logger import CSVLogger

__all__ = [
    "HistoryRecord",
    "HistoryBuffer",
    "CSV_HEADER",
    "export_filename",
    "format_csv",
    "read_csv",
    "records_to_arrays",
    "CSVLogger",
]
