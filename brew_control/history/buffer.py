"""
Bounded in-memory history of tick records and its CSV export.

The export is diff-stable: fixed column order, fixed decimal places and a
plain newline terminator, so an exported file read back and written again is
byte-identical.
"""

from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Union
from dataclasses import dataclass, astuple
from datetime import datetime, timezone
from collections import deque
from pathlib import Path
import csv
import io
import logging

import numpy as np

from brew_control.utils.validators import InvalidArgument, InvalidConfiguration

_LOGGER = logging.getLogger(__name__)

CSV_HEADER = (
    "Time (s)",
    "Setpoint (°C)",
    "Temperature (°C)",
    "Valve Position (%)",
)
DECIMALS = 2
DEFAULT_CAPACITY = 600
EXPORT_PREFIX = "temperature_control_data"


@dataclass(frozen=True)
class HistoryRecord:
    """One down-sampled sample of the closed loop, taken once per tick."""
    time: float
    setpoint: float
    temperature: float
    actuator: float
    
    def to_row(self, decimals: int = DECIMALS) -> List[str]:
        """Format as CSV cells in export order."""
        return [f"{value:.{decimals}f}" for value in astuple(self)]
    
    def to_dict(self) -> Dict[str, float]:
        return {
            'time': self.time,
            'setpoint': self.setpoint,
            'temperature': self.temperature,
            'actuator': self.actuator,
        }


def export_filename(when: Optional[datetime] = None) -> str:
    """
    File name for an export, stamped with an ISO 8601 basic-format UTC time.
    
    The basic format has no colons, so the name is valid on every filesystem.
    """
    when = when if when is not None else datetime.now(timezone.utc)
    if when.tzinfo is not None:
        when = when.astimezone(timezone.utc)
    return f"{EXPORT_PREFIX}_{when.strftime('%Y%m%dT%H%M%SZ')}.csv"


class HistoryBuffer:
    """
    Fixed-capacity FIFO window of HistoryRecords.
    
    Appending past capacity evicts the oldest record. Readers get immutable
    tuples, so a snapshot handed to an observer never changes afterwards.
    """
    
    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        """
        Initialize history buffer.
        
        Args:
            capacity: Maximum number of records to keep
        """
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 1:
            raise InvalidConfiguration(f"capacity must be a positive integer, got {capacity!r}")
        self._capacity = capacity
        self._buffer: deque = deque(maxlen=capacity)
    
    @property
    def capacity(self) -> int:
        return self._capacity
    
    def append(self, record: HistoryRecord) -> None:
        """Add a record; evicts the oldest one when full."""
        if self._buffer and record.time <= self._buffer[-1].time:
            raise InvalidArgument(
                f"history is time ordered: {record.time} does not follow "
                f"{self._buffer[-1].time}"
            )
        self._buffer.append(record)
    
    def export(self) -> Tuple[HistoryRecord, ...]:
        """All retained records, oldest first."""
        return tuple(self._buffer)
    
    def latest(self) -> Optional[HistoryRecord]:
        return self._buffer[-1] if self._buffer else None
    
    def clear(self) -> None:
        self._buffer.clear()
    
    def __len__(self) -> int:
        return len(self._buffer)
    
    def __iter__(self) -> Iterator[HistoryRecord]:
        return iter(tuple(self._buffer))
    
    @property
    def is_full(self) -> bool:
        """Check if buffer is at max capacity."""
        return len(self._buffer) >= self._capacity
    
    def to_arrays(self) -> Dict[str, np.ndarray]:
        """Columns as numpy arrays, for charting and metrics."""
        records = self.export()
        return records_to_arrays(records)
    
    def to_csv_string(self, decimals: int = DECIMALS) -> str:
        """Render the retained records in the export format."""
        return format_csv(self.export(), decimals=decimals)
    
    def write_csv(
        self,
        target: Union[str, Path],
        decimals: int = DECIMALS,
        when: Optional[datetime] = None
    ) -> Path:
        """
        Write the export to a file.
        
        Args:
            target: File path, or an existing directory to receive a
                timestamped file name
            decimals: Decimal places for every numeric field
            when: Timestamp for the generated file name
            
        Returns:
            Path of the written file
        """
        path = Path(target)
        if path.is_dir():
            path = path / export_filename(when)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', newline='', encoding='utf-8') as f:
            f.write(self.to_csv_string(decimals=decimals))
        _LOGGER.info("Exported %d history records to %s", len(self), path)
        return path


def records_to_arrays(records: Iterable[HistoryRecord]) -> Dict[str, np.ndarray]:
    """Split records into numpy columns keyed by field name."""
    records = list(records)
    if not records:
        return {name: np.array([]) for name in ('time', 'setpoint', 'temperature', 'actuator')}
    data = np.array([astuple(r) for r in records], dtype=float)
    return {
        'time': data[:, 0],
        'setpoint': data[:, 1],
        'temperature': data[:, 2],
        'actuator': data[:, 3],
    }


def format_csv(records: Iterable[HistoryRecord], decimals: int = DECIMALS) -> str:
    """Header plus one fixed-format row per record."""
    out = io.StringIO()
    writer = csv.writer(out, lineterminator='\n')
    writer.writerow(CSV_HEADER)
    for record in records:
        writer.writerow(record.to_row(decimals))
    return out.getvalue()


def read_csv(path: Union[str, Path]) -> List[HistoryRecord]:
    """
    Load an exported history file.
    
    Raises:
        InvalidArgument: If the header does not match the export format
    """
    with open(path, 'r', newline='', encoding='utf-8') as f:
        reader = csv.reader(f)
        header = next(reader, None)
        if header is None or tuple(header) != CSV_HEADER:
            raise InvalidArgument(f"{path} is not a history export (header {header!r})")
        records = []
        for line_no, row in enumerate(reader, start=2):
            if not row:
                continue
            try:
                records.append(HistoryRecord(*(float(cell) for cell in row)))
            except (TypeError, ValueError) as e:
                raise InvalidArgument(f"{path}:{line_no}: bad row {row!r}: {e}")
        return records
