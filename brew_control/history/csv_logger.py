"""
Buffered CSV logging of every tick record.

The in-memory HistoryBuffer only keeps a window; the logger streams the whole
run to disk in the same export format.

Features:
- Buffered writes, flushed on buffer size or time interval
- Thread-safe operation
- Rows are re-queued if a write fails
"""

from typing import Sequence
from pathlib import Path
import csv
import time
import threading
from collections import deque

from brew_control.history.buffer import CSV_HEADER, DECIMALS, HistoryRecord
from brew_control.utils.validators import InvalidConfiguration


class CSVLogger:
    """
    CSV logger with buffering for long simulation runs.
    
    Example:
        >>> logger = CSVLogger("run.csv")
        >>> logger.log(HistoryRecord(0.1, 72.0, 25.01, 100.0))
        >>> logger.close()
    """
    
    def __init__(
        self,
        file_path: str,
        buffer_size: int = 100,
        flush_interval: float = 1.0,
        decimals: int = DECIMALS
    ):
        """
        Initialize CSV logger.
        
        Args:
            file_path: Path to CSV file
            buffer_size: Number of rows to buffer before writing
            flush_interval: Maximum seconds between flushes
            decimals: Decimal places for every numeric field
        """
        if buffer_size < 1:
            raise InvalidConfiguration("buffer_size must be at least 1")
        if flush_interval <= 0:
            raise InvalidConfiguration("flush_interval must be positive")
        
        self._file_path = Path(file_path)
        self._buffer_size = buffer_size
        self._flush_interval = flush_interval
        self._decimals = decimals
        
        self._lock = threading.Lock()
        self._buffer: deque = deque()
        self._last_flush_time = time.monotonic()
        self._total_rows = 0
        
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        self._file = open(self._file_path, 'w', newline='', encoding='utf-8')
        self._writer = csv.writer(self._file, lineterminator='\n')
        self._writer.writerow(CSV_HEADER)
        self._closed = False
    
    def log(self, record: HistoryRecord) -> None:
        """Queue one record."""
        if self._closed:
            raise RuntimeError("Logger is closed")
        
        with self._lock:
            self._buffer.append(record.to_row(self._decimals))
            self._total_rows += 1
            should_flush = (
                len(self._buffer) >= self._buffer_size or
                time.monotonic() - self._last_flush_time >= self._flush_interval
            )
        
        if should_flush:
            self.flush()
    
    def log_batch(self, records: Sequence[HistoryRecord]) -> None:
        """Queue several records at once."""
        if self._closed:
            raise RuntimeError("Logger is closed")
        
        rows = [r.to_row(self._decimals) for r in records]
        with self._lock:
            self._buffer.extend(rows)
            self._total_rows += len(rows)
            should_flush = len(self._buffer) >= self._buffer_size
        
        if should_flush:
            self.flush()
    
    def flush(self) -> None:
        """Flush buffer to disk."""
        with self._lock:
            if not self._buffer or self._closed:
                return
            rows_to_write = list(self._buffer)
            self._buffer.clear()
            self._last_flush_time = time.monotonic()
        
        try:
            self._writer.writerows(rows_to_write)
            self._file.flush()
        except OSError as e:
            with self._lock:
                self._buffer.extendleft(reversed(rows_to_write))
            raise RuntimeError(f"Failed to write to CSV: {e}") from e
    
    def close(self) -> None:
        """Close logger and flush remaining data."""
        if self._closed:
            return
        
        self.flush()
        with self._lock:
            self._closed = True
            self._file.close()
    
    @property
    def file_path(self) -> Path:
        return self._file_path
    
    @property
    def total_rows(self) -> int:
        """Total number of logged rows."""
        return self._total_rows
    
    @property
    def buffer_count(self) -> int:
        """Rows waiting to be written."""
        return len(self._buffer)
    
    @property
    def closed(self) -> bool:
        return self._closed
    
    def __enter__(self):
        return self
    
    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
