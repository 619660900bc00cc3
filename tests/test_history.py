"""
Tests for the tick history window, CSV export and CSV logger.
"""

import re
import pytest
import sys
from datetime import datetime, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from brew_control.history.buffer import (
    CSV_HEADER,
    HistoryBuffer,
    HistoryRecord,
    export_filename,
    format_csv,
    read_csv,
    records_to_arrays,
)
from brew_control.history.csv_logger import CSVLogger
from brew_control.utils.validators import InvalidArgument, InvalidConfiguration


def make_records(count, start=1):
    return [
        HistoryRecord(time=0.1 * i, setpoint=72.0, temperature=25.0 + 0.01 * i, actuator=100.0 - i)
        for i in range(start, start + count)
    ]


class TestHistoryBuffer:
    """Test suite for HistoryBuffer."""
    
    def test_fifo_eviction(self):
        """Appending past capacity drops the oldest records first."""
        buffer = HistoryBuffer(capacity=5)
        for record in make_records(8):
            buffer.append(record)
        
        assert len(buffer) == 5
        assert buffer.is_full
        assert [r.time for r in buffer.export()] == pytest.approx([0.4, 0.5, 0.6, 0.7, 0.8])
    
    def test_never_exceeds_capacity(self):
        buffer = HistoryBuffer(capacity=600)
        for i, record in enumerate(make_records(1000)):
            buffer.append(record)
            assert len(buffer) == min(i + 1, 600)
    
    def test_export_is_snapshot(self):
        """An exported tuple does not change when the buffer does."""
        buffer = HistoryBuffer(capacity=3)
        records = make_records(4)
        for record in records[:3]:
            buffer.append(record)
        snapshot = buffer.export()
        buffer.append(records[3])
        
        assert snapshot == tuple(records[:3])
        assert buffer.latest() == records[3]
    
    def test_time_must_increase(self):
        buffer = HistoryBuffer()
        buffer.append(HistoryRecord(1.0, 72.0, 25.0, 0.0))
        with pytest.raises(InvalidArgument):
            buffer.append(HistoryRecord(1.0, 72.0, 25.0, 0.0))
        with pytest.raises(InvalidArgument):
            buffer.append(HistoryRecord(0.5, 72.0, 25.0, 0.0))
        assert len(buffer) == 1
    
    @pytest.mark.parametrize("capacity", [0, -1, 2.5, True])
    def test_invalid_capacity(self, capacity):
        with pytest.raises(InvalidConfiguration):
            HistoryBuffer(capacity=capacity)
    
    def test_clear(self):
        buffer = HistoryBuffer()
        for record in make_records(3):
            buffer.append(record)
        buffer.clear()
        assert len(buffer) == 0
        assert buffer.latest() is None
    
    def test_to_arrays(self):
        buffer = HistoryBuffer()
        for record in make_records(4):
            buffer.append(record)
        arrays = buffer.to_arrays()
        
        assert set(arrays) == {'time', 'setpoint', 'temperature', 'actuator'}
        assert arrays['actuator'].tolist() == [99.0, 98.0, 97.0, 96.0]
    
    def test_to_arrays_empty(self):
        arrays = records_to_arrays([])
        assert all(len(column) == 0 for column in arrays.values())


class TestCSVExport:
    """Export format."""
    
    def test_header(self):
        text = format_csv([])
        assert text == "Time (s),Setpoint (°C),Temperature (°C),Valve Position (%)\n"
    
    def test_fixed_decimals(self):
        """Every numeric field has exactly two decimals."""
        record = HistoryRecord(0.1, 72.0, 25.0113302, 100.0)
        assert record.to_row() == ['0.10', '72.00', '25.01', '100.00']
    
    def test_line_terminator(self):
        text = format_csv(make_records(3))
        assert '\r' not in text
        assert text.endswith('\n')
        assert len(text.splitlines()) == 4
    
    def test_export_filename(self):
        """ISO 8601 basic format in UTC, no colons."""
        when = datetime(2024, 3, 5, 14, 7, 9, tzinfo=timezone.utc)
        assert export_filename(when) == "temperature_control_data_20240305T140709Z.csv"
        assert re.fullmatch(r"temperature_control_data_\d{8}T\d{6}Z\.csv", export_filename())
    
    def test_write_into_directory(self, tmp_path):
        """A directory target receives a timestamped file."""
        buffer = HistoryBuffer()
        for record in make_records(5):
            buffer.append(record)
        when = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        
        path = buffer.write_csv(tmp_path, when=when)
        
        assert path == tmp_path / "temperature_control_data_20240102T030405Z.csv"
        assert path.read_text(encoding='utf-8') == buffer.to_csv_string()
    
    def test_write_to_file_creates_parents(self, tmp_path):
        buffer = HistoryBuffer()
        buffer.append(HistoryRecord(0.1, 72.0, 25.0, 100.0))
        path = buffer.write_csv(tmp_path / "runs" / "a.csv")
        assert path.exists()
    
    def test_diff_stable(self, tmp_path):
        """Reading an export and writing it again gives identical bytes."""
        path = tmp_path / "run.csv"
        path.write_text(format_csv(make_records(50)), encoding='utf-8')
        
        again = format_csv(read_csv(path))
        
        assert again == path.read_text(encoding='utf-8')
    
    def test_read_rejects_foreign_header(self, tmp_path):
        path = tmp_path / "other.csv"
        path.write_text("t,y\n1,2\n", encoding='utf-8')
        with pytest.raises(InvalidArgument):
            read_csv(path)
    
    def test_read_rejects_bad_row(self, tmp_path):
        path = tmp_path / "bad.csv"
        path.write_text(",".join(CSV_HEADER) + "\n0.10,72.00,abc,1.00\n", encoding='utf-8')
        with pytest.raises(InvalidArgument):
            read_csv(path)


class TestCSVLogger:
    """Test suite for CSVLogger."""
    
    def test_logs_every_record(self, tmp_path):
        path = tmp_path / "log.csv"
        records = make_records(250)
        with CSVLogger(path, buffer_size=100) as logger:
            for record in records:
                logger.log(record)
        
        assert logger.closed
        assert logger.total_rows == 250
        assert path.read_text(encoding='utf-8') == format_csv(records)
    
    def test_buffering(self, tmp_path):
        logger = CSVLogger(tmp_path / "log.csv", buffer_size=10, flush_interval=1000.0)
        logger.log_batch(make_records(3))
        assert logger.buffer_count == 3
        
        logger.flush()
        assert logger.buffer_count == 0
        logger.close()
    
    def test_log_after_close(self, tmp_path):
        logger = CSVLogger(tmp_path / "log.csv")
        logger.close()
        with pytest.raises(RuntimeError):
            logger.log(HistoryRecord(0.1, 72.0, 25.0, 0.0))
    
    def test_invalid_buffer_size(self, tmp_path):
        with pytest.raises(InvalidConfiguration):
            CSVLogger(tmp_path / "log.csv", buffer_size=0)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
