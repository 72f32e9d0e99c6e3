"""CSV export of attendance records."""
import os
import uuid
from datetime import timezone
from pathlib import Path
from typing import Iterable

import pandas as pd

from attendly.models.attendance import AttendanceRecord

CSV_COLUMNS = ['recordId', 'sessionId', 'studentId', 'status', 'timestamp', 'locationVerified']

class ExportService:
    """Service for exporting attendance data."""
    
    @staticmethod
    def format_timestamp(record: AttendanceRecord) -> str:
        """UTC, second precision, ``Z`` suffix."""
        return record.timestamp.astimezone(timezone.utc).strftime('%Y-%m-%dT%H:%M:%SZ')
    
    @staticmethod
    def to_csv(records: Iterable[AttendanceRecord]) -> str:
        """
        Render records as CSV, one row per record in the given order.
        
        Header row first, LF line endings, trailing newline.
        """
        rows = [
            {
                'recordId': record.id,
                'sessionId': record.session_id,
                'studentId': record.student_id,
                'status': record.status.value,
                'timestamp': ExportService.format_timestamp(record),
                'locationVerified': 'true' if record.location_verified else 'false'
            }
            for record in records
        ]
        df = pd.DataFrame(rows, columns=CSV_COLUMNS, dtype=str)
        return df.to_csv(index=False, lineterminator='\n')
    
    @staticmethod
    def write_csv(records: Iterable[AttendanceRecord], directory: str) -> Path:
        """Write an export file and return its path."""
        os.makedirs(directory, exist_ok=True)
        path = Path(directory) / f"attendance-{uuid.uuid4()}.csv"
        path.write_text(ExportService.to_csv(records), encoding='utf-8')
        return path
