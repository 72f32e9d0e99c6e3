"""Append-only attendance records with per-student summaries."""
import logging
import threading
from typing import Dict, List, Optional, Tuple, Any

from attendly.models.attendance import AttendanceRecord, AttendanceSummary
from attendly.utils.observable import Observable

logger = logging.getLogger(__name__)

class DuplicateAttendanceError(Exception):
    """Raised when a second record is appended for the same session and student."""
    pass

class AttendanceLedger(Observable):
    """Append-only store of attendance records."""
    
    def __init__(self, lock: Optional[threading.RLock] = None):
        super().__init__(lock)
        self._records: List[AttendanceRecord] = []
        self._index: Dict[Tuple[str, str], AttendanceRecord] = {}
        self._summaries: Dict[str, AttendanceSummary] = {}
    
    def append(self, record: AttendanceRecord) -> AttendanceRecord:
        """Add a record and bump exactly one counter of its student's summary."""
        key = (record.session_id, record.student_id)
        with self.lock:
            if key in self._index:
                raise DuplicateAttendanceError(
                    f"Student {record.student_id} already recorded for session {record.session_id}"
                )
            self._records.append(record)
            self._index[key] = record
            self._summaries.setdefault(record.student_id, AttendanceSummary()).increment(record.status)
        
        logger.info(
            "Recorded %s for student %s in session %s",
            record.status.value, record.student_id, record.session_id
        )
        self._notify('record_appended', record)
        return record
    
    def has_record(self, session_id: str, student_id: str) -> bool:
        return (session_id, student_id) in self._index
    
    def find(self, session_id: str, student_id: str) -> Optional[AttendanceRecord]:
        return self._index.get((session_id, student_id))
    
    def records_for(self, student_id: str) -> List[AttendanceRecord]:
        """Records of a student, newest first."""
        records = [r for r in self._records if r.student_id == student_id]
        return sorted(records, key=lambda r: r.timestamp, reverse=True)
    
    def records_for_session(self, session_id: str) -> List[AttendanceRecord]:
        return [r for r in self._records if r.session_id == session_id]
    
    def all_records(self) -> List[AttendanceRecord]:
        return list(self._records)
    
    def count_for(self, session_id: str) -> int:
        """Number of attendees recorded for a session."""
        return sum(1 for r in self._records if r.session_id == session_id)
    
    def summary_for(self, student_id: str) -> AttendanceSummary:
        """Copy of the student's counters; zeros if the student is unknown."""
        summary = self._summaries.get(student_id)
        if summary is None:
            return AttendanceSummary()
        return AttendanceSummary(summary.on_time_count, summary.late_count, summary.absent_count)
    
    def set_summary(self, student_id: str, summary: AttendanceSummary) -> None:
        """Seed counters carried over from before this ledger existed."""
        with self.lock:
            self._summaries[student_id] = AttendanceSummary(
                summary.on_time_count, summary.late_count, summary.absent_count
            )
    
    def to_dict(self) -> Dict[str, Any]:
        with self.lock:
            return {
                'attendance_records': [r.to_dict() for r in self._records],
                'attendance_summaries': {k: v.to_dict() for k, v in self._summaries.items()}
            }
    
    def load(self, data: Dict[str, Any]) -> None:
        """
        Replace state with a snapshot from ``to_dict``.
        
        Summaries are restored as saved rather than recounted from the
        records, since they may include counts from before the records.
        """
        with self.lock:
            if 'attendance_records' in data:
                self._records = [AttendanceRecord.from_dict(r) for r in data['attendance_records']]
                self._index = {(r.session_id, r.student_id): r for r in self._records}
            if 'attendance_summaries' in data:
                self._summaries = {
                    k: AttendanceSummary.from_dict(v) for k, v in data['attendance_summaries'].items()
                }
