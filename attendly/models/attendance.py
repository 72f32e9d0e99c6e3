"""Attendance records and per-student summary counters."""
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Any

from attendly.utils.helpers import to_iso, parse_iso

class AttendanceStatus(Enum):
    """Attendance status enumeration."""
    ON_TIME = "onTime"
    LATE = "late"
    ABSENT = "absent"

@dataclass(frozen=True)
class AttendanceRecord:
    """One check-in. Never mutated once written to the ledger."""
    session_id: str
    student_id: str
    status: AttendanceStatus
    timestamp: datetime
    location_verified: bool
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'id': self.id,
            'session_id': self.session_id,
            'student_id': self.student_id,
            'status': self.status.value,
            'timestamp': to_iso(self.timestamp),
            'location_verified': self.location_verified
        }
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AttendanceRecord':
        return cls(
            id=data['id'],
            session_id=data['session_id'],
            student_id=data['student_id'],
            status=AttendanceStatus(data['status']),
            timestamp=parse_iso(data['timestamp']),
            location_verified=bool(data['location_verified'])
        )

@dataclass
class AttendanceSummary:
    """Rolling on-time/late/absent counters for one student."""
    on_time_count: int = 0
    late_count: int = 0
    absent_count: int = 0
    
    @property
    def total(self) -> int:
        return self.on_time_count + self.late_count + self.absent_count
    
    @property
    def attendance_percentage(self) -> float:
        """On-time share of all records, 100 when there are none."""
        if self.total == 0:
            return 100.0
        return self.on_time_count / self.total * 100
    
    def increment(self, status: AttendanceStatus) -> None:
        if status is AttendanceStatus.ON_TIME:
            self.on_time_count += 1
        elif status is AttendanceStatus.LATE:
            self.late_count += 1
        else:
            self.absent_count += 1
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            'on_time_count': self.on_time_count,
            'late_count': self.late_count,
            'absent_count': self.absent_count,
            'attendance_percentage': self.attendance_percentage
        }
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AttendanceSummary':
        return cls(
            on_time_count=int(data.get('on_time_count', 0)),
            late_count=int(data.get('late_count', 0)),
            absent_count=int(data.get('absent_count', 0))
        )
