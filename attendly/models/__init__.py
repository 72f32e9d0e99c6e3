"""Models package with all models."""
from .base import BaseModel
from .stored_blob import StoredBlob
from .class_section import ClassSection, ClassForm, Coordinate
from .session import Session
from .attendance import AttendanceRecord, AttendanceStatus, AttendanceSummary
from .profile import StudentProfile, ProfessorProfile
from .token import TokenPayload

__all__ = [
    'BaseModel', 'StoredBlob',
    'ClassSection', 'ClassForm', 'Coordinate',
    'Session', 'AttendanceRecord', 'AttendanceStatus', 'AttendanceSummary',
    'StudentProfile', 'ProfessorProfile', 'TokenPayload'
]
