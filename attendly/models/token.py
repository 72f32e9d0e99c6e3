"""Self-describing payload carried inside an attendance QR token."""
from dataclasses import dataclass
from typing import Dict, Any, Tuple

from attendly.models.class_section import ClassSection, Coordinate

# Shortest rotation window a token may carry, in seconds.
MIN_ROTATION_WINDOW_SECONDS = 1

# Wire key -> expected JSON types. bool is rejected separately for numbers.
PAYLOAD_FIELDS: Dict[str, Tuple[type, ...]] = {
    'sessionId': (str,),
    'classId': (str,),
    'bucket': (int,),
    'qrWindow': (int, float),
    'lateThresholdMinutes': (int,),
    'sessionStartTime': (int, float),
    'qrSeed': (str,),
    'className': (str,),
    'section': (str,),
    'semester': (str,),
    'room': (str,),
    'meetingDays': (list,),
    'geofenceRadius': (int, float),
    'latitude': (int, float),
    'longitude': (int, float),
}

@dataclass(frozen=True)
class TokenPayload:
    """
    Snapshot of a session and its class at one time bucket.
    
    Holds no reference to any store, so a device that has never seen the
    class can join and verify from the scan alone.
    """
    session_id: str
    class_id: str
    bucket: int
    rotation_window_seconds: float
    late_threshold_minutes: int
    session_start_time: float
    seed: str
    class_name: str
    section: str
    semester: str
    room: str
    meeting_days: Tuple[str, ...]
    geofence_radius: float
    latitude: float
    longitude: float
    
    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(latitude=self.latitude, longitude=self.longitude)
    
    def to_class_section(self, risk_score: float = 0.0) -> ClassSection:
        """Build the class this payload describes."""
        return ClassSection(
            id=self.class_id,
            name=self.class_name,
            section=self.section,
            semester=self.semester,
            room=self.room,
            meeting_days=list(self.meeting_days),
            geofence_radius=self.geofence_radius,
            risk_score=risk_score,
            coordinate=self.coordinate
        )
    
    def to_wire(self) -> Dict[str, Any]:
        """Convert to the camelCase dictionary serialised into tokens."""
        return {
            'sessionId': self.session_id,
            'classId': self.class_id,
            'bucket': self.bucket,
            'qrWindow': self.rotation_window_seconds,
            'lateThresholdMinutes': self.late_threshold_minutes,
            'sessionStartTime': self.session_start_time,
            'qrSeed': self.seed,
            'className': self.class_name,
            'section': self.section,
            'semester': self.semester,
            'room': self.room,
            'meetingDays': list(self.meeting_days),
            'geofenceRadius': self.geofence_radius,
            'latitude': self.latitude,
            'longitude': self.longitude
        }
    
    @classmethod
    def from_wire(cls, data: Dict[str, Any]) -> 'TokenPayload':
        """Build from an already type-checked wire dictionary."""
        return cls(
            session_id=data['sessionId'],
            class_id=data['classId'],
            bucket=data['bucket'],
            rotation_window_seconds=data['qrWindow'],
            late_threshold_minutes=data['lateThresholdMinutes'],
            session_start_time=data['sessionStartTime'],
            seed=data['qrSeed'],
            class_name=data['className'],
            section=data['section'],
            semester=data['semester'],
            room=data['room'],
            meeting_days=tuple(data['meetingDays']),
            geofence_radius=data['geofenceRadius'],
            latitude=data['latitude'],
            longitude=data['longitude']
        )
