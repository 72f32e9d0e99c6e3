"""Class section model and the professor's create-class form."""
import uuid
from dataclasses import dataclass, field
from typing import Dict, Any, List

@dataclass(frozen=True)
class Coordinate:
    """A latitude/longitude pair in decimal degrees."""
    latitude: float
    longitude: float
    
    def to_dict(self) -> Dict[str, float]:
        return {'latitude': self.latitude, 'longitude': self.longitude}
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Coordinate':
        return cls(latitude=float(data['latitude']), longitude=float(data['longitude']))

@dataclass
class ClassForm:
    """Input collected when a professor creates a class."""
    name: str
    section: str
    semester: str
    room: str
    meeting_days: List[str]
    coordinate: Coordinate
    geofence_radius: float = 30.0

@dataclass
class ClassSection:
    """
    A class taught by a professor.
    
    The id never changes; everything else may be edited by the owning
    professor or overwritten by a newer token snapshot.
    """
    name: str
    section: str
    semester: str
    room: str
    meeting_days: List[str]
    coordinate: Coordinate
    geofence_radius: float = 30.0
    risk_score: float = 0.0
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    
    def __post_init__(self):
        if self.geofence_radius <= 0:
            raise ValueError("Geofence radius must be positive")
        if not 0.0 <= self.risk_score <= 1.0:
            raise ValueError("Risk score must be between 0.0 and 1.0")
    
    @classmethod
    def from_form(cls, form: ClassForm) -> 'ClassSection':
        return cls(
            name=form.name,
            section=form.section,
            semester=form.semester,
            room=form.room,
            meeting_days=list(form.meeting_days),
            coordinate=form.coordinate,
            geofence_radius=form.geofence_radius
        )
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'id': self.id,
            'name': self.name,
            'section': self.section,
            'semester': self.semester,
            'room': self.room,
            'meeting_days': list(self.meeting_days),
            'geofence_radius': self.geofence_radius,
            'risk_score': self.risk_score,
            'coordinate': self.coordinate.to_dict()
        }
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ClassSection':
        return cls(
            id=data['id'],
            name=data['name'],
            section=data['section'],
            semester=data['semester'],
            room=data['room'],
            meeting_days=list(data.get('meeting_days', [])),
            geofence_radius=float(data.get('geofence_radius', 30.0)),
            risk_score=float(data.get('risk_score', 0.0)),
            coordinate=Coordinate.from_dict(data['coordinate'])
        )
