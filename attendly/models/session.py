"""Live attendance session bound to a class."""
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Any, Optional

from attendly.utils.helpers import to_iso, parse_iso

@dataclass
class Session:
    """
    Attendance session started by a professor.
    
    A session is live while ``end_time`` is None. Ending it also locks it;
    after that it is kept only for history lookups.
    """
    class_id: str
    start_time: datetime
    seed: str
    late_threshold_minutes: int = 5
    rotation_window_seconds: float = 90
    end_time: Optional[datetime] = None
    is_locked: bool = False
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    
    @property
    def is_live(self) -> bool:
        return self.end_time is None
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'id': self.id,
            'class_id': self.class_id,
            'start_time': to_iso(self.start_time),
            'end_time': to_iso(self.end_time) if self.end_time else None,
            'seed': self.seed,
            'late_threshold_minutes': self.late_threshold_minutes,
            'rotation_window_seconds': self.rotation_window_seconds,
            'is_locked': self.is_locked,
            'is_live': self.is_live
        }
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Session':
        return cls(
            id=data['id'],
            class_id=data['class_id'],
            start_time=parse_iso(data['start_time']),
            end_time=parse_iso(data['end_time']) if data.get('end_time') else None,
            seed=data['seed'],
            late_threshold_minutes=int(data['late_threshold_minutes']),
            rotation_window_seconds=data['rotation_window_seconds'],
            is_locked=bool(data.get('is_locked', False))
        )
