"""Device owner profiles."""
import uuid
from dataclasses import dataclass, field
from typing import Dict, Any, Optional

@dataclass
class StudentProfile:
    """The student using this device."""
    name: str
    device_hash: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    
    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'name': self.name, 'device_hash': self.device_hash}
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StudentProfile':
        return cls(id=data['id'], name=data['name'], device_hash=data.get('device_hash'))

@dataclass
class ProfessorProfile:
    """The professor using this device."""
    name: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    
    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'name': self.name}
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProfessorProfile':
        return cls(id=data['id'], name=data['name'])
