"""Validation utilities for request payloads."""
import math
from typing import Dict, List, Any, Optional

from attendly.models.class_section import ClassForm, Coordinate
from attendly.models.token import MIN_ROTATION_WINDOW_SECONDS

class ValidationError(Exception):
    """Custom validation error."""
    
    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__("; ".join(errors))

class Validator:
    """Validation helper class."""
    
    @staticmethod
    def validate_required_fields(data: Dict, required_fields: List[str]) -> Dict[str, Any]:
        """Validate required fields in data."""
        errors = []
        
        for field in required_fields:
            if field not in data or data[field] in (None, ''):
                errors.append(f"{field} is required")
        
        return {
            "is_valid": len(errors) == 0,
            "errors": errors
        }
    
    @staticmethod
    def _number(value: Any, name: str, errors: List[str]) -> Optional[float]:
        if isinstance(value, bool):
            errors.append(f"{name} must be a number")
            return None
        try:
            number = float(value)
        except (TypeError, ValueError):
            errors.append(f"{name} must be a number")
            return None
        if not math.isfinite(number):
            errors.append(f"{name} must be finite")
            return None
        return number
    
    @staticmethod
    def validate_coordinate(latitude: Any, longitude: Any) -> Coordinate:
        """Validate a latitude/longitude pair."""
        errors = []
        lat = Validator._number(latitude, 'latitude', errors)
        lng = Validator._number(longitude, 'longitude', errors)
        
        if lat is not None and not -90.0 <= lat <= 90.0:
            errors.append("latitude must be between -90 and 90")
        if lng is not None and not -180.0 <= lng <= 180.0:
            errors.append("longitude must be between -180 and 180")
        
        if errors:
            raise ValidationError(errors)
        return Coordinate(latitude=lat, longitude=lng)
    
    @staticmethod
    def validate_class_form(data: Dict, default_radius: float = 30.0) -> ClassForm:
        """Validate the create-class payload and build a ClassForm."""
        data = data or {}
        result = Validator.validate_required_fields(data, ['name', 'latitude', 'longitude'])
        if not result['is_valid']:
            raise ValidationError(result['errors'])
        
        errors = []
        name = str(data['name']).strip()
        if not name:
            errors.append("name is required")
        
        meeting_days = data.get('meeting_days', [])
        if not isinstance(meeting_days, list) or not all(isinstance(d, str) for d in meeting_days):
            errors.append("meeting_days must be a list of strings")
        
        radius = Validator._number(data.get('geofence_radius', default_radius), 'geofence_radius', errors)
        if radius is not None and radius <= 0:
            errors.append("geofence_radius must be positive")
        
        if errors:
            raise ValidationError(errors)
        
        return ClassForm(
            name=name,
            section=str(data.get('section', '')),
            semester=str(data.get('semester', '')),
            room=str(data.get('room', '')),
            meeting_days=list(meeting_days),
            coordinate=Validator.validate_coordinate(data['latitude'], data['longitude']),
            geofence_radius=radius
        )
    
    @staticmethod
    def validate_location(data: Dict) -> Optional[Coordinate]:
        """Return the reading in a scan request, or None when absent."""
        data = data or {}
        if data.get('latitude') is None and data.get('longitude') is None:
            return None
        return Validator.validate_coordinate(data.get('latitude'), data.get('longitude'))
    
    @staticmethod
    def validate_session_options(data: Dict, default_window: float,
                                 default_late_minutes: int) -> Dict[str, Any]:
        """Validate start-session options, filling defaults."""
        data = data or {}
        errors = []
        
        window = Validator._number(
            data.get('rotation_window_seconds', default_window), 'rotation_window_seconds', errors
        )
        if window is not None and window < MIN_ROTATION_WINDOW_SECONDS:
            errors.append(f"rotation_window_seconds must be at least {MIN_ROTATION_WINDOW_SECONDS}")
        
        late = data.get('late_threshold_minutes', default_late_minutes)
        if isinstance(late, bool) or not isinstance(late, int) or late < 0:
            errors.append("late_threshold_minutes must be a non-negative integer")
        
        if errors:
            raise ValidationError(errors)
        
        return {
            'rotation_window_seconds': window,
            'late_threshold_minutes': late
        }
