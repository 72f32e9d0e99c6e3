"""GPS geofence service."""
import logging
import math
from typing import Callable, Dict, Optional

from attendly.models.class_section import Coordinate

logger = logging.getLogger(__name__)

EARTH_RADIUS_METERS = 6371000

class LocationError(Exception):
    """Raised by a location provider when no reading can be produced."""
    pass

class LocationDeniedError(LocationError):
    """Location permission was refused."""
    pass

class LocationUnavailableError(LocationError):
    """No fix was obtained, e.g. a timeout."""
    pass

# Platform collaborator: returns a reading, None, or raises LocationError.
LocationProvider = Callable[[], Optional[Coordinate]]

class GPSService:
    """Service for GPS and location verification."""
    
    @staticmethod
    def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
        """Calculate distance between two GPS points in meters."""
        lat1_rad = math.radians(lat1)
        lat2_rad = math.radians(lat2)
        delta_lat = math.radians(lat2 - lat1)
        delta_lon = math.radians(lon2 - lon1)
        
        a = (math.sin(delta_lat/2) ** 2 + 
             math.cos(lat1_rad) * math.cos(lat2_rad) * 
             math.sin(delta_lon/2) ** 2)
        c = 2 * math.atan2(math.sqrt(a), math.sqrt(1-a))
        
        return EARTH_RADIUS_METERS * c
    
    @staticmethod
    def verify_location(reading: Coordinate, center: Coordinate, radius: float) -> Dict:
        """Verify if a reading is within ``radius`` meters of ``center``."""
        distance = GPSService.calculate_distance(
            reading.latitude, reading.longitude,
            center.latitude, center.longitude
        )
        
        return {
            'is_inside': distance <= radius,
            'distance': distance,
            'radius': radius,
            'center': center.to_dict()
        }
    
    @staticmethod
    def resolve(provider: Optional[LocationProvider]) -> Optional[Coordinate]:
        """Ask the provider for a reading; any failure becomes None."""
        if provider is None:
            return None
        try:
            return provider()
        except LocationError as e:
            logger.info("Location unavailable: %s", e.__class__.__name__)
            return None
