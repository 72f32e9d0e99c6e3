"""QR token encoding, decoding and rendering service."""
import base64
import binascii
import io
import json
import logging
import math
from datetime import datetime, timezone
from typing import Any, Optional, Tuple

import qrcode

from attendly.models.class_section import ClassSection
from attendly.models.session import Session
from attendly.models.token import MIN_ROTATION_WINDOW_SECONDS, PAYLOAD_FIELDS, TokenPayload
from attendly.utils.helpers import utcnow

logger = logging.getLogger(__name__)

MALFORMED = "malformed"

def time_bucket(moment: datetime, window_seconds: float) -> int:
    """Index of the rotation window containing ``moment``."""
    return math.floor(moment.timestamp() / window_seconds)

def _is_finite(value) -> bool:
    try:
        return math.isfinite(value)
    except OverflowError:
        return False

class TokenService:
    """Service for attendance token operations."""
    
    @staticmethod
    def build_payload(
        session: Session,
        class_section: ClassSection,
        now: Optional[datetime] = None
    ) -> TokenPayload:
        """Snapshot the session and its class at the current time bucket."""
        now = now or utcnow()
        return TokenPayload(
            session_id=session.id,
            class_id=class_section.id,
            bucket=time_bucket(now, session.rotation_window_seconds),
            rotation_window_seconds=session.rotation_window_seconds,
            late_threshold_minutes=session.late_threshold_minutes,
            session_start_time=session.start_time.timestamp(),
            seed=session.seed,
            class_name=class_section.name,
            section=class_section.section,
            semester=class_section.semester,
            room=class_section.room,
            meeting_days=tuple(class_section.meeting_days),
            geofence_radius=class_section.geofence_radius,
            latitude=class_section.coordinate.latitude,
            longitude=class_section.coordinate.longitude
        )
    
    @staticmethod
    def encode(
        session: Session,
        class_section: ClassSection,
        now: Optional[datetime] = None
    ) -> str:
        """
        Encode a token for the given session and class.
        
        The token is base64 text of compact JSON, so it only changes when the
        time bucket does.
        """
        payload = TokenService.build_payload(session, class_section, now)
        raw = json.dumps(payload.to_wire(), separators=(',', ':'))
        return base64.b64encode(raw.encode('utf-8')).decode('ascii')
    
    @staticmethod
    def decode(token: Any) -> Tuple[bool, Optional[TokenPayload], Optional[str]]:
        """
        Decode a scanned token.
        
        Returns: (is_valid, payload, error_message)
        """
        if isinstance(token, str):
            token = token.strip().encode('ascii', errors='replace')
        if not isinstance(token, (bytes, bytearray)) or not token:
            return False, None, f"{MALFORMED}: empty or non-text token"
        
        try:
            raw = base64.b64decode(token, validate=True)
            data = json.loads(raw.decode('utf-8'))
        except (binascii.Error, ValueError) as e:
            # UnicodeDecodeError and JSONDecodeError are both ValueError
            return False, None, f"{MALFORMED}: {e.__class__.__name__}"
        except RecursionError:
            return False, None, f"{MALFORMED}: nesting too deep"
        
        if not isinstance(data, dict):
            return False, None, f"{MALFORMED}: payload is not an object"
        
        for field, types in PAYLOAD_FIELDS.items():
            if field not in data:
                return False, None, f"{MALFORMED}: missing field {field}"
            value = data[field]
            if isinstance(value, bool) or not isinstance(value, types):
                return False, None, f"{MALFORMED}: wrong type for {field}"
            if float in types and not _is_finite(value):
                return False, None, f"{MALFORMED}: non-finite {field}"

        if not all(isinstance(day, str) for day in data['meetingDays']):
            return False, None, f"{MALFORMED}: wrong type for meetingDays"
        if data['qrWindow'] < MIN_ROTATION_WINDOW_SECONDS:
            return False, None, f"{MALFORMED}: qrWindow below {MIN_ROTATION_WINDOW_SECONDS}s"
        if not -90.0 <= data['latitude'] <= 90.0:
            return False, None, f"{MALFORMED}: latitude out of range"
        if not -180.0 <= data['longitude'] <= 180.0:
            return False, None, f"{MALFORMED}: longitude out of range"
        if data['geofenceRadius'] <= 0:
            return False, None, f"{MALFORMED}: geofenceRadius must be positive"
        if data['lateThresholdMinutes'] < 0:
            return False, None, f"{MALFORMED}: lateThresholdMinutes must not be negative"
        try:
            datetime.fromtimestamp(data['sessionStartTime'], tz=timezone.utc)
        except (OverflowError, ValueError, OSError):
            return False, None, f"{MALFORMED}: sessionStartTime out of range"

        return True, TokenPayload.from_wire(data), None
    
    @staticmethod
    def render_qr_image(token: str) -> str:
        """Render a token as a PNG data URL for the professor display."""
        qr = qrcode.QRCode(
            version=None,  # Auto-determine size, payload is a few hundred bytes
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=10,
            border=4,
        )
        qr.add_data(token)
        qr.make(fit=True)
        
        img = qr.make_image(fill_color="black", back_color="white")
        
        buffered = io.BytesIO()
        img.save(buffered, format="PNG")
        img_str = base64.b64encode(buffered.getvalue()).decode()
        
        return f"data:image/png;base64,{img_str}"
