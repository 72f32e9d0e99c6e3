"""Attendance verification for scanned session tokens."""
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, Optional, Any

from attendly.models.attendance import AttendanceRecord, AttendanceStatus
from attendly.models.class_section import Coordinate
from attendly.models.token import TokenPayload
from attendly.services.attendance_ledger import AttendanceLedger
from attendly.services.gps_service import GPSService
from attendly.services.session_store import SessionStore
from attendly.services.token_service import TokenService, time_bucket
from attendly.utils.helpers import utcnow

logger = logging.getLogger(__name__)

class AttendanceResult(Enum):
    """Outcome of a scan. Every value is an expected result, not an error."""
    SUCCESS = "success"
    ALREADY_CHECKED_IN = "alreadyCheckedIn"
    EXPIRED = "expired"
    LOCKED = "locked"
    OUTSIDE_GEOFENCE = "outsideGeofence"
    INVALID = "invalid"

    @property
    def message(self) -> str:
        return RESULT_MESSAGES[self]

RESULT_MESSAGES = {
    AttendanceResult.SUCCESS: "Checked in successfully",
    AttendanceResult.ALREADY_CHECKED_IN: "You are already checked in for this session.",
    AttendanceResult.EXPIRED: "QR expired. Ask professor to refresh.",
    AttendanceResult.LOCKED: "Session locked by professor.",
    AttendanceResult.OUTSIDE_GEOFENCE: "Move closer to the classroom.",
    AttendanceResult.INVALID: "Invalid QR code.",
}

@dataclass
class VerificationOutcome:
    """Result of a verification plus what was learned along the way."""
    result: AttendanceResult
    payload: Optional[TokenPayload] = None
    record: Optional[AttendanceRecord] = None
    distance: Optional[float] = None

    @property
    def success(self) -> bool:
        return self.result is AttendanceResult.SUCCESS

    def to_dict(self) -> Dict[str, Any]:
        return {
            'result': self.result.value,
            'message': self.result.message,
            'record': self.record.to_dict() if self.record else None,
            'session_id': self.payload.session_id if self.payload else None,
            'class_id': self.payload.class_id if self.payload else None,
            'distance': self.distance
        }

class VerificationService:
    """
    Turns a scanned token and a location reading into an attendance decision.

    Checks run in a fixed order and the first failing one decides the
    outcome. Decoding, the time window and the geofence are pure reads;
    the store and ledger are touched only once all three pass.
    """

    def __init__(
        self,
        store: SessionStore,
        ledger: AttendanceLedger,
        clock: Optional[Callable[[], datetime]] = None,
        bucket_tolerance: int = 1
    ):
        self.store = store
        self.ledger = ledger
        self.clock = clock or utcnow
        self.bucket_tolerance = bucket_tolerance

    def verify_scan(
        self,
        token: str,
        location: Optional[Coordinate],
        student_id: str
    ) -> VerificationOutcome:
        """Verify a scan for ``student_id`` and record attendance on success."""
        is_valid, payload, error_msg = TokenService.decode(token)
        if not is_valid:
            logger.warning("Rejected scan from %s: %s", student_id, error_msg)
            return VerificationOutcome(AttendanceResult.INVALID)

        with self.store.lock:
            return self._verify_payload(payload, location, student_id)

    def _verify_payload(
        self,
        payload: TokenPayload,
        location: Optional[Coordinate],
        student_id: str
    ) -> VerificationOutcome:
        now = self.clock()

        now_bucket = time_bucket(now, payload.rotation_window_seconds)
        if abs(now_bucket - payload.bucket) > self.bucket_tolerance:
            logger.info(
                "Expired token for session %s: bucket %s, now %s",
                payload.session_id, payload.bucket, now_bucket
            )
            return VerificationOutcome(AttendanceResult.EXPIRED, payload)

        if location is None:
            logger.info("No location for scan of session %s", payload.session_id)
            return VerificationOutcome(AttendanceResult.OUTSIDE_GEOFENCE, payload)

        check = GPSService.verify_location(location, payload.coordinate, payload.geofence_radius)
        if not check['is_inside']:
            logger.info(
                "Scan for session %s is %.1fm away (radius %.1fm)",
                payload.session_id, check['distance'], payload.geofence_radius
            )
            return VerificationOutcome(AttendanceResult.OUTSIDE_GEOFENCE, payload, distance=check['distance'])

        # All gating checks passed; from here on local state is updated
        class_section, session = self.store.upsert_from_payload(payload)
        self.store.enroll_student(student_id, class_section.id)

        if session.is_locked:
            return VerificationOutcome(AttendanceResult.LOCKED, payload, distance=check['distance'])

        if session.end_time is not None:
            return VerificationOutcome(AttendanceResult.EXPIRED, payload, distance=check['distance'])

        existing = self.ledger.find(session.id, student_id)
        if existing is not None:
            logger.info("Student %s already checked in to session %s", student_id, session.id)
            return VerificationOutcome(
                AttendanceResult.ALREADY_CHECKED_IN, payload, record=existing, distance=check['distance']
            )

        record = AttendanceRecord(
            session_id=session.id,
            student_id=student_id,
            status=self.classify(session.start_time, session.late_threshold_minutes, now),
            timestamp=now,
            location_verified=True
        )
        self.ledger.append(record)
        return VerificationOutcome(AttendanceResult.SUCCESS, payload, record=record, distance=check['distance'])

    @staticmethod
    def classify(start_time: datetime, late_threshold_minutes: int, now: datetime) -> AttendanceStatus:
        """Late strictly after the threshold; exactly on it is still on time."""
        elapsed = (now - start_time).total_seconds()
        if elapsed > late_threshold_minutes * 60:
            return AttendanceStatus.LATE
        return AttendanceStatus.ON_TIME

    def preview(self, token: str, student_id: str) -> Dict[str, Any]:
        """
        Decode a scan for the join-class prompt without touching state.

        Returns the class snapshot and whether the student is enrolled.
        """
        is_valid, payload, _ = TokenService.decode(token)
        if not is_valid:
            return {'result': AttendanceResult.INVALID.value, 'message': AttendanceResult.INVALID.message}

        return {
            'result': None,
            'class': payload.to_class_section().to_dict(),
            'session_id': payload.session_id,
            'is_enrolled': self.store.is_enrolled(student_id, payload.class_id)
        }
