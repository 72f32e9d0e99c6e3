"""Everything one device owns: store, ledger, engine and profiles."""
import logging
import threading
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from attendly.models.attendance import AttendanceRecord, AttendanceSummary
from attendly.models.class_section import Coordinate
from attendly.models.profile import ProfessorProfile, StudentProfile
from attendly.models.session import Session
from attendly.services.attendance_ledger import AttendanceLedger
from attendly.services.gps_service import GPSService, LocationProvider
from attendly.services.session_store import SessionStore
from attendly.services.token_service import TokenService
from attendly.services.verification_service import VerificationOutcome, VerificationService

logger = logging.getLogger(__name__)

class DeviceState:
    """
    Single owner of a device's attendance state.
    
    The store and ledger share one lock, so starting, ending and verifying
    are serialised against each other.
    """
    
    def __init__(
        self,
        student_profile: Optional[StudentProfile] = None,
        professor_profile: Optional[ProfessorProfile] = None,
        clock: Optional[Callable[[], datetime]] = None,
        bucket_tolerance: int = 1
    ):
        self.lock = threading.RLock()
        self.store = SessionStore(self.lock)
        self.ledger = AttendanceLedger(self.lock)
        self.engine = VerificationService(self.store, self.ledger, clock, bucket_tolerance)
        self.student_profile = student_profile or StudentProfile(name='Student')
        self.professor_profile = professor_profile or ProfessorProfile(name='Professor')
        self._autosave_unsubscribers: List[Callable[[], None]] = []
    
    @property
    def clock(self) -> Callable[[], datetime]:
        return self.engine.clock
    
    def token_for(self, session: Session) -> str:
        """Current rotating token for a session's QR display."""
        class_section = self.store.class_for_session(session)
        if class_section is None:
            raise LookupError(f"No class {session.class_id} for session {session.id}")
        return TokenService.encode(session, class_section, self.clock())
    
    def verify_scan(self, token: str, location: Optional[Coordinate]) -> VerificationOutcome:
        """Verify a scan for this device's student."""
        return self.engine.verify_scan(token, location, self.student_profile.id)

    def check_in(self, token: str, location_provider: Optional[LocationProvider]) -> VerificationOutcome:
        """Fetch a location from the platform, then verify the scan."""
        return self.verify_scan(token, GPSService.resolve(location_provider))
    
    def attendance_history(self) -> List[AttendanceRecord]:
        return self.ledger.records_for(self.student_profile.id)
    
    def summary(self) -> AttendanceSummary:
        return self.ledger.summary_for(self.student_profile.id)
    
    def class_name_for(self, record: AttendanceRecord) -> str:
        """Display name of the class a record belongs to."""
        session = self.store.get_session(record.session_id)
        class_section = self.store.class_for_session(session) if session else None
        return class_section.name if class_section else "Class"
    
    # =================== PERSISTENCE ===================
    
    def to_dict(self) -> Dict[str, Any]:
        snapshot = {}
        snapshot.update(self.store.to_dict())
        snapshot.update(self.ledger.to_dict())
        snapshot['student_profile'] = self.student_profile.to_dict()
        snapshot['professor_profile'] = self.professor_profile.to_dict()
        return snapshot
    
    def load(self, snapshot: Dict[str, Any]) -> None:
        with self.lock:
            self.store.load(snapshot)
            self.ledger.load(snapshot)
            if 'student_profile' in snapshot:
                self.student_profile = StudentProfile.from_dict(snapshot['student_profile'])
            if 'professor_profile' in snapshot:
                self.professor_profile = ProfessorProfile.from_dict(snapshot['professor_profile'])
    
    def enable_autosave(self, save: Callable[['DeviceState'], None]) -> None:
        """Call ``save(self)`` after every store or ledger change."""
        self.disable_autosave()
        
        def on_change(event, obj):
            logger.debug("Autosaving after %s", event)
            save(self)
        
        self._autosave_unsubscribers = [
            self.store.subscribe(on_change),
            self.ledger.subscribe(on_change)
        ]
    
    def disable_autosave(self) -> None:
        for unsubscribe in self._autosave_unsubscribers:
            unsubscribe()
        self._autosave_unsubscribers = []
