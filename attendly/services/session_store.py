"""In-memory authoritative state for classes and sessions."""
import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple, Any

from attendly.models.class_section import ClassForm, ClassSection
from attendly.models.session import Session
from attendly.models.token import MIN_ROTATION_WINDOW_SECONDS, TokenPayload
from attendly.utils.helpers import utcnow
from attendly.utils.observable import Observable

logger = logging.getLogger(__name__)

class SessionAlreadyLiveError(Exception):
    """Raised when starting a session for a class that already has one live."""
    
    def __init__(self, session: Session):
        self.session = session
        super().__init__(f"Class {session.class_id} already has live session {session.id}")

class SessionStore(Observable):
    """
    Canonical list of classes and sessions on one device.
    
    Every state transition goes through this store under ``self.lock``.
    Subscribers are told about each change as ``(event, obj)``.
    """
    
    def __init__(self, lock: Optional[threading.RLock] = None):
        super().__init__(lock)
        self._classes: List[ClassSection] = []
        self._sessions: Dict[str, Session] = {}
        self._enrollments: Dict[str, List[str]] = {}
    
    # =================== CLASSES ===================
    
    def create_class(self, form: ClassForm) -> ClassSection:
        """Create a class from the professor's form."""
        class_section = ClassSection.from_form(form)
        with self.lock:
            self._classes.append(class_section)
        logger.info("Created class %s (%s)", class_section.id, class_section.name)
        self._notify('class_created', class_section)
        return class_section
    
    def add_class(self, class_section: ClassSection) -> ClassSection:
        """Add an already built class, e.g. seeded sample data."""
        with self.lock:
            if self.get_class(class_section.id) is None:
                self._classes.append(class_section)
        self._notify('class_created', class_section)
        return class_section
    
    def get_class(self, class_id: str) -> Optional[ClassSection]:
        return next((c for c in self._classes if c.id == class_id), None)
    
    def list_classes(self) -> List[ClassSection]:
        return list(self._classes)
    
    # =================== SESSIONS ===================
    
    def start_session(
        self,
        class_section: ClassSection,
        rotation_window_seconds: float,
        late_threshold_minutes: int,
        now: Optional[datetime] = None
    ) -> Session:
        """Start a live session; only one may be live per class."""
        if rotation_window_seconds < MIN_ROTATION_WINDOW_SECONDS:
            raise ValueError(f"Rotation window must be at least {MIN_ROTATION_WINDOW_SECONDS}s")
        
        with self.lock:
            live = self.active_session_for(class_section.id)
            if live is not None:
                raise SessionAlreadyLiveError(live)
            
            session = Session(
                class_id=class_section.id,
                start_time=now or utcnow(),
                seed=str(uuid.uuid4()),
                late_threshold_minutes=late_threshold_minutes,
                rotation_window_seconds=rotation_window_seconds
            )
            self._sessions[session.id] = session
        
        logger.info("Started session %s for class %s", session.id, class_section.id)
        self._notify('session_started', session)
        return session
    
    def end_session(self, class_section: ClassSection, now: Optional[datetime] = None) -> Optional[Session]:
        """End and lock the live session of a class. No-op if none is live."""
        with self.lock:
            session = self.active_session_for(class_section.id)
            if session is None:
                return None
            session.end_time = now or utcnow()
            session.is_locked = True
        
        logger.info("Ended session %s for class %s", session.id, class_section.id)
        self._notify('session_ended', session)
        return session
    
    def get_session(self, session_id: str) -> Optional[Session]:
        return self._sessions.get(session_id)
    
    def list_sessions(self, class_id: Optional[str] = None) -> List[Session]:
        sessions = list(self._sessions.values())
        if class_id is not None:
            sessions = [s for s in sessions if s.class_id == class_id]
        return sessions
    
    def active_session_for(self, class_id: str) -> Optional[Session]:
        """First session of the class with no end time."""
        return next(
            (s for s in self._sessions.values() if s.class_id == class_id and s.end_time is None),
            None
        )
    
    def class_for_session(self, session: Session) -> Optional[ClassSection]:
        return self.get_class(session.class_id)
    
    # =================== TOKEN MERGE ===================
    
    def upsert_from_payload(self, payload: TokenPayload) -> Tuple[ClassSection, Session]:
        """
        Merge a scanned snapshot into local state.
        
        Class metadata is always overwritten by id. A session is inserted only
        if unknown, since only the owning device may end or lock it.
        """
        with self.lock:
            existing = self.get_class(payload.class_id)
            class_section = payload.to_class_section(
                risk_score=existing.risk_score if existing else 0.0
            )
            if existing is None:
                self._classes.append(class_section)
            elif existing != class_section:
                self._classes[self._classes.index(existing)] = class_section
            else:
                class_section = existing
            
            session = self._sessions.get(payload.session_id)
            session_inserted = session is None
            if session_inserted:
                session = Session(
                    id=payload.session_id,
                    class_id=payload.class_id,
                    start_time=datetime.fromtimestamp(payload.session_start_time, tz=timezone.utc),
                    seed=payload.seed,
                    late_threshold_minutes=payload.late_threshold_minutes,
                    rotation_window_seconds=payload.rotation_window_seconds
                )
                self._sessions[session.id] = session
        
        if existing is None or class_section is not existing:
            self._notify('class_upserted', class_section)
        if session_inserted:
            logger.info("Learned session %s from scanned token", session.id)
            self._notify('session_upserted', session)
        return class_section, session
    
    # =================== ENROLLMENT ===================
    
    def enroll_student(self, student_id: str, class_id: str) -> bool:
        """Add the class to the student's list; returns True if it was new."""
        with self.lock:
            classes = self._enrollments.setdefault(student_id, [])
            if class_id in classes:
                return False
            classes.append(class_id)
        
        logger.info("Enrolled student %s in class %s", student_id, class_id)
        self._notify('student_enrolled', {'student_id': student_id, 'class_id': class_id})
        return True
    
    def is_enrolled(self, student_id: str, class_id: str) -> bool:
        return class_id in self._enrollments.get(student_id, [])
    
    def enrolled_classes(self, student_id: str) -> List[ClassSection]:
        return [c for c in (self.get_class(cid) for cid in self._enrollments.get(student_id, [])) if c]
    
    # =================== SNAPSHOTS ===================
    
    def to_dict(self) -> Dict[str, Any]:
        with self.lock:
            return {
                'classes': [c.to_dict() for c in self._classes],
                'sessions': [s.to_dict() for s in self._sessions.values()],
                'enrollments': {k: list(v) for k, v in self._enrollments.items()}
            }
    
    def load(self, data: Dict[str, Any]) -> None:
        """Replace state with a snapshot from ``to_dict``; missing keys are left alone."""
        with self.lock:
            if 'classes' in data:
                self._classes = [ClassSection.from_dict(c) for c in data['classes']]
            if 'sessions' in data:
                self._sessions = {s['id']: Session.from_dict(s) for s in data['sessions']}
            if 'enrollments' in data:
                self._enrollments = {k: list(v) for k, v in data['enrollments'].items()}
