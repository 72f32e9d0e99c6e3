"""Keyed blob persistence for device state."""
import json
import logging
from typing import Any, Optional, TYPE_CHECKING

from attendly import db
from attendly.models.stored_blob import StoredBlob

if TYPE_CHECKING:
    from attendly.services.device_state import DeviceState

logger = logging.getLogger(__name__)

STATE_KEYS = (
    'classes',
    'sessions',
    'enrollments',
    'attendance_records',
    'attendance_summaries',
    'student_profile',
    'professor_profile',
)

class PersistenceService:
    """
    Saves and loads JSON blobs by key.
    
    Each key is independent, so one unreadable blob does not block the
    others. Must be used inside an application context.
    """
    
    @staticmethod
    def save(key: str, data: Any) -> StoredBlob:
        """Insert or replace the blob stored under ``key``."""
        payload = json.dumps(data, separators=(',', ':'), sort_keys=True)
        blob = StoredBlob.get_by_key(key)
        if blob is None:
            blob = StoredBlob(key=key, payload=payload)
        else:
            blob.payload = payload
        return blob.save()
    
    @staticmethod
    def load(key: str, default: Any = None) -> Any:
        """Return the decoded blob under ``key``, or ``default``."""
        blob = StoredBlob.get_by_key(key)
        if blob is None:
            return default
        try:
            return blob.decoded()
        except ValueError:
            logger.error("Stored blob %s is not valid JSON; ignoring it", key)
            return default
    
    @staticmethod
    def delete(key: str) -> None:
        blob = StoredBlob.get_by_key(key)
        if blob is not None:
            blob.delete()
    
    @staticmethod
    def save_state(state: 'DeviceState') -> None:
        """Persist every piece of device state under its own key."""
        snapshot = state.to_dict()
        for key in STATE_KEYS:
            if key in snapshot:
                PersistenceService.save(key, snapshot[key])
        logger.debug("Saved device state")
    
    @staticmethod
    def load_state(state: 'DeviceState') -> bool:
        """Load whatever keys exist into ``state``; returns True if any did."""
        snapshot = {}
        for key in STATE_KEYS:
            value = PersistenceService.load(key)
            if value is not None:
                snapshot[key] = value
        
        if not snapshot:
            return False
        
        state.load(snapshot)
        logger.info("Loaded device state keys: %s", ", ".join(sorted(snapshot)))
        return True
    
    @staticmethod
    def clear() -> None:
        StoredBlob.query.delete()
        db.session.commit()
