"""Common columns and persistence helpers for database tables."""
from datetime import datetime, timezone
from attendly import db

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

class BaseModel(db.Model):
    """Integer key plus created/updated timestamps, both UTC."""
    
    __abstract__ = True
    
    id = db.Column(db.Integer, primary_key=True)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)
    
    def save(self) -> 'BaseModel':
        """Add to the session and commit."""
        db.session.add(self)
        db.session.commit()
        return self
    
    def delete(self) -> None:
        """Remove and commit."""
        db.session.delete(self)
        db.session.commit()
