"""Keyed JSON blob used to persist device state between restarts."""
import json
from typing import Any, Optional
from attendly import db
from attendly.models.base import BaseModel

class StoredBlob(BaseModel):
    """One independently loadable piece of device state."""
    
    __tablename__ = 'stored_blobs'
    
    key = db.Column(db.String(64), unique=True, nullable=False, index=True)
    payload = db.Column(db.Text, nullable=False)
    
    @classmethod
    def get_by_key(cls, key: str) -> Optional['StoredBlob']:
        """Get blob by its key."""
        return cls.query.filter_by(key=key).first()
    
    def decoded(self) -> Any:
        return json.loads(self.payload)
    
    def __repr__(self) -> str:
        return f'<StoredBlob {self.key}>'
