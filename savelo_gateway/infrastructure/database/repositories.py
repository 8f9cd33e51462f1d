"""Data access layer for local client state"""

from typing import Optional
from sqlalchemy.orm import Session
from savelo_gateway.infrastructure.database.models import LocalState


class LocalStateRepository:
    """Repository for key/value entries"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, key: str) -> Optional[str]:
        entry = self.db.get(LocalState, key)
        return entry.value if entry else None

    def set(self, key: str, value: str) -> None:
        entry = self.db.get(LocalState, key)
        if entry is None:
            self.db.add(LocalState(key=key, value=value))
        else:
            entry.value = value
        self.db.flush()

    def delete(self, key: str) -> None:
        entry = self.db.get(LocalState, key)
        if entry is not None:
            self.db.delete(entry)
            self.db.flush()

    def commit(self) -> None:
        self.db.commit()
