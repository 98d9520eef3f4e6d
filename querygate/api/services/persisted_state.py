"""Named, expiring records kept in the state database."""
import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from sqlalchemy.orm import sessionmaker

from querygate.api.db.models import PersistedRecord
from querygate.core.security import InvalidToken, RecordCipher


logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, matching the naive DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class PersistedRecordRepository:
    """Reads and writes ``PersistedRecord`` rows by name.

    When a cipher is given, values are encrypted at rest.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        max_age: timedelta = timedelta(days=365),
        cipher: Optional[RecordCipher] = None
    ):
        self.session_factory = session_factory
        self.max_age = max_age
        self.cipher = cipher

    def get(self, name: str) -> Optional[str]:
        """Return the stored value, or None when the record is missing or expired."""
        db = self.session_factory()
        try:
            record = db.query(PersistedRecord).filter(PersistedRecord.name == name).first()
            if record is None or record.value is None:
                return None
            if record.expires_at <= utcnow():
                logger.info(f"Persisted record '{name}' expired at {record.expires_at.isoformat()}")
                return None
            return self._decrypt(name, record.value)
        finally:
            db.close()

    def put(self, name: str, value: Optional[str]) -> None:
        """Store a value and push its expiry out by ``max_age``."""
        self.put_many({name: value})

    def put_many(self, values: Dict[str, Optional[str]]) -> None:
        """Store several values in one transaction; either all are written or none."""
        db = self.session_factory()
        try:
            expires_at = utcnow() + self.max_age
            for name, value in values.items():
                record = db.query(PersistedRecord).filter(PersistedRecord.name == name).first()
                if record is None:
                    record = PersistedRecord(name=name)
                    db.add(record)

                record.value = self._encrypt(value)
                record.expires_at = expires_at
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def _encrypt(self, value: Optional[str]) -> Optional[str]:
        if value is None or self.cipher is None:
            return value
        return self.cipher.encrypt(value)

    def _decrypt(self, name: str, value: str) -> str:
        if self.cipher is None:
            return value
        try:
            return self.cipher.decrypt(value)
        except InvalidToken as e:
            raise RuntimeError(
                f"Persisted record '{name}' cannot be decrypted with the configured "
                f"PROFILE_ENCRYPTION_KEY"
            ) from e
