"""
Server-side session store.

Sessions are keyed by a random id carried in a signed, HTTP-only cookie. Two
backends share one interface: a database table (default) and an in-process
map for single-worker development. Both expire entries on a fixed TTL and are
pruned by a periodic background sweep.
"""
import hashlib
import hmac
import secrets
import threading
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Dict, Optional

from sqlalchemy.orm import sessionmaker

from .clock import utcnow
from .config import Settings
from .logging_config import auth_logger
from .models.user_session import UserSession


@dataclass(frozen=True)
class SessionRecord:
    sid: str
    user_id: int
    expires_at: datetime
    impersonated_brand_id: Optional[int] = None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or utcnow()) >= self.expires_at


class SessionStore:
    """Interface shared by the session backends."""

    def __init__(self, ttl_seconds: int):
        self.ttl = timedelta(seconds=ttl_seconds)

    def _new_record(self, user_id: int) -> SessionRecord:
        return SessionRecord(
            sid=secrets.token_urlsafe(32),
            user_id=user_id,
            expires_at=utcnow() + self.ttl,
        )

    def create(self, user_id: int) -> SessionRecord:
        raise NotImplementedError

    def get(self, sid: str) -> Optional[SessionRecord]:
        raise NotImplementedError

    def set_impersonation(self, sid: str, brand_id: Optional[int]) -> Optional[SessionRecord]:
        raise NotImplementedError

    def delete(self, sid: str) -> None:
        raise NotImplementedError

    def prune_expired(self) -> int:
        raise NotImplementedError

    def close(self) -> None:
        pass


class MemorySessionStore(SessionStore):
    """In-process session map. Sessions are lost on restart."""

    def __init__(self, ttl_seconds: int):
        super().__init__(ttl_seconds)
        self._sessions: Dict[str, SessionRecord] = {}
        self._lock = threading.Lock()

    def create(self, user_id: int) -> SessionRecord:
        record = self._new_record(user_id)
        with self._lock:
            self._sessions[record.sid] = record
        return record

    def get(self, sid: str) -> Optional[SessionRecord]:
        with self._lock:
            record = self._sessions.get(sid)
            if record and record.is_expired():
                del self._sessions[sid]
                return None
            return record

    def set_impersonation(self, sid: str, brand_id: Optional[int]) -> Optional[SessionRecord]:
        with self._lock:
            record = self._sessions.get(sid)
            if record is None:
                return None
            record = replace(record, impersonated_brand_id=brand_id)
            self._sessions[sid] = record
            return record

    def delete(self, sid: str) -> None:
        with self._lock:
            self._sessions.pop(sid, None)

    def prune_expired(self) -> int:
        now = utcnow()
        with self._lock:
            expired = [sid for sid, record in self._sessions.items() if record.is_expired(now)]
            for sid in expired:
                del self._sessions[sid]
        return len(expired)

    def close(self) -> None:
        with self._lock:
            self._sessions.clear()


class DatabaseSessionStore(SessionStore):
    """Sessions persisted in the ``user_sessions`` table."""

    def __init__(self, session_factory: sessionmaker, ttl_seconds: int):
        super().__init__(ttl_seconds)
        self.session_factory = session_factory

    @staticmethod
    def _to_record(row: UserSession) -> SessionRecord:
        return SessionRecord(
            sid=row.sid,
            user_id=row.user_id,
            expires_at=row.expires_at,
            impersonated_brand_id=row.impersonated_brand_id,
        )

    def create(self, user_id: int) -> SessionRecord:
        record = self._new_record(user_id)
        with self.session_factory() as db:
            db.add(UserSession(sid=record.sid, user_id=user_id, expires_at=record.expires_at))
            db.commit()
        return record

    def get(self, sid: str) -> Optional[SessionRecord]:
        with self.session_factory() as db:
            row = db.get(UserSession, sid)
            if row is None:
                return None
            record = self._to_record(row)
            if record.is_expired():
                db.delete(row)
                db.commit()
                return None
            return record

    def set_impersonation(self, sid: str, brand_id: Optional[int]) -> Optional[SessionRecord]:
        with self.session_factory() as db:
            row = db.get(UserSession, sid)
            if row is None:
                return None
            row.impersonated_brand_id = brand_id
            db.commit()
            return self._to_record(row)

    def delete(self, sid: str) -> None:
        with self.session_factory() as db:
            db.query(UserSession).filter(UserSession.sid == sid).delete()
            db.commit()

    def prune_expired(self) -> int:
        with self.session_factory() as db:
            count = db.query(UserSession).filter(UserSession.expires_at <= utcnow()).delete()
            db.commit()
        return count


def build_session_store(settings: Settings, session_factory: sessionmaker) -> SessionStore:
    ttl = settings.session_max_age_seconds
    if settings.session_backend == "memory":
        auth_logger.info("Using in-memory session store", ttl_seconds=ttl)
        return MemorySessionStore(ttl)
    return DatabaseSessionStore(session_factory, ttl)


# ============================================================
# COOKIE SIGNING
# ============================================================

def _signature(sid: str, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), sid.encode("utf-8"), hashlib.sha256).hexdigest()


def sign_session_id(sid: str, secret: str) -> str:
    return f"{sid}.{_signature(sid, secret)}"


def unsign_session_id(value: Optional[str], secret: str) -> Optional[str]:
    """Return the session id from a cookie value, or None if it was tampered with."""
    if not value or "." not in value:
        return None
    sid, _, signature = value.rpartition(".")
    if not sid or not hmac.compare_digest(signature, _signature(sid, secret)):
        return None
    return sid
