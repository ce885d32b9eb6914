"""Device-local persistence of in-progress scoring sessions.

Sessions are stored one per match under ``squash-scoring-<match id>`` in a
small key/value store, wrapped as ``{"state": ..., "savedAt": <epoch ms>}``.
Nothing here ever raises to the caller: losing the ability to resume a match
must not stop it being scored live.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from .engine import IN_PROGRESS, ScoringState

logger = logging.getLogger(__name__)

STORAGE_PREFIX = "squash-scoring-"
SESSION_EXPIRY_MS = 24 * 60 * 60 * 1000


def storage_key(match_id: int) -> str:
    return f"{STORAGE_PREFIX}{match_id}"


def _clock_ms(clock: Callable[[], float]) -> int:
    return int(clock() * 1000)


class MemoryStore:
    """Process-local store, mostly for tests and throwaway sessions."""

    def __init__(self):
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._data.keys())


class FileStore:
    """One JSON file per key inside a directory on the scoring device."""

    suffix = ".json"

    def __init__(self, directory):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}{self.suffix}"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        with open(path, "r", encoding="utf-8") as f:
            return f.read()

    def set(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.directory, prefix=".tmp-")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp, self._path(key))
        except BaseException:
            if os.path.exists(tmp):
                os.remove(tmp)
            raise

    def delete(self, key: str) -> None:
        path = self._path(key)
        if path.exists():
            path.unlink()

    def keys(self) -> List[str]:
        if not self.directory.is_dir():
            return []
        return sorted(p.name[: -len(self.suffix)] for p in self.directory.glob(f"*{self.suffix}"))


@dataclass(frozen=True)
class StoredSession:
    state: ScoringState
    saved_at: int

    def is_expired(self, now: int, ttl_ms: int = SESSION_EXPIRY_MS) -> bool:
        return now - self.saved_at > ttl_ms

    def to_dict(self) -> Dict[str, Any]:
        return {"state": self.state.to_dict(), "savedAt": self.saved_at}

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "StoredSession":
        return StoredSession(state=ScoringState.from_dict(d["state"]), saved_at=int(d["savedAt"]))


def serialize_session(session: StoredSession) -> str:
    return json.dumps(session.to_dict(), separators=(",", ":"))


def parse_session(raw: str) -> StoredSession:
    """Parse stored text; raises on anything malformed."""
    return StoredSession.from_dict(json.loads(raw))


class ScoringPersistence:
    """Save/load/clear the stored session for a single match."""

    def __init__(self, store, match_id: int, clock: Callable[[], float] = time.time,
                 ttl_ms: int = SESSION_EXPIRY_MS):
        self.store = store
        self.match_id = match_id
        self.key = storage_key(match_id)
        self.clock = clock
        self.ttl_ms = ttl_ms
        self._last_saved_state: Optional[str] = None

    def save(self, state: ScoringState) -> bool:
        """Persist ``state``; returns True only when a write actually happened.

        Writes are suppressed while the state is unchanged since the last
        write, so a burst of re-renders costs one write per distinct state.
        """
        try:
            state_text = json.dumps(state.to_dict(), separators=(",", ":"))
            if state_text == self._last_saved_state:
                return False
            session = StoredSession(state=state, saved_at=_clock_ms(self.clock))
            self.store.set(self.key, serialize_session(session))
            self._last_saved_state = state_text
            return True
        except Exception as exc:
            logger.error(f"[scoring-store] save failed match={self.match_id}: {exc}")
            return False

    def load(self) -> Optional[StoredSession]:
        try:
            raw = self.store.get(self.key)
            if not raw:
                return None
            session = parse_session(raw)
        except Exception as exc:
            logger.error(f"[scoring-store] load failed match={self.match_id}: {exc}")
            return None
        self._last_saved_state = json.dumps(session.state.to_dict(), separators=(",", ":"))
        return session

    def clear(self) -> None:
        try:
            self.store.delete(self.key)
        except Exception as exc:
            logger.error(f"[scoring-store] clear failed match={self.match_id}: {exc}")
        self._last_saved_state = None

    def load_if_fresh(self) -> Optional[StoredSession]:
        session = self.load()
        if session is None:
            return None
        if session.is_expired(_clock_ms(self.clock), self.ttl_ms):
            logger.info(f"[scoring-store] expired session dropped match={self.match_id}")
            self.clear()
            return None
        return session

    def has_session(self) -> bool:
        session = self.load_if_fresh()
        return session is not None and session.state.status == IN_PROGRESS


def sweep_expired(store, clock: Callable[[], float] = time.time,
                  ttl_ms: int = SESSION_EXPIRY_MS) -> int:
    """Delete expired or unreadable scoring sessions; returns how many went.

    Only keys in the scoring namespace are looked at.
    """
    removed = 0
    try:
        now = _clock_ms(clock)
        for key in store.keys():
            if not key.startswith(STORAGE_PREFIX):
                continue
            try:
                raw = store.get(key)
                if raw is None:
                    continue
                expired = parse_session(raw).is_expired(now, ttl_ms)
            except Exception as exc:
                logger.info(f"[scoring-store] unreadable session {key}: {exc}")
                expired = True
            if not expired:
                continue
            try:
                store.delete(key)
            except Exception as exc:
                logger.warning(f"[scoring-store] could not delete {key}: {exc}")
                continue
            removed += 1
    except Exception as exc:
        logger.warning(f"[scoring-store] sweep aborted after {removed} removals: {exc}")
    if removed:
        logger.info(f"[scoring-store] swept {removed} stale session(s)")
    return removed
