"""Open-document sessions keyed by id.

A session owns one DocumentHandle. Work that renders from the handle must
hold ``session.lock`` for the duration.
"""
import logging
import threading
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from rasterizer import DocumentHandle
from schemas import PageBounds

from .operations import AuthResult, authenticate, open_and_bound

logger = logging.getLogger(__name__)


@dataclass
class DocumentSession:
    id: str
    filename: str
    handle: DocumentHandle
    bounds: List[PageBounds] = field(default_factory=list)
    needs_password: bool = False
    is_authenticated: bool = False
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @property
    def page_count(self) -> int:
        return len(self.bounds)

    @property
    def is_ready(self) -> bool:
        """True once bounds are available (unencrypted or unlocked)."""
        return not self.needs_password or self.is_authenticated


class SessionRegistry:
    """Tracks open documents for a caller and closes their handles."""

    def __init__(self):
        self._sessions: Dict[str, DocumentSession] = {}
        self._lock = threading.Lock()

    def open(self, data: bytes, filename: str = "document.pdf") -> DocumentSession:
        """
        Open a document and register a session for it.

        Raises:
            DecodeError: If the bytes are not a readable document
        """
        result = open_and_bound(data, filename)
        session = DocumentSession(
            id=uuid.uuid4().hex,
            filename=filename,
            handle=result.handle,
            bounds=result.bounds,
            needs_password=result.needs_password,
        )
        with self._lock:
            self._sessions[session.id] = session
        logger.info(f"Opened session {session.id} for {filename}")
        return session

    def authenticate(self, session_id: str, password: str) -> AuthResult:
        session = self.get(session_id)
        if session is None:
            raise KeyError(f"Unknown session: {session_id}")
        with session.lock:
            result = authenticate(session.handle, password)
            if result.ok:
                session.bounds = result.bounds
                session.is_authenticated = True
        return result

    def get(self, session_id: str) -> Optional[DocumentSession]:
        with self._lock:
            return self._sessions.get(session_id)

    def close(self, session_id: str) -> bool:
        """Close one session's handle. Returns False if the id is unknown."""
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        with session.lock:
            session.handle.close()
        logger.debug(f"Closed session {session_id}")
        return True

    def close_all(self) -> None:
        with self._lock:
            session_ids = list(self._sessions)
        for session_id in session_ids:
            self.close(session_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._sessions
