"""
Session Guard Module

Maps the opaque session identifier sent in the ``X-Session-Id`` header to a
user. Sessions never expire and are never rotated; they live until logout.
"""

import uuid
from typing import Optional, Tuple

from .errors import NotAuthenticatedError
from .models import LedgerState, Session, User
from .storage import LedgerStore


SESSION_HEADER = "X-Session-Id"


class SessionGuard:
    """Creates, resolves and destroys sessions held in the ledger"""

    def __init__(self, store: LedgerStore):
        self.store = store

    @staticmethod
    def new_session_id() -> str:
        return f"session_{uuid.uuid4().hex}"

    def create(self, state: LedgerState, user_id: str) -> str:
        """Add a session for ``user_id`` to ``state``; the caller saves it"""
        session_id = self.new_session_id()
        state.sessions[session_id] = Session(user_id=user_id)
        return session_id

    def resolve(self, session_id: Optional[str]) -> Tuple[str, User]:
        """
        Resolve a session identifier to its user.

        Raises:
            NotAuthenticatedError: header missing, session unknown, or the
                session points at a user that no longer exists
        """
        if not session_id:
            raise NotAuthenticatedError()

        state = self.store.load()
        session = state.sessions.get(session_id)
        if session is None:
            raise NotAuthenticatedError()

        user = state.get_user(session.user_id)
        if user is None:
            raise NotAuthenticatedError()

        return session_id, user

    def destroy(self, state: LedgerState, session_id: str) -> bool:
        """Remove a session from ``state``; the caller saves it"""
        return state.sessions.pop(session_id, None) is not None
