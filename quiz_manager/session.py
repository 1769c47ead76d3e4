"""
Authenticated user context

A UserSession is issued at login under an opaque token and passed
explicitly to whatever needs to know who is calling.
"""
import logging
import secrets
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class Role(str, Enum):
    """LECTURER maps to the teacher table, STUDENT to the student table"""
    LECTURER = "LECTURER"
    STUDENT = "STUDENT"


@dataclass
class UserSession:
    user_id: int
    username: str
    role: Role
    full_name: Optional[str] = None
    token: str = field(default_factory=lambda: secrets.token_urlsafe(32))
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def is_lecturer(self) -> bool:
        return self.role == Role.LECTURER

    @property
    def is_student(self) -> bool:
        return self.role == Role.STUDENT


class SessionStore:
    """In-memory token -> UserSession registry"""

    def __init__(self):
        self._sessions: Dict[str, UserSession] = {}

    def add(self, session: UserSession) -> UserSession:
        self._sessions[session.token] = session
        return session

    def get(self, token: str) -> Optional[UserSession]:
        return self._sessions.get(token)

    def remove(self, token: str) -> bool:
        session = self._sessions.pop(token, None)
        if session:
            logger.info(f"Session closed for {session.username}")
        return session is not None

    def clear(self):
        self._sessions.clear()

    def __len__(self):
        return len(self._sessions)
