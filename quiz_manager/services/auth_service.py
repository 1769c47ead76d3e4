"""
Authentication service
Registration and login against the teacher and student tables
"""
import logging
from typing import Optional

import bcrypt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from quiz_manager.config import settings
from quiz_manager.exceptions import AuthenticationFailure, DuplicateIdentity, InvalidArgument
from quiz_manager.models import Student, Teacher
from quiz_manager.session import Role, SessionStore, UserSession

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    """Salted bcrypt hash with the configured work factor"""
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        logger.warning("Stored password hash could not be parsed")
        return False


class AuthService:
    """
    Service for user registration, login and logout

    Usernames are unique across both roles: a teacher and a student can
    never share one.
    """

    def __init__(self, session_store: Optional[SessionStore] = None):
        self.sessions = session_store or SessionStore()

    def username_exists(self, db: Session, username: str) -> bool:
        return (
            db.query(Teacher.id).filter(Teacher.username == username).first() is not None
            or db.query(Student.id).filter(Student.username == username).first() is not None
        )

    def register(
        self,
        db: Session,
        username: str,
        password: str,
        full_name: str,
        role: Role,
        student_code: Optional[str] = None
    ) -> int:
        """
        Register a new user

        Args:
            db: Database session
            username: Login name, unique across teachers and students
            password: Plain text password
            full_name: Display name
            role: LECTURER or STUDENT
            student_code: Optional student code (students only)

        Returns:
            The new user's id

        Raises:
            DuplicateIdentity: username already exists in either table
        """
        if not username or not password:
            raise InvalidArgument("Username and password are required")

        if self.username_exists(db, username):
            logger.warning(f"Registration rejected, username taken: {username}")
            raise DuplicateIdentity(f"Username '{username}' already exists")

        password_hash = hash_password(password)

        if role == Role.LECTURER:
            user = Teacher(username=username, password_hash=password_hash, full_name=full_name)
        elif role == Role.STUDENT:
            user = Student(
                username=username,
                password_hash=password_hash,
                full_name=full_name,
                student_code=student_code
            )
        else:
            raise InvalidArgument(f"Invalid role: {role}")

        try:
            db.add(user)
            db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration of the same name
            db.rollback()
            logger.warning(f"Registration rejected by unique constraint: {username}")
            raise DuplicateIdentity(f"Username '{username}' already exists")

        db.refresh(user)

        logger.info(f"Registered {role.value.lower()} {username} (id={user.id})")

        return user.id

    def register_teacher(self, db: Session, username: str, password: str, full_name: str) -> int:
        return self.register(db, username, password, full_name, Role.LECTURER)

    def register_student(
        self,
        db: Session,
        username: str,
        password: str,
        full_name: str,
        student_code: Optional[str] = None
    ) -> int:
        return self.register(db, username, password, full_name, Role.STUDENT, student_code)

    def login(self, db: Session, username: str, password: str) -> UserSession:
        """
        Verify credentials and open a session

        The teacher table is searched first, then the student table. The
        returned session's role is the role of the table the user was found in.

        Raises:
            AuthenticationFailure: unknown username or wrong password
        """
        teacher = db.query(Teacher).filter(Teacher.username == username).first()
        if teacher:
            return self._open_session(teacher, Role.LECTURER, password)

        student = db.query(Student).filter(Student.username == username).first()
        if student:
            return self._open_session(student, Role.STUDENT, password)

        logger.warning(f"Login failed, unknown username: {username}")
        raise AuthenticationFailure(f"Username '{username}' not found")

    def _open_session(self, user, role: Role, password: str) -> UserSession:
        if not verify_password(password, user.password_hash):
            logger.warning(f"Login failed, wrong password for {user.username}")
            raise AuthenticationFailure("Incorrect password")

        session = UserSession(
            user_id=user.id,
            username=user.username,
            role=role,
            full_name=user.full_name
        )
        self.sessions.add(session)

        logger.info(f"User logged in: {user.username} ({role.value})")

        return session

    def get_session(self, token: Optional[str]) -> UserSession:
        session = self.sessions.get(token) if token else None
        if session is None:
            raise AuthenticationFailure("Not logged in or session expired")
        return session

    def logout(self, token: str) -> bool:
        return self.sessions.remove(token)


# Global instance
auth_service = AuthService()
