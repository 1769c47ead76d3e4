"""
Shared API dependencies - session resolution and role checks
"""
from typing import Optional

from fastapi import Depends, Header

from quiz_manager.exceptions import PermissionDenied
from quiz_manager.services.auth_service import auth_service
from quiz_manager.session import UserSession


def get_token(authorization: Optional[str] = Header(None)) -> Optional[str]:
    """Extract the session token from "Authorization: Bearer <token>" """
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token.strip()


def get_current_user(token: Optional[str] = Depends(get_token)) -> UserSession:
    return auth_service.get_session(token)


def require_teacher(user: UserSession = Depends(get_current_user)) -> UserSession:
    if not user.is_lecturer:
        raise PermissionDenied("Only teachers can perform this action")
    return user


def require_student(user: UserSession = Depends(get_current_user)) -> UserSession:
    if not user.is_student:
        raise PermissionDenied("Only students can perform this action")
    return user
