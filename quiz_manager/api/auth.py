"""
Registration, login and logout endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from quiz_manager.api.deps import get_current_user, get_token
from quiz_manager.database import get_db
from quiz_manager.schemas.auth import (
    LoginRequest,
    RegisterRequest,
    RegisterResponse,
    SessionResponse,
    UserResponse,
)
from quiz_manager.services.auth_service import auth_service
from quiz_manager.session import UserSession

router = APIRouter(prefix="/api/auth", tags=["auth"])
logger = logging.getLogger(__name__)


@router.post("/register", response_model=RegisterResponse, status_code=201)
def register(request: RegisterRequest, db: Session = Depends(get_db)):
    """
    Create a teacher or student account

    Usernames are unique across both roles (409 on conflict). Plain def:
    bcrypt runs in the threadpool, off the event loop.
    """
    user_id = auth_service.register(
        db,
        username=request.username,
        password=request.password,
        full_name=request.full_name,
        role=request.role,
        student_code=request.student_code
    )
    
    return RegisterResponse(user_id=user_id, username=request.username, role=request.role)


@router.post("/login", response_model=SessionResponse)
def login(request: LoginRequest, db: Session = Depends(get_db)):
    """Verify credentials and return a session token"""
    session = auth_service.login(db, request.username, request.password)
    return SessionResponse.model_validate(session)


@router.post("/logout", status_code=204)
async def logout(token: str = Depends(get_token), user: UserSession = Depends(get_current_user)):
    auth_service.logout(token)


@router.get("/me", response_model=UserResponse)
async def me(user: UserSession = Depends(get_current_user)):
    return UserResponse.model_validate(user)
