"""
Quiz management endpoints (teacher)
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from quiz_manager.api.deps import require_teacher
from quiz_manager.database import get_db
from quiz_manager.schemas.quiz import (
    AssignStudentRequest,
    QuestionResponse,
    QuizCreateRequest,
    QuizResponse,
    StudentResponse,
)
from quiz_manager.services.quiz_service import quiz_service
from quiz_manager.session import UserSession

router = APIRouter(prefix="/api/quizzes", tags=["quizzes"])
logger = logging.getLogger(__name__)


@router.get("", response_model=List[QuizResponse])
async def list_quizzes(
    name: Optional[str] = None,
    db: Session = Depends(get_db),
    user: UserSession = Depends(require_teacher)
):
    """All quizzes, newest first; `name` filters by case-insensitive substring"""
    if name:
        return quiz_service.search_quizzes_by_name(db, name)
    return quiz_service.get_all_quizzes(db)


@router.post("", response_model=QuizResponse, status_code=201)
async def create_quiz(
    request: QuizCreateRequest,
    db: Session = Depends(get_db),
    user: UserSession = Depends(require_teacher)
):
    """
    Create a quiz together with its questions

    All rows are written in one transaction: either the quiz and every
    question exist afterwards, or none of them do.
    """
    logger.info(f"{user.username} creating quiz '{request.name}'")
    
    return quiz_service.create_quiz_with_questions(
        db,
        name=request.name,
        time_limit=request.time_limit,
        questions=[q.model_dump() for q in request.questions]
    )


@router.get("/{quiz_id}", response_model=QuizResponse)
async def get_quiz(
    quiz_id: int,
    db: Session = Depends(get_db),
    user: UserSession = Depends(require_teacher)
):
    return quiz_service.get_quiz_by_id(db, quiz_id)


@router.delete("/{quiz_id}", status_code=204)
async def delete_quiz(
    quiz_id: int,
    db: Session = Depends(get_db),
    user: UserSession = Depends(require_teacher)
):
    quiz_service.delete_quiz(db, quiz_id)


@router.get("/{quiz_id}/questions", response_model=List[QuestionResponse])
async def get_questions(
    quiz_id: int,
    db: Session = Depends(get_db),
    user: UserSession = Depends(require_teacher)
):
    return quiz_service.get_questions_for_quiz(db, quiz_id)


@router.get("/{quiz_id}/students", response_model=List[StudentResponse])
async def get_students(
    quiz_id: int,
    db: Session = Depends(get_db),
    user: UserSession = Depends(require_teacher)
):
    return quiz_service.get_students_for_quiz(db, quiz_id)


@router.post("/{quiz_id}/students", status_code=201)
async def assign_student(
    quiz_id: int,
    request: AssignStudentRequest,
    db: Session = Depends(get_db),
    user: UserSession = Depends(require_teacher)
):
    """Assign the quiz to a student by username (409 if already assigned)"""
    assigned = quiz_service.assign_quiz_to_student(db, quiz_id, request.username)
    return {"quiz_id": quiz_id, "username": request.username, "assigned": assigned}


@router.delete("/{quiz_id}/students/{username}", status_code=204)
async def remove_student(
    quiz_id: int,
    username: str,
    db: Session = Depends(get_db),
    user: UserSession = Depends(require_teacher)
):
    quiz_service.remove_student_from_quiz(db, quiz_id, username)
