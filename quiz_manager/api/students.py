"""
Student dashboard endpoints and student import
"""
from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session
from typing import List
import logging

from quiz_manager.api.deps import require_student, require_teacher
from quiz_manager.database import get_db
from quiz_manager.exceptions import InvalidArgument
from quiz_manager.schemas.quiz import StudentQuizResponse
from quiz_manager.schemas.result import ImportResultResponse, ResultResponse
from quiz_manager.services.quiz_service import quiz_service
from quiz_manager.services.result_service import result_service
from quiz_manager.services.student_import_service import student_import_service
from quiz_manager.session import UserSession

router = APIRouter(prefix="/api/students", tags=["students"])
logger = logging.getLogger(__name__)


def read_csv_upload(file: UploadFile) -> str:
    """Decode an uploaded CSV file (UTF-8, BOM tolerated)"""
    raw = file.file.read()
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise InvalidArgument("CSV file must be UTF-8 encoded")


@router.get("/me/quizzes", response_model=List[StudentQuizResponse])
async def my_quizzes(
    db: Session = Depends(get_db),
    user: UserSession = Depends(require_student)
):
    """
    Quizzes assigned to the logged-in student

    `completed` tells the client whether to offer "Join" or show a
    "Completed" badge.
    """
    quizzes = quiz_service.get_quizzes_for_student(db, user.user_id)
    
    return [
        StudentQuizResponse(
            id=quiz.id,
            name=quiz.name,
            time_limit=quiz.time_limit,
            number_of_questions=quiz.number_of_questions,
            created_at=quiz.created_at,
            completed=result_service.has_student_completed_quiz(db, user.user_id, quiz.id)
        )
        for quiz in quizzes
    ]


@router.get("/me/results", response_model=List[ResultResponse])
async def my_results(
    db: Session = Depends(get_db),
    user: UserSession = Depends(require_student)
):
    results = result_service.get_results_by_student_id(db, user.user_id)
    return [ResultResponse.from_result(r) for r in results]


@router.post("/import", response_model=ImportResultResponse)
def import_students(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    user: UserSession = Depends(require_teacher)
):
    """
    Import students from CSV (username,full_name,student_code)

    Plain def: hashing one password per new student runs in the threadpool.
    """
    content = read_csv_upload(file)
    result = student_import_service.import_students_from_csv(db, content)
    
    return ImportResultResponse(
        success_count=result.success_count,
        error_count=result.error_count,
        total_processed=result.total_processed,
        error_messages=result.error_messages
    )
