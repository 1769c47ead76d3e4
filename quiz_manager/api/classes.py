"""
Class management endpoints (teacher)
"""
from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session
from typing import List
import logging

from quiz_manager.api.deps import require_teacher
from quiz_manager.api.students import read_csv_upload
from quiz_manager.database import get_db
from quiz_manager.schemas.classroom import AddClassStudentRequest, ClassCreateRequest, ClassResponse
from quiz_manager.schemas.quiz import StudentResponse
from quiz_manager.schemas.result import ImportResultResponse
from quiz_manager.services.class_service import class_service
from quiz_manager.services.student_import_service import student_import_service
from quiz_manager.session import UserSession

router = APIRouter(prefix="/api/classes", tags=["classes"])
logger = logging.getLogger(__name__)


@router.get("", response_model=List[ClassResponse])
async def my_classes(db: Session = Depends(get_db), user: UserSession = Depends(require_teacher)):
    return class_service.get_classes_of_lecturer(db, user.user_id)


@router.post("", response_model=ClassResponse, status_code=201)
async def create_class(
    request: ClassCreateRequest,
    db: Session = Depends(get_db),
    user: UserSession = Depends(require_teacher)
):
    return class_service.create_class(db, user.user_id, request.name, request.description)


@router.delete("/{class_id}", status_code=204)
async def delete_class(
    class_id: int,
    db: Session = Depends(get_db),
    user: UserSession = Depends(require_teacher)
):
    class_service.delete_class(db, user.user_id, class_id)


@router.get("/{class_id}/students", response_model=List[StudentResponse])
async def class_students(
    class_id: int,
    db: Session = Depends(get_db),
    user: UserSession = Depends(require_teacher)
):
    return class_service.get_students_of_class(db, user.user_id, class_id)


@router.post("/{class_id}/students", status_code=201)
async def add_class_student(
    class_id: int,
    request: AddClassStudentRequest,
    db: Session = Depends(get_db),
    user: UserSession = Depends(require_teacher)
):
    membership = class_service.add_student_to_class(db, user.user_id, class_id, request.student_id)
    return {"class_id": membership.class_id, "student_id": membership.student_id}


@router.post("/{class_id}/import", response_model=ImportResultResponse)
def import_class_students(
    class_id: int,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    user: UserSession = Depends(require_teacher)
):
    """Import students from CSV and enroll them in the class"""
    content = read_csv_upload(file)
    result = student_import_service.import_students_from_csv(
        db, content, lecturer_id=user.user_id, class_id=class_id
    )
    
    return ImportResultResponse(
        success_count=result.success_count,
        error_count=result.error_count,
        total_processed=result.total_processed,
        error_messages=result.error_messages
    )
