"""
Student CSV import service
CSV format: username,full_name,student_code (header row optional)
"""
import csv
import io
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy.orm import Session

from quiz_manager.config import settings
from quiz_manager.exceptions import DuplicateIdentity, QuizAppError
from quiz_manager.models import Student
from quiz_manager.services.auth_service import auth_service, hash_password
from quiz_manager.services.class_service import class_service

logger = logging.getLogger(__name__)


@dataclass
class ImportResult:
    success_count: int = 0
    error_messages: List[str] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(self.error_messages)

    @property
    def total_processed(self) -> int:
        return self.success_count + self.error_count

    @property
    def has_errors(self) -> bool:
        return self.error_count > 0

    def add_error(self, message: str) -> None:
        self.error_messages.append(message)


class StudentImportService:
    """
    Import students from CSV text

    Existing students (matched by username) are reused; new ones are created
    with the default password. Row failures are collected, never fatal.
    """

    def import_students_from_csv(
        self,
        db: Session,
        content: str,
        lecturer_id: Optional[int] = None,
        class_id: Optional[int] = None
    ) -> ImportResult:
        """
        Args:
            db: Database session
            content: CSV text
            lecturer_id: Required with class_id, must own the class
            class_id: Optional class to enroll every imported student in

        Raises:
            NotFound / PermissionDenied: the target class is missing or not owned
        """
        result = ImportResult()

        if class_id is not None:
            class_service.get_owned_class(db, lecturer_id, class_id)

        rows = list(csv.reader(io.StringIO(content)))
        if not rows:
            result.add_error("CSV file is empty")
            return result

        start = 1 if self.has_header(rows[0]) else 0

        for index in range(start, len(rows)):
            row = rows[index]
            row_number = index + 1

            if not any(cell.strip() for cell in row):
                continue

            if len(row) < 3:
                result.add_error(
                    f"Row {row_number}: Missing data (expected 3 columns: username,full_name,student_code)"
                )
                continue

            username, full_name, student_code = (cell.strip() for cell in row[:3])

            if not username:
                result.add_error(f"Row {row_number}: Username must not be empty")
                continue

            if not full_name:
                result.add_error(f"Row {row_number}: Full name must not be empty")
                continue

            try:
                student = self._get_or_create_student(db, username, full_name, student_code)

                if class_id is not None:
                    if class_service.is_in_class(db, class_id, student.id):
                        result.add_error(f"Row {row_number}: Student '{username}' is already in this class")
                        continue
                    class_service.add_student_to_class(db, lecturer_id, class_id, student.id)

                result.success_count += 1

            except QuizAppError as e:
                db.rollback()
                result.add_error(f"Row {row_number}: {e.message}")
            except Exception as e:
                db.rollback()
                logger.error(f"Import row {row_number} failed: {str(e)}")
                result.add_error(f"Row {row_number}: Error - {str(e)}")

        logger.info(
            f"Student import finished: {result.success_count} imported, "
            f"{result.error_count} errors"
        )

        return result

    @staticmethod
    def has_header(first_row: List[str]) -> bool:
        return bool(first_row) and first_row[0].strip().lower() == "username"

    def _get_or_create_student(
        self,
        db: Session,
        username: str,
        full_name: str,
        student_code: str
    ) -> Student:
        student = db.query(Student).filter(Student.username == username).first()
        if student:
            return student

        # Teachers share the username space
        if auth_service.username_exists(db, username):
            raise DuplicateIdentity(f"Username '{username}' already belongs to a teacher")

        student = Student(
            username=username,
            password_hash=hash_password(settings.DEFAULT_STUDENT_PASSWORD),
            full_name=full_name,
            student_code=student_code or None
        )
        db.add(student)
        db.commit()
        db.refresh(student)

        logger.info(f"Imported new student {username} (id={student.id})")

        return student


# Global instance
student_import_service = StudentImportService()
