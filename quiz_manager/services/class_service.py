"""
Class management service
Teacher-owned classes and their student rosters
"""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from quiz_manager.exceptions import AlreadyAssigned, InvalidArgument, NotFound, PermissionDenied
from quiz_manager.models import ClassRoom, ClassStudent, Student

logger = logging.getLogger(__name__)


class ClassService:
    """Every operation is scoped to the lecturer who owns the class"""

    def create_class(
        self,
        db: Session,
        lecturer_id: int,
        name: str,
        description: Optional[str] = None
    ) -> ClassRoom:
        if not name or not name.strip():
            raise InvalidArgument("Class name is required")

        class_room = ClassRoom(name=name.strip(), description=description, lecturer_id=lecturer_id)
        db.add(class_room)
        db.commit()
        db.refresh(class_room)

        logger.info(f"Class created: {class_room.id} '{class_room.name}' by lecturer {lecturer_id}")

        return class_room

    def get_classes_of_lecturer(self, db: Session, lecturer_id: int) -> List[ClassRoom]:
        return (
            db.query(ClassRoom)
            .filter(ClassRoom.lecturer_id == lecturer_id)
            .order_by(ClassRoom.id.desc())
            .all()
        )

    def get_owned_class(self, db: Session, lecturer_id: int, class_id: int) -> ClassRoom:
        """
        Raises:
            NotFound: class does not exist
            PermissionDenied: class belongs to another lecturer
        """
        class_room = db.query(ClassRoom).filter(ClassRoom.id == class_id).first()
        if not class_room:
            raise NotFound(f"Class not found with ID: {class_id}")

        if class_room.lecturer_id != lecturer_id:
            raise PermissionDenied("You do not own this class")

        return class_room

    def delete_class(self, db: Session, lecturer_id: int, class_id: int) -> None:
        class_room = self.get_owned_class(db, lecturer_id, class_id)

        db.query(ClassStudent).filter(ClassStudent.class_id == class_id).delete(synchronize_session=False)
        db.delete(class_room)
        db.commit()

        logger.info(f"Class deleted: {class_id}")

    def get_students_of_class(self, db: Session, lecturer_id: int, class_id: int) -> List[Student]:
        self.get_owned_class(db, lecturer_id, class_id)

        return (
            db.query(Student)
            .join(ClassStudent, ClassStudent.student_id == Student.id)
            .filter(ClassStudent.class_id == class_id)
            .order_by(Student.username)
            .all()
        )

    def is_in_class(self, db: Session, class_id: int, student_id: int) -> bool:
        return db.query(ClassStudent).filter(
            ClassStudent.class_id == class_id,
            ClassStudent.student_id == student_id
        ).first() is not None

    def add_student_to_class(
        self,
        db: Session,
        lecturer_id: int,
        class_id: int,
        student_id: int
    ) -> ClassStudent:
        """
        Raises:
            NotFound: class or student does not exist
            PermissionDenied: class belongs to another lecturer
            AlreadyAssigned: student is already in the class
        """
        self.get_owned_class(db, lecturer_id, class_id)

        if db.query(Student.id).filter(Student.id == student_id).first() is None:
            raise NotFound(f"Student not found with ID: {student_id}")

        if self.is_in_class(db, class_id, student_id):
            raise AlreadyAssigned("Student is already in this class")

        membership = ClassStudent(class_id=class_id, student_id=student_id)
        db.add(membership)
        db.commit()
        db.refresh(membership)

        logger.info(f"Student {student_id} added to class {class_id}")

        return membership


# Global instance
class_service = ClassService()
