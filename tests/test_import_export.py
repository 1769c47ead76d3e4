import csv
import io

import pytest

from quiz_manager.exceptions import NotFound, PermissionDenied
from quiz_manager.models import Student, StudentQuizResult
from quiz_manager.services.auth_service import auth_service
from quiz_manager.services.class_service import class_service
from quiz_manager.services.export_service import EXPORT_HEADER, export_service
from quiz_manager.services.result_service import result_service
from quiz_manager.services.student_import_service import student_import_service


def test_import_with_header(db):
    content = "username,full_name,student_code\nann,Ann Lee,S1\nben,Ben Ko,S2\n"

    result = student_import_service.import_students_from_csv(db, content)

    assert result.success_count == 2
    assert not result.has_errors
    assert {s.username for s in db.query(Student).all()} == {"ann", "ben"}


def test_import_without_header(db):
    result = student_import_service.import_students_from_csv(db, "ann,Ann Lee,S1\n")

    assert result.success_count == 1
    assert db.query(Student).one().student_code == "S1"


def test_imported_student_logs_in_with_default_password(db):
    student_import_service.import_students_from_csv(db, "ann,Ann Lee,\n")

    session = auth_service.login(db, "ann", "123456")

    assert session.is_student
    assert db.query(Student).one().student_code is None


def test_import_collects_row_errors(db):
    content = "\n".join([
        "username,full_name,student_code",
        "ann,Ann Lee,S1",
        "broken,row",
        ",No Name,S3",
        "nofull,,S4",
        "",
        "ben,Ben Ko,S5",
    ])

    result = student_import_service.import_students_from_csv(db, content)

    assert result.success_count == 2
    assert result.error_messages == [
        "Row 3: Missing data (expected 3 columns: username,full_name,student_code)",
        "Row 4: Username must not be empty",
        "Row 5: Full name must not be empty",
    ]
    assert result.total_processed == 5


def test_import_empty_content(db):
    result = student_import_service.import_students_from_csv(db, "")

    assert result.success_count == 0
    assert result.error_messages == ["CSV file is empty"]


def test_import_reuses_existing_student(db, student_id):
    result = student_import_service.import_students_from_csv(db, "alice,Someone Else,S9\n")

    assert result.success_count == 1
    assert db.query(Student).count() == 1
    assert db.query(Student).one().full_name == "Alice Student"


def test_import_rejects_teacher_username(db, teacher_id):
    result = student_import_service.import_students_from_csv(db, "teacher1,Not A Student,S1\n")

    assert result.success_count == 0
    assert result.error_messages == ["Row 1: Username 'teacher1' already belongs to a teacher"]


def test_import_into_class(db, teacher_id, student_id):
    class_room = class_service.create_class(db, teacher_id, "CS101")
    class_service.add_student_to_class(db, teacher_id, class_room.id, student_id)

    result = student_import_service.import_students_from_csv(
        db, "alice,Alice Student,S001\nann,Ann Lee,S1\n",
        lecturer_id=teacher_id, class_id=class_room.id
    )

    assert result.success_count == 1
    assert result.error_messages == ["Row 1: Student 'alice' is already in this class"]
    roster = class_service.get_students_of_class(db, teacher_id, class_room.id)
    assert [s.username for s in roster] == ["alice", "ann"]


def test_import_into_foreign_class(db, teacher_id):
    other_id = auth_service.register_teacher(db, "teacher2", "pw", "Other")
    class_room = class_service.create_class(db, other_id, "Not yours")

    with pytest.raises(PermissionDenied):
        student_import_service.import_students_from_csv(
            db, "ann,Ann Lee,S1\n", lecturer_id=teacher_id, class_id=class_room.id
        )
    with pytest.raises(NotFound):
        student_import_service.import_students_from_csv(
            db, "ann,Ann Lee,S1\n", lecturer_id=teacher_id, class_id=999
        )


def test_export_writes_plain_integer_score(db, make_quiz, student_id):
    quiz = make_quiz(name="Midterm", letters=("A",) * 10)
    result_service.save_result(db, StudentQuizResult(
        student_id=student_id, quiz_id=quiz.id, score=85, total_points=100,
        correct_answers=8, total_questions=10, completion_time_seconds=300
    ))

    content = export_service.export_quiz_results_csv(db, quiz.id)
    rows = list(csv.reader(io.StringIO(content)))

    assert rows[0] == EXPORT_HEADER
    assert rows[1] == ["Midterm", "alice", "85"]


def test_export_quotes_names_with_commas(db, make_quiz, student_id):
    quiz = make_quiz(name="Quiz, part 1", letters=("A",))
    result_service.save_result(db, StudentQuizResult(
        student_id=student_id, quiz_id=quiz.id, score=10, total_points=10,
        correct_answers=1, total_questions=1, completion_time_seconds=12
    ))

    content = export_service.export_quiz_results_csv(db, quiz.id)

    assert content == 'Quiz Name,Username,Score\n"Quiz, part 1",alice,10\n'


def test_export_unknown_quiz(db):
    with pytest.raises(NotFound):
        export_service.export_quiz_results_csv(db, 999)
