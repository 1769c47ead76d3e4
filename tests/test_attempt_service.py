import pytest

from quiz_manager.exceptions import AlreadyCompleted, InvalidArgument, NotFound, PermissionDenied
from quiz_manager.models import StudentQuizResult
from quiz_manager.services.attempt_service import attempt_service
from quiz_manager.services.quiz_session import AttemptState
from quiz_manager.services.result_service import result_service
from quiz_manager.session import Role, UserSession


@pytest.fixture
def assigned_quiz(db, make_quiz, assign, student_id):
    quiz = make_quiz(letters=("A", "B", "C"), time_limit=1)
    assign(student_id, quiz.id)
    return quiz


def answer_all(attempt, user, letters):
    for index, letter in enumerate(letters):
        attempt_service.go_to(attempt.id, user, index)
        if letter is not None:
            attempt_service.answer(attempt.id, user, letter)


def test_start_requires_assignment(db, make_quiz, student_session):
    quiz = make_quiz()

    with pytest.raises(PermissionDenied):
        attempt_service.start(db, student_session, quiz.id)


def test_start_rejects_teachers(db, assigned_quiz, teacher_id):
    teacher = UserSession(user_id=teacher_id, username="teacher1", role=Role.LECTURER)

    with pytest.raises(PermissionDenied):
        attempt_service.start(db, teacher, assigned_quiz.id)


def test_start_unknown_quiz(db, student_session):
    with pytest.raises(NotFound):
        attempt_service.start(db, student_session, 999)


def test_start_loads_questions(db, assigned_quiz, student_session, clock):
    attempt = attempt_service.start(db, student_session, assigned_quiz.id, clock=clock)

    session = attempt.session
    assert session.state == AttemptState.IN_PROGRESS
    assert session.total_questions == 3
    assert session.time_remaining == 60
    assert session.current_question["options"]["A"] == "first"


def test_start_resumes_running_attempt(db, assigned_quiz, student_session, clock):
    first = attempt_service.start(db, student_session, assigned_quiz.id, clock=clock)
    attempt_service.answer(first.id, student_session, "A")

    second = attempt_service.start(db, student_session, assigned_quiz.id, clock=clock)

    assert second.id == first.id
    assert second.session.answers[0] == "A"


def test_attempt_hidden_from_other_students(db, assigned_quiz, student_session, clock):
    attempt = attempt_service.start(db, student_session, assigned_quiz.id, clock=clock)
    intruder = UserSession(user_id=student_session.user_id + 100, username="mallory", role=Role.STUDENT)

    with pytest.raises(NotFound):
        attempt_service.get(attempt.id, intruder)


def test_manual_submit_saves_result(db, assigned_quiz, student_session, clock):
    attempt = attempt_service.start(db, student_session, assigned_quiz.id, clock=clock)
    answer_all(attempt, student_session, ["A", "B", "D"])
    clock.advance(42)

    summary = attempt_service.submit(db, attempt.id, student_session)

    assert summary.saved is True
    assert summary.error is None
    assert summary.score == 20
    assert summary.total_points == 30
    assert summary.correct_answers == 2
    assert summary.completion_time_seconds == 42
    assert summary.time_taken == "0 minutes 42 seconds"
    assert summary.auto_submitted is False

    stored = result_service.get_result(db, student_session.user_id, assigned_quiz.id)
    assert stored.score == 20
    assert stored.completion_time_seconds == 42


def test_submit_twice_returns_same_summary(db, assigned_quiz, student_session, clock):
    attempt = attempt_service.start(db, student_session, assigned_quiz.id, clock=clock)
    answer_all(attempt, student_session, ["A", "B", "C"])

    first = attempt_service.submit(db, attempt.id, student_session)
    second = attempt_service.submit(db, attempt.id, student_session)

    assert second is first
    assert db.query(StudentQuizResult).count() == 1


def test_submit_before_last_question_rejected(db, assigned_quiz, student_session, clock):
    attempt = attempt_service.start(db, student_session, assigned_quiz.id, clock=clock)
    attempt_service.answer(attempt.id, student_session, "A")

    with pytest.raises(InvalidArgument):
        attempt_service.submit(db, attempt.id, student_session)

    assert db.query(StudentQuizResult).count() == 0


def test_timeout_submits_with_unanswered_last_question(db, assigned_quiz, student_session, clock):
    attempt = attempt_service.start(db, student_session, assigned_quiz.id, clock=clock)
    answer_all(attempt, student_session, ["A", "B", None])

    for _ in range(59):
        assert attempt_service.tick_all(db) == []
    clock.advance(60)
    expired = attempt_service.tick_all(db)

    assert expired == [attempt.id]
    assert attempt.summary.auto_submitted is True
    assert attempt.summary.saved is True
    assert attempt.summary.score == 20

    stored = result_service.get_result(db, student_session.user_id, assigned_quiz.id)
    assert stored.correct_answers == 2
    assert stored.completion_time_seconds == 60


def test_ticks_after_timeout_do_nothing(db, assigned_quiz, student_session, clock):
    attempt = attempt_service.start(db, student_session, assigned_quiz.id, clock=clock)

    clock.advance(60)
    assert attempt_service.tick_all(db) == [attempt.id]

    clock.advance(60)
    assert attempt_service.tick_all(db) == []
    assert db.query(StudentQuizResult).count() == 1


def test_late_countdown_does_not_extend_quiz(db, assigned_quiz, student_session, clock):
    attempt = attempt_service.start(db, student_session, assigned_quiz.id, clock=clock)

    # A single tick after a long stall still times the attempt out
    clock.advance(75)
    assert attempt_service.tick_all(db) == [attempt.id]
    assert attempt.summary.completion_time_seconds == 60


def test_registry_shrinks_after_submit(db, assigned_quiz, student_session, clock):
    attempt = attempt_service.start(db, student_session, assigned_quiz.id, clock=clock)
    answer_all(attempt, student_session, ["A", "B", "C"])
    summary = attempt_service.submit(db, attempt.id, student_session)

    # The summary stays readable until the next countdown pass
    assert attempt_service.get(attempt.id, student_session).summary is summary

    attempt_service.tick_all(db)

    assert len(attempt_service) == 0
    with pytest.raises(NotFound):
        attempt_service.get(attempt.id, student_session)


def test_registry_shrinks_after_timeout(db, assigned_quiz, student_session, clock):
    attempt_service.start(db, student_session, assigned_quiz.id, clock=clock)

    clock.advance(60)
    attempt_service.tick_all(db)
    assert len(attempt_service) == 1

    attempt_service.tick_all(db)
    assert len(attempt_service) == 0


def test_prune_keeps_running_attempts(db, make_quiz, assign, assigned_quiz, student_session, student_id, clock):
    finished = attempt_service.start(db, student_session, assigned_quiz.id, clock=clock)
    answer_all(finished, student_session, ["A", "B", "C"])
    attempt_service.submit(db, finished.id, student_session)
    other_quiz = make_quiz(name="Second")
    assign(student_id, other_quiz.id)
    running = attempt_service.start(db, student_session, other_quiz.id, clock=clock)

    assert attempt_service.prune_submitted() == 1
    assert attempt_service.get(running.id, student_session) is running


def test_duplicate_save_still_returns_summary(db, assigned_quiz, student_session, clock):
    attempt = attempt_service.start(db, student_session, assigned_quiz.id, clock=clock)
    answer_all(attempt, student_session, ["A", "B", "C"])

    # Another submission for the same pair lands first
    db.add(StudentQuizResult(
        student_id=student_session.user_id, quiz_id=assigned_quiz.id, score=0,
        total_points=30, correct_answers=0, total_questions=3,
        completion_time_seconds=5, submitted_at=assigned_quiz.created_at
    ))
    db.commit()

    summary = attempt_service.submit(db, attempt.id, student_session)

    assert summary.saved is False
    assert "already completed" in summary.error
    assert summary.score == 30
    assert attempt.session.state == AttemptState.SUBMITTED
    assert db.query(StudentQuizResult).count() == 1


def test_start_after_completion_rejected(db, assigned_quiz, student_session, clock):
    attempt = attempt_service.start(db, student_session, assigned_quiz.id, clock=clock)
    answer_all(attempt, student_session, ["A", "B", "C"])
    attempt_service.submit(db, attempt.id, student_session)

    with pytest.raises(AlreadyCompleted):
        attempt_service.start(db, student_session, assigned_quiz.id, clock=clock)


def test_abandon_discards_attempt(db, assigned_quiz, student_session, clock):
    attempt = attempt_service.start(db, student_session, assigned_quiz.id, clock=clock)

    attempt_service.abandon(attempt.id, student_session)

    with pytest.raises(NotFound):
        attempt_service.get(attempt.id, student_session)
    assert attempt_service.tick_all(db) == []
    assert db.query(StudentQuizResult).count() == 0
