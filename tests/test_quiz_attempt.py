import logging
from datetime import datetime, timedelta, timezone
from uuid import UUID, uuid4

import pytest

from tutorcenter.core.errors import (
    AttemptStateError,
    DuplicateSubmissionError,
    QuizExpiredError,
    QuizNotAssignedError,
    QuizNotFoundError,
    SubmissionWriteError,
)
from tutorcenter.models.quiz_db.quiz_crud import get_submission, load_quiz, write_submission
from tutorcenter.services.quiz_attempt import AttemptState


def _answer_all(attempt, letters):
    for question, letter in zip(attempt.quiz.questions, letters):
        if letter is not None:
            attempt.select(question.id, letter)


def test_loader_keeps_question_creation_order(db, make_quiz):
    quiz = make_quiz()

    loaded = load_quiz(db, quiz.id)

    assert [q.question for q in loaded.questions] == ["Q1", "Q2", "Q3"]
    assert loaded.time_limit_minutes == 0


def test_loader_reports_missing_quiz(db):
    with pytest.raises(QuizNotFoundError):
        load_quiz(db, uuid4())


def test_start_opens_answering_state(db, registry, student, make_quiz):
    quiz = make_quiz()

    started = registry.start(db, student, quiz.id)

    assert started.completed is None
    assert started.attempt.state == AttemptState.answering
    assert started.attempt.session.index == 0
    assert not started.attempt.timer.enabled
    assert len(registry) == 1


def test_review_round_trip_leaves_answers_unchanged(db, registry, student, make_quiz):
    attempt = registry.start(db, student, make_quiz().id).attempt
    _answer_all(attempt, ["a", None, "d"])
    before = attempt.session.snapshot()

    summary = attempt.open_review()
    assert attempt.state == AttemptState.reviewing
    assert summary.unanswered_count == 1
    attempt.continue_editing()

    assert attempt.state == AttemptState.answering
    assert attempt.session.snapshot() == before


def test_answers_cannot_change_during_review(db, registry, student, make_quiz):
    attempt = registry.start(db, student, make_quiz().id).attempt
    attempt.open_review()

    with pytest.raises(AttemptStateError):
        attempt.select(attempt.quiz.questions[0].id, "a")
    with pytest.raises(AttemptStateError):
        attempt.next()


def test_final_submit_writes_one_submission(db, registry, student, make_quiz):
    quiz = make_quiz()
    attempt = registry.start(db, student, quiz.id).attempt
    _answer_all(attempt, ["a", "b", "d"])
    attempt.open_review()

    result = registry.submit(db, attempt)

    assert attempt.state == AttemptState.submitted
    assert result.score == 2
    assert result.total_questions == 3
    assert result.percentage == 67
    stored = get_submission(db, student.id, quiz.id)
    assert stored.score == 2
    assert stored.answers == attempt.session.snapshot()
    assert registry.get(student.id, quiz.id) is None


def test_final_submit_requires_review(db, registry, student, make_quiz):
    attempt = registry.start(db, student, make_quiz().id).attempt

    with pytest.raises(AttemptStateError):
        registry.submit(db, attempt)


def test_reopening_after_submission_shows_results(db, registry, student, make_quiz):
    quiz = make_quiz()
    attempt = registry.start(db, student, quiz.id).attempt
    _answer_all(attempt, ["a", "b", "c"])
    attempt.open_review()
    registry.submit(db, attempt)

    again = registry.start(db, student, quiz.id)

    assert again.attempt is None
    assert again.completed.score == 3
    assert len(registry) == 0


def test_reopening_in_progress_attempt_resumes_it(db, registry, student, make_quiz):
    quiz = make_quiz(time_limit_minutes=5)
    first = registry.start(db, student, quiz.id).attempt
    first.select(first.quiz.questions[0].id, "b")
    for _ in range(30):
        first.tick()

    second = registry.start(db, student, quiz.id)

    assert second.resumed
    assert second.attempt is first
    assert second.attempt.timer.remaining_seconds == 5 * 60 - 30
    assert second.attempt.session.answers


def test_timer_expiry_forces_submission_with_no_answers(db, registry, session_factory, student, make_quiz, caplog):
    quiz = make_quiz(time_limit_minutes=1)
    attempt = registry.start(db, student, quiz.id).attempt

    submitted = []
    with caplog.at_level(logging.INFO, logger="tutorcenter.services.quiz_attempt"):
        for second in range(1, 61):
            submitted = registry.tick_all(session_factory)
            if second < 60:
                assert submitted == []

    assert submitted == [attempt]
    assert attempt.forced
    assert attempt.state == AttemptState.submitted
    db.expire_all()
    stored = get_submission(db, student.id, quiz.id)
    assert stored.answers == {}
    assert stored.score == 0
    assert stored.total_questions == 3
    assert "Time is up" in caplog.text


def test_timer_expiry_submits_partial_answers(db, registry, session_factory, student, make_quiz):
    quiz = make_quiz(time_limit_minutes=1)
    attempt = registry.start(db, student, quiz.id).attempt
    _answer_all(attempt, ["a", "c", None])

    for _ in range(60):
        registry.tick_all(session_factory)

    db.expire_all()
    stored = get_submission(db, student.id, quiz.id)
    assert stored.answers == {attempt.quiz.questions[0].id: "a", attempt.quiz.questions[1].id: "c"}
    assert stored.score == 1


def test_timer_is_paused_while_reviewing(db, registry, session_factory, student, make_quiz):
    quiz = make_quiz(time_limit_minutes=1)
    attempt = registry.start(db, student, quiz.id).attempt
    for _ in range(10):
        registry.tick_all(session_factory)
    attempt.open_review()

    for _ in range(120):
        registry.tick_all(session_factory)

    assert attempt.state == AttemptState.reviewing
    assert attempt.timer.remaining_seconds == 50
    assert get_submission(db, student.id, quiz.id) is None


def test_write_failure_returns_to_review_with_answers(db, registry, student, make_quiz, monkeypatch):
    quiz = make_quiz()
    attempt = registry.start(db, student, quiz.id).attempt
    _answer_all(attempt, ["a", "b", "c"])
    attempt.open_review()

    def failing_write(*args, **kwargs):
        raise SubmissionWriteError("database unavailable")

    monkeypatch.setattr("tutorcenter.services.quiz_attempt.write_submission", failing_write)
    with pytest.raises(SubmissionWriteError):
        registry.submit(db, attempt)

    assert attempt.state == AttemptState.reviewing
    assert len(attempt.session.answers) == 3
    assert registry.get(student.id, quiz.id) is attempt

    monkeypatch.undo()
    result = registry.submit(db, attempt)
    assert result.score == 3


def test_database_rejects_second_submission(db, student, make_quiz):
    quiz = make_quiz()
    write_submission(db, student.id, quiz.id, total_questions=3, answers={}, score=0)

    with pytest.raises(DuplicateSubmissionError):
        write_submission(db, student.id, quiz.id, total_questions=3, answers={}, score=3)


def test_expired_quiz_cannot_be_started(db, registry, student, make_quiz):
    quiz = make_quiz(deadline=datetime.now(timezone.utc) - timedelta(hours=1))

    with pytest.raises(QuizExpiredError):
        registry.start(db, student, quiz.id)


def test_quiz_for_another_category_cannot_be_started(db, registry, student, make_quiz):
    quiz = make_quiz(category="act")

    with pytest.raises(QuizNotAssignedError):
        registry.start(db, student, quiz.id)


def test_discard_stops_the_timer(db, registry, student, make_quiz):
    quiz = make_quiz(time_limit_minutes=1)
    attempt = registry.start(db, student, quiz.id).attempt

    assert registry.discard(student.id, UUID(attempt.quiz.id)) is attempt
    assert not attempt.timer.running
    assert registry.get(student.id, quiz.id) is None
