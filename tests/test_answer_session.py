import pytest

from tutorcenter.core.errors import InvalidAnswerError
from tutorcenter.services.answer_session import AnswerSession


@pytest.fixture
def session():
    return AnswerSession(["q1", "q2", "q3"])


def test_selecting_again_overwrites_previous_choice(session):
    session.select("q1", "a")
    session.select("q1", "C")

    assert session.answers == {"q1": "c"}


def test_rejects_choice_outside_a_to_d(session):
    with pytest.raises(InvalidAnswerError):
        session.select("q1", "e")
    assert session.answers == {}


def test_rejects_question_from_another_quiz(session):
    with pytest.raises(InvalidAnswerError):
        session.select("q99", "a")


def test_navigation_is_clamped(session):
    assert session.previous() == 0
    assert session.next() == 1
    assert session.next() == 2
    assert session.next() == 2
    assert session.is_last
    assert session.go_to(-5) == 0
    assert session.is_first


def test_navigation_keeps_answers(session):
    session.select("q1", "a")
    session.next()
    session.select("q2", "b")
    session.previous()
    session.previous()

    assert session.answers == {"q1": "a", "q2": "b"}
    assert session.current_question_id == "q1"


def test_all_answered_requires_every_question(session):
    session.select("q1", "a")
    session.select("q2", "b")
    assert not session.all_answered
    assert session.unanswered_ids == ["q3"]

    session.select("q3", "d")
    assert session.all_answered
    assert session.unanswered_ids == []


def test_snapshot_is_a_copy(session):
    session.select("q1", "a")
    snapshot = session.snapshot()
    snapshot["q2"] = "b"

    assert session.answers == {"q1": "a"}


def test_empty_quiz_has_no_current_question():
    session = AnswerSession([])

    assert session.current_question_id is None
    assert session.next() == 0
    assert session.all_answered
