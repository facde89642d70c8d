import pytest

from tutorcenter.core.errors import InvalidScoreError
from tutorcenter.models.quiz_db.quiz_crud import get_submission, update_submission_score, write_submission


@pytest.fixture
def submitted(db, student, make_quiz):
    quiz = make_quiz(title="Algebra")
    question_ids = [str(q.id) for q in sorted(quiz.questions, key=lambda q: q.position)]
    write_submission(
        db, student.id, quiz.id, total_questions=3,
        answers={question_ids[0]: "a", question_ids[1]: "c"}, score=1,
    )
    return quiz


def test_lists_submissions_newest_first(client, db, admin, make_user, submitted, auth_headers):
    later = make_user("nour")
    write_submission(db, later.id, submitted.id, total_questions=3, answers={}, score=0)

    rows = client.get("/quiz/submissions", headers=auth_headers(admin)).json()

    assert [r["username"] for r in rows] == ["nour", "omar"]
    assert rows[1]["quiz_title"] == "Algebra"
    assert rows[1]["percentage"] == 33
    assert rows[1]["level"] == "basics"


def test_submission_detail_shows_each_answer(client, admin, student, submitted, auth_headers):
    detail = client.get(f"/quiz/submissions/{student.id}/{submitted.id}", headers=auth_headers(admin)).json()

    breakdown = detail["breakdown"]
    assert [g["your_answer"] for g in breakdown] == ["a", "c", None]
    assert [g["is_correct"] for g in breakdown] == [True, False, False]
    assert breakdown[1]["correct_answer_text"] == "B2"


def test_admin_can_regrade_within_range(client, db, admin, student, submitted, auth_headers):
    url = f"/quiz/submissions/{student.id}/{submitted.id}/score"

    response = client.put(url, json={"score": 3}, headers=auth_headers(admin))

    assert response.status_code == 200
    assert response.json()["score"] == 3
    assert response.json()["percentage"] == 100
    db.expire_all()
    assert get_submission(db, student.id, submitted.id).score == 3


def test_regrade_outside_range_is_rejected(client, db, admin, student, submitted, auth_headers):
    url = f"/quiz/submissions/{student.id}/{submitted.id}/score"

    assert client.put(url, json={"score": 4}, headers=auth_headers(admin)).status_code == 400
    assert client.put(url, json={"score": -1}, headers=auth_headers(admin)).status_code == 422
    with pytest.raises(InvalidScoreError):
        update_submission_score(db, student.id, submitted.id, 7)
    db.expire_all()
    assert get_submission(db, student.id, submitted.id).score == 1


def test_regrade_unknown_submission(client, admin, make_user, submitted, auth_headers):
    other = make_user("adam")

    response = client.put(
        f"/quiz/submissions/{other.id}/{submitted.id}/score", json={"score": 1}, headers=auth_headers(admin),
    )

    assert response.status_code == 404


def test_progress_is_admin_only(client, student, submitted, auth_headers):
    assert client.get("/quiz/submissions", headers=auth_headers(student)).status_code == 403
