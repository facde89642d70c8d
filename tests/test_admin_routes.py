from tutorcenter.models.quiz_db.quiz_crud import get_questions, write_submission
from tutorcenter.models.quiz_db.seed_quiz import sample_quiz, seed_admin, seed_sample_quiz
from tutorcenter.models.user_db.user_db_crud import get_user_by_id


def test_register_and_list_users(client, admin, auth_headers):
    headers = auth_headers(admin)

    created = client.post(
        "/users/register",
        json={"username": "maya", "password": "pw", "role": "student", "category": "est", "level": "advanced"},
        headers=headers,
    )
    assert created.status_code == 200
    assert created.json()["is_active"] is True

    again = client.post("/users/register", json={"username": "maya", "password": "pw"}, headers=headers)
    assert again.status_code == 400

    page = client.get("/users/", params={"role": "student"}, headers=headers).json()
    assert page["total"] == 1
    assert page["items"][0]["username"] == "maya"


def test_user_routes_need_admin(client, student, auth_headers):
    response = client.get("/users/", headers=auth_headers(student))

    assert response.status_code == 403


def test_deleting_a_student_removes_their_submissions(client, db, admin, student, auth_headers, make_quiz):
    quiz = make_quiz()
    write_submission(db, student.id, quiz.id, total_questions=3, answers={}, score=0)
    student_id = student.id

    response = client.delete(f"/users/{student_id}", headers=auth_headers(admin))

    assert response.status_code == 200
    assert response.json()["username"] == "omar"
    db.expire_all()
    assert get_user_by_id(db, student_id) is None


def test_group_membership(client, admin, student, auth_headers):
    headers = auth_headers(admin)
    group = client.post("/groups/", json={"name": "Saturday SAT"}, headers=headers).json()

    duplicate = client.post("/groups/", json={"name": "Saturday SAT"}, headers=headers)
    assert duplicate.status_code == 400

    added = client.post(f"/groups/{group['id']}/members", json={"user_id": str(student.id)}, headers=headers)
    assert added.json()["member_ids"] == [str(student.id)]

    not_student = client.post(f"/groups/{group['id']}/members", json={"user_id": str(admin.id)}, headers=headers)
    assert not_student.status_code == 404

    removed = client.delete(f"/groups/{group['id']}/members/{student.id}", headers=headers)
    assert removed.json()["member_ids"] == []

    assert client.delete(f"/groups/{group['id']}", headers=headers).status_code == 200
    assert client.get("/groups/", headers=headers).json() == []


def test_group_targeted_quiz_reaches_members_only(client, admin, make_user, auth_headers):
    headers = auth_headers(admin)
    member = make_user("nour", category="act")
    outsider = make_user("adam")
    group = client.post("/groups/", json={"name": "Evening"}, headers=headers).json()
    client.post(f"/groups/{group['id']}/members", json={"user_id": str(member.id)}, headers=headers)

    quiz = client.post(
        "/quiz/",
        json={"title": "Group quiz", "target_groups": [group["id"]], "questions": []},
        headers=headers,
    ).json()

    assert client.post(f"/attempts/{quiz['id']}", headers=auth_headers(member)).status_code == 200
    assert client.post(f"/attempts/{quiz['id']}", headers=auth_headers(outsider)).status_code == 403


def test_seeding_is_idempotent(db):
    first = seed_admin(db, "root", "pw")
    assert seed_admin(db, "root", "other").id == first.id
    assert first.role == "admin"

    quiz = seed_sample_quiz(db)
    assert seed_sample_quiz(db).id == quiz.id
    assert len(get_questions(db, quiz.id)) == len(sample_quiz["questions"])
