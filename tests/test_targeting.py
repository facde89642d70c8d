from types import SimpleNamespace
from uuid import uuid4

import pytest

from tutorcenter.models.group_db.group_crud import add_member, create_group
from tutorcenter.schemas.group.group_base import GroupCreate
from tutorcenter.services.targeting import quiz_targets_user, targeted_students, user_group_ids


def _quiz(category="sat", level="basics", target_users=None, target_groups=None):
    return SimpleNamespace(category=category, level=level, target_users=target_users, target_groups=target_groups)


def _user(category="sat", level="basics"):
    return SimpleNamespace(id=uuid4(), category=category, level=level)


@pytest.mark.parametrize(
    "quiz_category, quiz_level, expected",
    [
        ("sat", "basics", True),
        ("all", "basics", True),
        ("sat", "all", True),
        ("all", "all", True),
        ("act", "basics", False),
        ("sat", "advanced", False),
    ],
)
def test_category_and_level_matching(quiz_category, quiz_level, expected):
    assert quiz_targets_user(_quiz(quiz_category, quiz_level), _user(), set()) is expected


def test_student_without_level_counts_as_basics():
    user = _user(level=None)

    assert quiz_targets_user(_quiz(level="basics"), user, set())
    assert not quiz_targets_user(_quiz(level="advanced"), user, set())


def test_explicit_user_list_overrides_category():
    user = _user(category="est")
    other = _user()
    quiz = _quiz(category="act", target_users=[str(user.id)])

    assert quiz_targets_user(quiz, user, set())
    assert not quiz_targets_user(quiz, other, set())


def test_group_targeting():
    group_id = str(uuid4())
    quiz = _quiz(target_groups=[group_id])

    assert quiz_targets_user(quiz, _user(), {group_id})
    assert not quiz_targets_user(quiz, _user(), {str(uuid4())})


def test_targeted_students_follow_group_membership(db, make_user, make_quiz):
    nour = make_user("nour")
    adam = make_user("adam", category="act")
    make_user("zaid")
    make_user("sara", role="admin")
    group = create_group(db, GroupCreate(name="Evening class"))
    add_member(db, group.id, nour.id)
    add_member(db, group.id, adam.id)

    quiz = make_quiz(target_groups=[group.id])

    assert [s.username for s in targeted_students(db, quiz)] == ["adam", "nour"]
    assert user_group_ids(db, nour.id) == {str(group.id)}


def test_targeted_students_by_category(db, make_user, make_quiz):
    make_user("nour")
    make_user("adam", category="act")
    make_user("zaid", level="advanced")

    quiz = make_quiz(category="sat", level="all")

    assert [s.username for s in targeted_students(db, quiz)] == ["nour", "zaid"]
