from datetime import datetime, timezone
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID
from tutorcenter.core.database import get_db
from tutorcenter.core.errors import InvalidScoreError, QuizLoadError, QuizNotFoundError
from tutorcenter.core.security import require_admin, require_student
from tutorcenter.models.quiz_db.quiz_crud import (
    add_question,
    count_questions,
    create_quiz,
    delete_question,
    delete_quiz,
    get_all_quizzes,
    get_all_submissions,
    get_questions,
    get_quiz_by_id,
    get_submission,
    get_quiz_submissions,
    get_user_submissions,
    is_expired,
    load_quiz,
    update_question,
    update_quiz,
    update_submission_score,
)
from tutorcenter.models.quiz_db.quiz_db import Quiz
from tutorcenter.models.quiz_db.quiz_submission_db import QuizSubmission
from tutorcenter.models.user_db.user_db import User
from tutorcenter.models.user_db.user_db_crud import get_user_by_id
from tutorcenter.schemas.quiz.attempt_base import GradedQuestionOut
from tutorcenter.schemas.quiz.progress_base import ScoreUpdate, SubmissionDetail, SubmissionRecord
from tutorcenter.schemas.quiz.quiz_base import (
    AssignedQuiz,
    AssignedQuizzes,
    QuestionCreate,
    QuestionOut,
    QuestionUpdate,
    QuizCreate,
    QuizDetailOut,
    QuizOut,
    QuizUpdate,
    SubmissionTracker,
    TrackerEntry,
)
from tutorcenter.services.categories import Level
from tutorcenter.services.quiz_scorer import grade_answers, percentage
from tutorcenter.services.targeting import quiz_targets_user, targeted_students, user_group_ids

quiz_router = APIRouter(prefix="/quiz", tags=["Quiz"])


def _quiz_out(quiz: Quiz, question_count: int) -> QuizOut:
    return QuizOut.model_validate(quiz).model_copy(update={"question_count": question_count})


@quiz_router.post("/", response_model=QuizDetailOut)
def create_quiz_route(quiz_in: QuizCreate, db: Session = Depends(get_db), _: User = Depends(require_admin)):
    quiz = create_quiz(db, quiz_in)
    questions = get_questions(db, quiz.id)
    return QuizDetailOut(
        **_quiz_out(quiz, len(questions)).model_dump(),
        questions=[QuestionOut.model_validate(q) for q in questions],
    )


@quiz_router.get("/", response_model=List[QuizOut])
def list_quizzes(db: Session = Depends(get_db), _: User = Depends(require_admin)):
    quizzes = get_all_quizzes(db)
    counts = count_questions(db, [q.id for q in quizzes])
    return [_quiz_out(q, counts.get(q.id, 0)) for q in quizzes]


@quiz_router.get("/assigned", response_model=AssignedQuizzes)
def list_assigned_quizzes(db: Session = Depends(get_db), current_user: User = Depends(require_student)):
    group_ids = user_group_ids(db, current_user.id)
    quizzes = [q for q in get_all_quizzes(db) if quiz_targets_user(q, current_user, group_ids)]
    counts = count_questions(db, [q.id for q in quizzes])
    submissions = {s.quiz_id: s for s in get_user_submissions(db, current_user.id)}

    now = datetime.now(timezone.utc)
    result = AssignedQuizzes(pending=[], completed=[], expired=[])
    for quiz in quizzes:
        submission = submissions.get(quiz.id)
        if submission:
            status = "completed"
        elif is_expired(quiz, now):
            status = "expired"
        else:
            status = "pending"

        item = AssignedQuiz(
            id=quiz.id,
            title=quiz.title,
            type=quiz.type,
            created_at=quiz.created_at,
            deadline=quiz.deadline,
            time_limit_minutes=quiz.time_limit_minutes,
            question_count=counts.get(quiz.id, 0),
            status=status,
            score=submission.score if submission else None,
            total_questions=submission.total_questions if submission else None,
            submitted_at=submission.submitted_at if submission else None,
        )
        getattr(result, status).append(item)
    return result


def _submission_record(submission: QuizSubmission, user: User, quiz: Quiz) -> SubmissionRecord:
    return SubmissionRecord(
        user_id=user.id,
        username=user.username,
        category=user.category,
        level=user.level or Level.basics.value,
        quiz_id=quiz.id,
        quiz_title=quiz.title,
        quiz_type=quiz.type,
        score=submission.score,
        total_questions=submission.total_questions,
        percentage=percentage(submission.score, submission.total_questions),
        submitted_at=submission.submitted_at,
    )


@quiz_router.get("/submissions", response_model=List[SubmissionRecord])
def list_submissions(db: Session = Depends(get_db), _: User = Depends(require_admin)):
    return [_submission_record(s, u, q) for s, u, q in get_all_submissions(db)]


@quiz_router.get("/submissions/{user_id}/{quiz_id}", response_model=SubmissionDetail)
def get_submission_detail(
    user_id: UUID,
    quiz_id: UUID,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
):
    submission = get_submission(db, user_id, quiz_id)
    if not submission:
        raise HTTPException(status_code=404, detail="Submission not found")
    try:
        loaded = load_quiz(db, quiz_id)
    except QuizNotFoundError:
        raise HTTPException(status_code=404, detail="Quiz not found")
    except QuizLoadError as exc:
        raise HTTPException(status_code=503, detail=str(exc))

    record = _submission_record(submission, get_user_by_id(db, user_id), get_quiz_by_id(db, quiz_id))
    breakdown = grade_answers(loaded.questions, submission.answers or {})
    return SubmissionDetail(
        **record.model_dump(),
        breakdown=[GradedQuestionOut(**vars(g)) for g in breakdown],
    )


@quiz_router.put("/submissions/{user_id}/{quiz_id}/score", response_model=SubmissionRecord)
def edit_submission_score(
    user_id: UUID,
    quiz_id: UUID,
    payload: ScoreUpdate,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
):
    try:
        submission = update_submission_score(db, user_id, quiz_id, payload.score)
    except InvalidScoreError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    if not submission:
        raise HTTPException(status_code=404, detail="Submission not found")
    return _submission_record(submission, get_user_by_id(db, user_id), get_quiz_by_id(db, quiz_id))


@quiz_router.get("/{quiz_id}", response_model=QuizDetailOut)
def get_quiz(quiz_id: UUID, db: Session = Depends(get_db), _: User = Depends(require_admin)):
    quiz = get_quiz_by_id(db, quiz_id)
    if not quiz:
        raise HTTPException(status_code=404, detail="Quiz not found")
    questions = get_questions(db, quiz_id)
    return QuizDetailOut(
        **_quiz_out(quiz, len(questions)).model_dump(),
        questions=[QuestionOut.model_validate(q) for q in questions],
    )


@quiz_router.put("/{quiz_id}", response_model=QuizOut)
def update_quiz_route(
    quiz_id: UUID,
    quiz_in: QuizUpdate,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
):
    quiz = update_quiz(db, quiz_id, quiz_in)
    if not quiz:
        raise HTTPException(status_code=404, detail="Quiz not found")
    return _quiz_out(quiz, count_questions(db, [quiz.id]).get(quiz.id, 0))


@quiz_router.delete("/{quiz_id}")
def delete_quiz_route(quiz_id: UUID, db: Session = Depends(get_db), _: User = Depends(require_admin)):
    if not delete_quiz(db, quiz_id):
        raise HTTPException(status_code=404, detail="Quiz not found")
    return {"message": "Quiz deleted successfully"}


@quiz_router.post("/{quiz_id}/questions", response_model=QuestionOut)
def add_question_route(
    quiz_id: UUID,
    question_in: QuestionCreate,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
):
    if not get_quiz_by_id(db, quiz_id):
        raise HTTPException(status_code=404, detail="Quiz not found")
    return add_question(db, quiz_id, question_in)


@quiz_router.put("/questions/{question_id}", response_model=QuestionOut)
def update_question_route(
    question_id: UUID,
    question_in: QuestionUpdate,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
):
    question = update_question(db, question_id, question_in)
    if not question:
        raise HTTPException(status_code=404, detail="Question not found")
    return question


@quiz_router.delete("/questions/{question_id}")
def delete_question_route(question_id: UUID, db: Session = Depends(get_db), _: User = Depends(require_admin)):
    if not delete_question(db, question_id):
        raise HTTPException(status_code=404, detail="Question not found")
    return {"message": "Question deleted successfully"}


@quiz_router.get("/{quiz_id}/tracker", response_model=SubmissionTracker)
def submission_tracker(quiz_id: UUID, db: Session = Depends(get_db), _: User = Depends(require_admin)):
    quiz = get_quiz_by_id(db, quiz_id)
    if not quiz:
        raise HTTPException(status_code=404, detail="Quiz not found")

    submissions = {s.user_id: s for s in get_quiz_submissions(db, quiz_id)}
    tracker = SubmissionTracker(quiz_id=quiz.id, title=quiz.title, submitted=[], not_submitted=[])
    for student in targeted_students(db, quiz):
        submission = submissions.get(student.id)
        entry = TrackerEntry(user_id=student.id, username=student.username)
        if submission:
            entry.score = submission.score
            entry.total_questions = submission.total_questions
            entry.submitted_at = submission.submitted_at
            tracker.submitted.append(entry)
        else:
            tracker.not_submitted.append(entry)
    return tracker
