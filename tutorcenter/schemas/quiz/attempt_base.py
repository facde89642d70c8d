from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel

from tutorcenter.services.categories import Choice
from tutorcenter.services.quiz_attempt import AttemptState, QuizAttempt, QuizResult, StartResult
from tutorcenter.services.quiz_review import ReviewSummary


class AnswerIn(BaseModel):
    question_id: str
    choice: Choice


class CurrentQuestion(BaseModel):
    id: str
    number: int
    question: str
    choices: Dict[str, str]
    selected: Optional[str] = None


class TimerOut(BaseModel):
    enabled: bool
    remaining_seconds: int
    display: str
    low_time_warning: bool
    running: bool


class ReviewItemOut(BaseModel):
    question_id: str
    number: int
    question: str
    answer: Optional[str] = None
    answer_text: str


class ReviewOut(BaseModel):
    items: List[ReviewItemOut]
    unanswered_count: int
    show_warning: bool
    warning: Optional[str] = None


class GradedQuestionOut(BaseModel):
    question_id: str
    number: int
    question: str
    your_answer: Optional[str] = None
    your_answer_text: Optional[str] = None
    correct_answer: str
    correct_answer_text: Optional[str] = None
    is_correct: bool


class ResultOut(BaseModel):
    score: int
    total_questions: int
    percentage: int
    answers: Dict[str, str]
    submitted_at: Optional[datetime] = None
    breakdown: List[GradedQuestionOut]


class AttemptOut(BaseModel):
    quiz_id: str
    title: str
    type: str
    state: AttemptState
    resumed: bool = False
    forced: bool = False
    question_count: int
    current_index: int = 0
    is_first: bool = True
    is_last: bool = True
    all_answered: bool = False
    answers: Dict[str, str] = {}
    current_question: Optional[CurrentQuestion] = None
    timer: Optional[TimerOut] = None
    review: Optional[ReviewOut] = None
    result: Optional[ResultOut] = None


def review_out(summary: ReviewSummary) -> ReviewOut:
    return ReviewOut(
        items=[
            ReviewItemOut(
                question_id=item.question_id,
                number=item.number,
                question=item.question,
                answer=item.answer,
                answer_text=item.answer_text,
            )
            for item in summary.items
        ],
        unanswered_count=summary.unanswered_count,
        show_warning=summary.show_warning,
        warning=summary.warning,
    )


def result_out(result: QuizResult) -> ResultOut:
    return ResultOut(
        score=result.score,
        total_questions=result.total_questions,
        percentage=result.percentage,
        answers=result.answers,
        submitted_at=result.submitted_at,
        breakdown=[GradedQuestionOut(**vars(g)) for g in result.breakdown],
    )


def attempt_out(attempt: QuizAttempt, resumed: bool = False) -> AttemptOut:
    # the ticker thread may be advancing this attempt
    with attempt.lock:
        return _attempt_out(attempt, resumed)


def _attempt_out(attempt: QuizAttempt, resumed: bool) -> AttemptOut:
    quiz = attempt.quiz
    session = attempt.session
    out = AttemptOut(
        quiz_id=quiz.id,
        title=quiz.title,
        type=quiz.type,
        state=attempt.state,
        resumed=resumed,
        forced=attempt.forced,
        question_count=session.question_count,
        current_index=session.index,
        is_first=session.is_first,
        is_last=session.is_last,
        all_answered=session.all_answered,
        answers=session.snapshot(),
    )

    if attempt.state == AttemptState.submitted and attempt.result is not None:
        out.result = result_out(attempt.result)
        return out

    if attempt.timer.enabled:
        out.timer = TimerOut(
            enabled=True,
            remaining_seconds=attempt.timer.remaining_seconds,
            display=attempt.timer.format_remaining(),
            low_time_warning=attempt.timer.is_low,
            running=attempt.timer.running,
        )

    if attempt.state == AttemptState.reviewing:
        out.review = review_out(attempt.review())
    elif quiz.questions:
        q = quiz.questions[session.index]
        out.current_question = CurrentQuestion(
            id=q.id,
            number=session.index + 1,
            question=q.question,
            choices={letter.value: q.choice_text(letter.value) for letter in Choice},
            selected=session.answers.get(q.id),
        )
    return out


def start_out(started: StartResult) -> AttemptOut:
    if started.completed is not None:
        quiz = started.quiz
        return AttemptOut(
            quiz_id=quiz.id,
            title=quiz.title,
            type=quiz.type,
            state=AttemptState.submitted,
            question_count=len(quiz.questions),
            answers=started.completed.answers,
            all_answered=all(q.id in started.completed.answers for q in quiz.questions),
            result=result_out(started.completed),
        )
    return attempt_out(started.attempt, resumed=started.resumed)
