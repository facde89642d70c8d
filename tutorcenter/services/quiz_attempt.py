"""
Quiz attempt state machine and the registry that owns live attempts.

    LOADING -> ANSWERING <-> (previous/next) -> REVIEWING
    REVIEWING -> ANSWERING           (continue editing)
    REVIEWING -> SCORING -> SUBMITTED (final submit)
    ANSWERING -> SCORING -> SUBMITTED (timer expiry, review skipped)

Routes run in FastAPI's threadpool and the ticker runs ``tick_all`` in a worker
thread, so each attempt carries its own lock and the registry guards its map.
"""

import asyncio
import functools
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, List, Optional, Set, Tuple
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tutorcenter.core.errors import (
    AttemptStateError,
    DuplicateSubmissionError,
    QuizExpiredError,
    QuizLoadError,
    QuizNotAssignedError,
    SubmissionWriteError,
)
from tutorcenter.models.quiz_db.quiz_crud import (
    LoadedQuiz,
    get_submission,
    is_expired,
    load_quiz,
    write_submission,
)
from tutorcenter.services.answer_session import AnswerSession
from tutorcenter.services.quiz_review import ReviewSummary, build_review
from tutorcenter.services.quiz_scorer import GradedQuestion, grade_answers, percentage, score_answers
from tutorcenter.services.quiz_timer import QuizTimer
from tutorcenter.services.targeting import quiz_targets_user, user_group_ids

logger = logging.getLogger(__name__)


class AttemptState(str, Enum):
    loading = "loading"
    answering = "answering"
    reviewing = "reviewing"
    scoring = "scoring"
    submitted = "submitted"


@dataclass
class QuizResult:
    score: int
    total_questions: int
    answers: Dict[str, str]
    submitted_at: Optional[datetime]
    breakdown: List[GradedQuestion] = field(default_factory=list)

    @property
    def percentage(self) -> int:
        return percentage(self.score, self.total_questions)


def build_result(quiz: LoadedQuiz, submission) -> QuizResult:
    answers = dict(submission.answers or {})
    return QuizResult(
        score=submission.score,
        total_questions=submission.total_questions,
        answers=answers,
        submitted_at=submission.submitted_at,
        breakdown=grade_answers(quiz.questions, answers),
    )


def _locked(method):
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self.lock:
            return method(self, *args, **kwargs)
    return wrapper


class QuizAttempt:
    def __init__(self, user_id: UUID, quiz: LoadedQuiz):
        self.user_id = user_id
        self.quiz = quiz
        self.state = AttemptState.loading
        self.session = AnswerSession(quiz.question_ids)
        self.timer = QuizTimer(quiz.time_limit_minutes)
        self.result: Optional[QuizResult] = None
        self.forced = False
        self.lock = threading.RLock()

    @property
    def key(self) -> Tuple[str, str]:
        return str(self.user_id), self.quiz.id

    def _require(self, *states: AttemptState) -> None:
        if self.state not in states:
            allowed = ", ".join(s.value for s in states)
            raise AttemptStateError(f"Attempt is {self.state.value}; expected {allowed}")

    @_locked
    def begin(self) -> None:
        self._require(AttemptState.loading)
        self.state = AttemptState.answering

    # ---- answering ----

    @_locked
    def select(self, question_id, choice) -> None:
        self._require(AttemptState.answering)
        self.session.select(question_id, choice)

    @_locked
    def next(self) -> int:
        self._require(AttemptState.answering)
        return self.session.next()

    @_locked
    def previous(self) -> int:
        self._require(AttemptState.answering)
        return self.session.previous()

    @_locked
    def go_to(self, index: int) -> int:
        self._require(AttemptState.answering)
        return self.session.go_to(index)

    # ---- review ----

    @_locked
    def open_review(self) -> ReviewSummary:
        self._require(AttemptState.answering)
        self.timer.suspend()
        self.state = AttemptState.reviewing
        return self.review()

    def review(self) -> ReviewSummary:
        return build_review(self.quiz.questions, self.session.answers)

    @_locked
    def continue_editing(self) -> None:
        self._require(AttemptState.reviewing)
        if self.timer.expired:
            raise AttemptStateError("Time is up; the attempt can only be submitted")
        self.timer.resume()
        self.state = AttemptState.answering

    # ---- submission ----

    @_locked
    def final_submit(self, db: Session) -> QuizResult:
        self._require(AttemptState.reviewing)
        return self._submit(db)

    @_locked
    def tick(self) -> bool:
        """One timer second. True when time just ran out and a forced submit is due."""
        if self.state != AttemptState.answering:
            return False
        return self.timer.tick()

    @_locked
    def force_submit(self, db: Session) -> QuizResult:
        self._require(AttemptState.answering, AttemptState.reviewing)
        self.forced = True
        logger.info(
            "Time is up for quiz %s (user %s), submitting %d/%d answers",
            self.quiz.id, self.user_id, len(self.session.answers), self.session.question_count,
        )
        return self._submit(db)

    def _submit(self, db: Session) -> QuizResult:
        self.timer.suspend()
        self.state = AttemptState.scoring
        answers = self.session.snapshot()
        score = score_answers(self.quiz.questions, answers)
        try:
            submission = write_submission(
                db,
                user_id=self.user_id,
                quiz_id=UUID(self.quiz.id),
                total_questions=len(self.quiz.questions),
                answers=answers,
                score=score,
            )
        except (SubmissionWriteError, DuplicateSubmissionError):
            # answers stay in the session; the learner can submit again from review
            self.state = AttemptState.reviewing
            raise

        self.timer.stop()
        self.result = build_result(self.quiz, submission)
        self.state = AttemptState.submitted
        return self.result


@dataclass
class StartResult:
    attempt: Optional[QuizAttempt] = None
    quiz: Optional[LoadedQuiz] = None
    completed: Optional[QuizResult] = None
    resumed: bool = False


class AttemptRegistry:
    """Live attempts keyed by (user id, quiz id). One per application."""

    def __init__(self):
        self._attempts: Dict[Tuple[str, str], QuizAttempt] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._attempts)

    def get(self, user_id, quiz_id) -> Optional[QuizAttempt]:
        with self._lock:
            return self._attempts.get((str(user_id), str(quiz_id)))

    def _lookup(self, db: Session, user, quiz_id: UUID) -> Tuple[object, Set[str]]:
        try:
            return get_submission(db, user.id, quiz_id), user_group_ids(db, user.id)
        except SQLAlchemyError as exc:
            logger.error("Error checking submissions of quiz %s for user %s: %s", quiz_id, user.id, exc)
            raise QuizLoadError(f"Could not load quiz {quiz_id}") from exc

    def start(self, db: Session, user, quiz_id: UUID) -> StartResult:
        """Open the quiz for ``user``: completed result, resumed attempt or a new one."""
        submission, group_ids = self._lookup(db, user, quiz_id)
        if submission is not None:
            self.discard(user.id, quiz_id)
            quiz = load_quiz(db, quiz_id)
            return StartResult(quiz=quiz, completed=build_result(quiz, submission))

        attempt = self.get(user.id, quiz_id)
        if attempt is not None:
            return StartResult(attempt=attempt, quiz=attempt.quiz, resumed=True)

        quiz = load_quiz(db, quiz_id)
        if not quiz_targets_user(quiz, user, group_ids):
            raise QuizNotAssignedError(quiz_id)
        if is_expired(quiz):
            raise QuizExpiredError(quiz_id)

        attempt = QuizAttempt(user.id, quiz)
        attempt.begin()
        with self._lock:
            # a concurrent start for the same quiz may have won the race
            existing = self._attempts.setdefault(attempt.key, attempt)
        if existing is not attempt:
            return StartResult(attempt=existing, quiz=existing.quiz, resumed=True)
        logger.info("User %s started quiz %s (%d questions)", user.id, quiz.id, len(quiz.questions))
        return StartResult(attempt=attempt, quiz=quiz)

    def submit(self, db: Session, attempt: QuizAttempt) -> QuizResult:
        try:
            result = attempt.final_submit(db)
        except DuplicateSubmissionError:
            self.discard(attempt.user_id, attempt.quiz.id)
            raise
        self._remove(attempt)
        return result

    def _remove(self, attempt: QuizAttempt) -> None:
        with self._lock:
            if self._attempts.get(attempt.key) is attempt:
                del self._attempts[attempt.key]

    def discard(self, user_id, quiz_id) -> Optional[QuizAttempt]:
        with self._lock:
            attempt = self._attempts.pop((str(user_id), str(quiz_id)), None)
        if attempt is not None:
            attempt.timer.stop()
        return attempt

    def tick_all(self, session_factory: Callable[[], Session]) -> List[QuizAttempt]:
        """Advance every running timer by one second and force-submit expired attempts."""
        with self._lock:
            attempts = list(self._attempts.values())

        submitted = []
        for attempt in attempts:
            if not attempt.tick():
                continue
            db = session_factory()
            try:
                attempt.force_submit(db)
            except AttemptStateError:
                # submitted by the learner between the tick and the forced submit
                self._remove(attempt)
                continue
            except DuplicateSubmissionError:
                logger.warning(
                    "Quiz %s was already submitted by user %s; dropping the expired attempt",
                    attempt.quiz.id, attempt.user_id,
                )
                self._remove(attempt)
                continue
            except SubmissionWriteError:
                logger.warning("Forced submission failed for quiz %s (user %s)", attempt.quiz.id, attempt.user_id)
                continue
            finally:
                db.close()
            self._remove(attempt)
            submitted.append(attempt)
        return submitted

    def clear(self) -> None:
        with self._lock:
            attempts = list(self._attempts.values())
            self._attempts.clear()
        for attempt in attempts:
            attempt.timer.stop()


async def run_ticker(registry: AttemptRegistry, session_factory: Callable[[], Session], interval: float = 1.0):
    logger.info("Quiz timer started (interval=%ss)", interval)
    while True:
        await asyncio.sleep(interval)
        try:
            # forced submissions commit to the database; keep that off the event loop
            await asyncio.to_thread(registry.tick_all, session_factory)
        except Exception:
            logger.exception("Quiz timer tick failed")
