"""
In-memory answers of one learner while taking a quiz.

Nothing here touches the database; the mapping only becomes a submission
when the attempt is finally submitted.
"""

from typing import Dict, List, Sequence

from tutorcenter.core.errors import InvalidAnswerError
from tutorcenter.services.categories import CHOICES


def normalize_choice(choice) -> str | None:
    if choice is None:
        return None
    letter = str(choice).strip().lower()
    return letter or None


class AnswerSession:
    def __init__(self, question_ids: Sequence[str]):
        self.question_ids: List[str] = [str(q) for q in question_ids]
        self.index = 0
        self.answers: Dict[str, str] = {}

    @property
    def question_count(self) -> int:
        return len(self.question_ids)

    @property
    def current_question_id(self) -> str | None:
        if not self.question_ids:
            return None
        return self.question_ids[self.index]

    @property
    def is_first(self) -> bool:
        return self.index == 0

    @property
    def is_last(self) -> bool:
        return self.index >= self.question_count - 1

    def select(self, question_id, choice) -> None:
        question_id = str(question_id)
        if question_id not in self.question_ids:
            raise InvalidAnswerError(f"Question {question_id} is not part of this quiz")
        letter = normalize_choice(choice)
        if letter not in CHOICES:
            raise InvalidAnswerError(f"Choice must be one of {', '.join(CHOICES)}")
        self.answers[question_id] = letter

    def go_to(self, index: int) -> int:
        last = max(self.question_count - 1, 0)
        self.index = min(max(index, 0), last)
        return self.index

    def next(self) -> int:
        return self.go_to(self.index + 1)

    def previous(self) -> int:
        return self.go_to(self.index - 1)

    @property
    def unanswered_ids(self) -> List[str]:
        return [q for q in self.question_ids if q not in self.answers]

    @property
    def all_answered(self) -> bool:
        return all(q in self.answers for q in self.question_ids)

    def snapshot(self) -> Dict[str, str]:
        return dict(self.answers)
