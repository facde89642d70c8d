from dataclasses import dataclass, field
from typing import List, Mapping, Sequence

from tutorcenter.services.answer_session import normalize_choice

NOT_ANSWERED = "not answered"


@dataclass
class ReviewItem:
    question_id: str
    number: int
    question: str
    answer: str | None
    answer_text: str

    @property
    def answered(self) -> bool:
        return self.answer is not None


@dataclass
class ReviewSummary:
    items: List[ReviewItem] = field(default_factory=list)

    @property
    def unanswered_count(self) -> int:
        return sum(1 for item in self.items if not item.answered)

    @property
    def show_warning(self) -> bool:
        return self.unanswered_count > 0

    @property
    def warning(self) -> str | None:
        if not self.show_warning:
            return None
        return (
            f"You have {self.unanswered_count} unanswered question(s). "
            "These will be marked as blank if you submit now."
        )


def build_review(questions: Sequence, answers: Mapping[str, str]) -> ReviewSummary:
    """Read-only pass over every question; never mutates ``answers``."""
    items = []
    for number, q in enumerate(questions, start=1):
        chosen = normalize_choice(answers.get(str(q.id)))
        if chosen:
            text = f"{chosen.upper()}) {q.choice_text(chosen)}"
        else:
            text = NOT_ANSWERED
        items.append(ReviewItem(
            question_id=str(q.id),
            number=number,
            question=q.question,
            answer=chosen,
            answer_text=text,
        ))
    return ReviewSummary(items=items)
