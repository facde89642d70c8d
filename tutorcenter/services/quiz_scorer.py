from dataclasses import dataclass
from typing import List, Mapping, Sequence

from tutorcenter.services.answer_session import normalize_choice


def _question_key(question) -> str:
    return str(question.id)


def is_correct(question, answers: Mapping[str, str]) -> bool:
    chosen = normalize_choice(answers.get(_question_key(question)))
    return chosen is not None and chosen == normalize_choice(question.correct_answer)


def score_answers(questions: Sequence, answers: Mapping[str, str]) -> int:
    """Count of questions whose chosen letter matches the correct one."""
    return sum(1 for q in questions if is_correct(q, answers))


def percentage(score: int, total: int) -> int:
    if total <= 0:
        return 0
    return int(score * 100 / total + 0.5)


@dataclass
class GradedQuestion:
    question_id: str
    number: int
    question: str
    your_answer: str | None
    your_answer_text: str | None
    correct_answer: str
    correct_answer_text: str | None
    is_correct: bool


def grade_answers(questions: Sequence, answers: Mapping[str, str]) -> List[GradedQuestion]:
    graded = []
    for number, q in enumerate(questions, start=1):
        chosen = normalize_choice(answers.get(_question_key(q)))
        correct = normalize_choice(q.correct_answer)
        graded.append(GradedQuestion(
            question_id=_question_key(q),
            number=number,
            question=q.question,
            your_answer=chosen,
            your_answer_text=q.choice_text(chosen) if chosen else None,
            correct_answer=correct,
            correct_answer_text=q.choice_text(correct),
            is_correct=chosen is not None and chosen == correct,
        ))
    return graded

