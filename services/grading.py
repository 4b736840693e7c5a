# services/grading.py
from typing import List, Optional, Sequence

from pydantic import BaseModel

from models.quiz import AttemptAnswer, Question


class ScoreResult(BaseModel):
    score: int
    total_questions: int
    correct_answers: int
    passed: bool
    answers: List[AttemptAnswer]
    ignored_answers: int = 0


def percentage(correct: int, total: int) -> int:
    """Whole-number percentage, rounding halves up (1/8 -> 13, 5/8 -> 63)."""
    if total <= 0:
        return 0
    # Integer arithmetic, so 0.5 boundaries never suffer float error
    return (200 * correct + total) // (2 * total)


def score_answers(
    questions: Sequence[Question],
    selected: Sequence[Optional[int]],
    passing_score: int,
) -> ScoreResult:
    """Grade one submission against a question bank.

    Answers are matched to questions by position. Answers past the end of
    the question list are not graded and are counted in ``ignored_answers``;
    questions with no answer are recorded as unanswered and count as wrong.
    """
    graded = []
    correct = 0
    for index, question in enumerate(questions):
        choice = selected[index] if index < len(selected) else None
        is_correct = choice is not None and choice == question.correct_answer
        if is_correct:
            correct += 1
        graded.append(AttemptAnswer(question_index=index, selected_answer=choice, is_correct=is_correct))

    total = len(questions)
    score = percentage(correct, total)
    return ScoreResult(
        score=score,
        total_questions=total,
        correct_answers=correct,
        passed=score >= passing_score,
        answers=graded,
        ignored_answers=max(0, len(selected) - total),
    )


def is_eligible(score: int, passing_score: int) -> bool:
    return score >= passing_score
