"""
Grading Service
===============
Pure grading of multiple-choice answers against an authoritative key.

Nothing here touches storage. Client-supplied correctness is never read:
``is_correct`` is always recomputed from the key.
"""
from ..models import GradedAnswer, normalize_letter


def _get(item, *names, default=None):
    """Read a field from a model or a dict, trying each spelling in turn."""
    for name in names:
        if isinstance(item, dict):
            if name in item:
                return item[name]
        elif hasattr(item, name):
            return getattr(item, name)
    return default


def _question_number(item):
    try:
        return int(_get(item, "question_number", "questionNumber", "number", default=0))
    except (TypeError, ValueError):
        return 0


def build_key_map(key):
    """Map question number -> correct letter. Later entries for a number win."""
    key_map = {}
    for entry in key or []:
        key_map[_question_number(entry)] = normalize_letter(
            _get(entry, "correct_answer", "correctAnswer"))
    return key_map


def grade(submitted_answers, key, subjects=None):
    """
    Grade each submitted answer against the key.

    Args:
        submitted_answers: sequence of {question_number, answer} (dicts or models)
        key: sequence of {question_number, correct_answer}, or None
        subjects: optional mapping of question number -> subject

    Returns:
        List of GradedAnswer, one per submitted item, in submission order.
    """
    key_map = build_key_map(key)
    subjects = subjects or {}
    graded = []
    for item in submitted_answers or []:
        number = _question_number(item)
        answer = normalize_letter(_get(item, "answer"))
        correct = key_map.get(number)
        graded.append(GradedAnswer(
            question_number=number,
            answer=answer,
            is_correct=bool(answer) and answer == correct,
            subject=subjects.get(number, ""),
        ))
    return graded


def summarize(graded):
    """Score, total and rounded percentage for a graded answer list."""
    total = len(graded)
    score = sum(1 for g in graded if g.is_correct)
    percentage = round((score / total) * 100) if total > 0 else 0
    return {"score": score, "total": total, "percentage": percentage}
