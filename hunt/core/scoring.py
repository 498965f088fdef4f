"""
Pass key scoring

Formula:
  accuracy = round(matches / 10 × 100, 2)

Rules:
  - A position matches only if both the answer and the key slot are
    non-empty and equal after normalization
  - Normalization (case folding) is applied identically to both sides
  - No key published → every team scores 0
  - Malformed (short) answer arrays are compared up to the shorter length;
    missing positions count as misses
"""
from typing import List, Optional, Sequence

from hunt.models import QUESTION_COUNT, SlotResult


# (threshold, label), checked top-down
ACCURACY_BANDS = [
    (100, "Perfect!"),
    (90, "Excellent"),
    (70, "Very Good"),
    (50, "Good"),
    (30, "Fair"),
]
LOWEST_BAND = "Needs Improvement"


def normalize_char(char: Optional[str], case_policy: str = "upper") -> str:
    """
    Canonical form of a single answer or key character

    Args:
        char: Character (None and "" both mean empty)
        case_policy: "upper" | "lower" | "exact"

    Returns:
        Normalized character, "" for empty
    """
    if not char:
        return ""
    if case_policy == "upper":
        return char.upper()
    if case_policy == "lower":
        return char.lower()
    return char


def slot_matches(answer: Optional[str], expected: Optional[str], case_policy: str = "upper") -> bool:
    answer = normalize_char(answer, case_policy)
    expected = normalize_char(expected, case_policy)
    return bool(answer) and bool(expected) and answer == expected


def count_matches(answers: Sequence[str], reference_key: Optional[str], case_policy: str = "upper") -> int:
    if not reference_key or not answers:
        return 0

    limit = min(len(answers), len(reference_key), QUESTION_COUNT)
    return sum(
        1 for i in range(limit)
        if slot_matches(answers[i], reference_key[i], case_policy)
    )


def score(answers: Sequence[str], reference_key: Optional[str], case_policy: str = "upper") -> float:
    """
    Accuracy percentage of one answer set against the pass key

    Pure function, no side effects.

    Args:
        answers: Up to 10 slots, each "" or one character
        reference_key: Current pass key value, None if unset
        case_policy: Normalization applied to both sides

    Returns:
        Percentage in [0, 100] with 2 decimals

    Example:
        >>> score(list("ABCDEFGHIJ"), "ABCDEFGHXX")
        80.0
    """
    matches = count_matches(answers, reference_key, case_policy)
    return round(matches / QUESTION_COUNT * 100, 2)


def answer_breakdown(
    answers: Sequence[str],
    reference_key: Optional[str],
    case_policy: str = "upper"
) -> List[SlotResult]:
    """
    Per-question correct/wrong/empty view of an answer set

    Always returns 10 entries, padding short arrays with empty slots.
    """
    key = reference_key or ""
    results = []
    for i in range(QUESTION_COUNT):
        answer = answers[i] if i < len(answers) and answers[i] else ""
        expected = key[i] if i < len(key) else ""

        if not answer:
            status = "empty"
        elif slot_matches(answer, expected, case_policy):
            status = "correct"
        else:
            status = "wrong"

        results.append(SlotResult(index=i, answer=answer, expected=expected, status=status))
    return results


def accuracy_band(percentage: float) -> str:
    """Label shown next to a team's accuracy in the reports"""
    for threshold, label in ACCURACY_BANDS:
        if percentage >= threshold:
            return label
    return LOWEST_BAND
