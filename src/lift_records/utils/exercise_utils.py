"""Utilities for exercise name normalization and matching."""

import re
from difflib import SequenceMatcher

from ..models.exercises import COMMON_EXERCISES, Exercise, ExerciseType


def normalize_exercise_name(name: str) -> str:
    """Normalize an exercise name for comparison.

    Lowercases, folds hyphens and extra whitespace, and expands common
    abbreviations.
    """
    normalized = name.lower().strip()
    normalized = normalized.replace("-", " ")
    normalized = re.sub(r"\s+", " ", normalized)

    abbreviations = {
        "bb": "barbell",
        "db": "dumbbell",
        "ohp": "overhead press",
        "rdl": "romanian deadlift",
        "bw": "bodyweight",
    }

    if normalized in abbreviations:
        return abbreviations[normalized]

    for abbrev, full in abbreviations.items():
        normalized = re.sub(rf"\b{abbrev}\b", full, normalized)

    return normalized


def find_matching_exercise(
    name: str,
    exercises: list[Exercise] | None = None,
    threshold: float = 0.8,
) -> Exercise | None:
    """Find the best matching exercise by title or alias.

    Args:
        name: The exercise name to match
        exercises: Exercises to search (defaults to COMMON_EXERCISES)
        threshold: Minimum similarity ratio (0-1) to consider a match

    Returns:
        The best matching Exercise or None if no match above threshold
    """
    if exercises is None:
        exercises = COMMON_EXERCISES

    wanted = normalize_exercise_name(name)
    names = [
        (exercise, normalize_exercise_name(candidate))
        for exercise in exercises
        for candidate in (exercise.title, *exercise.aliases)
    ]

    # An exact title or alias anywhere in the list wins over a fuzzy match
    for exercise, candidate in names:
        if candidate == wanted:
            return exercise

    scored = [
        (SequenceMatcher(None, wanted, candidate).ratio(), exercise)
        for exercise, candidate in names
    ]
    if not scored:
        return None
    score, exercise = max(scored, key=lambda pair: pair[0])
    return exercise if score >= threshold else None


def categorize_exercises_by_type(
    exercises: list[Exercise],
) -> dict[str, list[Exercise]]:
    """Group exercises by their stored type.

    Unrecognized type strings are grouped under their raw value.
    """
    result: dict[str, list[Exercise]] = {t.value: [] for t in ExerciseType}

    for exercise in exercises:
        result.setdefault(exercise.exercise_type or ExerciseType.REGULAR.value, []).append(
            exercise
        )

    return result
