"""Exercise grading.

Answer keys and submissions are JSON blobs whose shape depends on the
exercise type. Both are decoded into typed models here, at the boundary, and
the graders below only ever see the typed form.

    multiple_choice  key {"correct": <option index>}    submission {"selected": <int>}
    true_false       key {"correct": <bool>}            submission {"selected": <bool>}
    numeric          key {"min": x, "max": y, ...}      submission {"value": <str | number>}
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, StrictBool, StrictInt, ValidationError, model_validator

from finmimo.errors import ValidationFailureError


class ExerciseType(str, Enum):
    MULTIPLE_CHOICE = "multiple_choice"
    TRUE_FALSE = "true_false"
    NUMERIC = "numeric"


# --- Answer keys ---


class MultipleChoiceKey(BaseModel):
    model_config = ConfigDict(extra="ignore")

    correct: StrictInt


class TrueFalseKey(BaseModel):
    model_config = ConfigDict(extra="ignore")

    correct: StrictBool


class NumericKey(BaseModel):
    """Inclusive range; ``min == max`` means exact match. ``correct`` is display-only."""

    model_config = ConfigDict(extra="ignore")

    min: float
    max: float
    correct: float | None = None

    @model_validator(mode="after")
    def _ordered(self) -> NumericKey:
        if self.min > self.max:
            msg = "numeric answer key has min > max"
            raise ValueError(msg)
        return self


AnswerKey = MultipleChoiceKey | TrueFalseKey | NumericKey


# --- Submissions ---


class ChoiceSubmission(BaseModel):
    selected: StrictInt


class TrueFalseSubmission(BaseModel):
    selected: StrictBool


class NumericSubmission(BaseModel):
    value: Any


Submission = ChoiceSubmission | TrueFalseSubmission | NumericSubmission

_KEY_MODELS: dict[ExerciseType, type[BaseModel]] = {
    ExerciseType.MULTIPLE_CHOICE: MultipleChoiceKey,
    ExerciseType.TRUE_FALSE: TrueFalseKey,
    ExerciseType.NUMERIC: NumericKey,
}

_SUBMISSION_MODELS: dict[ExerciseType, type[BaseModel]] = {
    ExerciseType.MULTIPLE_CHOICE: ChoiceSubmission,
    ExerciseType.TRUE_FALSE: TrueFalseSubmission,
    ExerciseType.NUMERIC: NumericSubmission,
}


def exercise_type(raw: str) -> ExerciseType:
    """Resolve a stored type tag. Unknown tags mean broken content, not a bad request."""
    try:
        return ExerciseType(raw)
    except ValueError:
        msg = f"Unsupported exercise type: {raw!r}"
        raise ValueError(msg) from None


def decode_answer_key(kind: ExerciseType, payload: Any) -> AnswerKey:
    """Decode a stored answer key. Raises ``ValueError`` on malformed content."""
    try:
        return _KEY_MODELS[kind].model_validate(payload)  # type: ignore[return-value]
    except ValidationError as e:
        msg = f"Malformed {kind.value} answer key"
        raise ValueError(msg) from e


def decode_submission(kind: ExerciseType, payload: Any) -> Submission:
    """Decode a client submission. Raises ``ValidationFailureError`` when malformed."""
    if not isinstance(payload, dict):
        msg = "Answer must be an object"
        raise ValidationFailureError(msg)
    try:
        return _SUBMISSION_MODELS[kind].model_validate(payload)  # type: ignore[return-value]
    except ValidationError as e:
        field = "value" if kind is ExerciseType.NUMERIC else "selected"
        msg = f"Answer for a {kind.value} exercise needs a valid '{field}' field"
        raise ValidationFailureError(msg) from e


def parse_number(value: Any) -> float | None:
    """Parse a numeric answer; anything unparseable (or NaN) yields None."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number):
        return None
    return number


def is_correct(key: AnswerKey, submission: Submission) -> bool:
    """Pure verdict for a decoded key and submission of the same exercise type."""
    if isinstance(key, MultipleChoiceKey) and isinstance(submission, ChoiceSubmission):
        return submission.selected == key.correct
    if isinstance(key, TrueFalseKey) and isinstance(submission, TrueFalseSubmission):
        return submission.selected is key.correct
    if isinstance(key, NumericKey) and isinstance(submission, NumericSubmission):
        number = parse_number(submission.value)
        return number is not None and key.min <= number <= key.max
    msg = f"Answer key {type(key).__name__} does not match submission {type(submission).__name__}"
    raise TypeError(msg)


def grade(raw_type: str, answer_key: Any, answer: Any) -> bool:
    """Grade a raw submission against a stored exercise definition."""
    kind = exercise_type(raw_type)
    key = decode_answer_key(kind, answer_key)
    return is_correct(key, decode_submission(kind, answer))
