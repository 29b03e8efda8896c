"""Pydantic request/response models for learning endpoints.

Exercise models never carry ``answer_json``; the key is only sent back as
``correctAnswer`` on an incorrect attempt.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Attempts / completion ---


class AttemptRequest(_CamelModel):
    exercise_id: str
    answer: Any = None


class AttemptResponse(_CamelModel):
    is_correct: bool
    explanation: str | None = None
    hint: str | None = None
    correct_answer: Any = None


class SuccessResponse(BaseModel):
    success: bool = True


class ProjectSubmitRequest(BaseModel):
    data: dict[str, Any] = Field(default_factory=dict)


# --- Content ---


class PathResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str
    order_index: int
    icon_name: str
    color_hex: str


class SkillResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    path_id: str
    title: str
    description: str
    order_index: int
    icon_name: str
    completed_lessons: int | None = None
    unlocked: bool | None = None


class PathDetailResponse(PathResponse):
    skills: list[SkillResponse]


class LessonResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    skill_id: str
    title: str
    order_index: int
    content_json: list[Any]


class ExerciseResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    lesson_id: str
    type: str
    prompt: str
    options_json: list[Any] | None = None
    tags_json: list[str] | None = None
    order_index: int


class LessonDetailResponse(LessonResponse):
    exercises: list[ExerciseResponse]


class ProgressResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    lesson_id: str
    skill_id: str
    status: str
    mastery_score: float
    updated_at: datetime


class SkillLessonResponse(LessonResponse):
    progress: ProgressResponse | None = None
    unlocked: bool


class ProjectResponse(BaseModel):
    """``form_schema`` goes over the wire as ``schema_json``."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    skill_id: str
    title: str
    description: str
    form_schema: dict[str, Any] = Field(validation_alias="schema_json", serialization_alias="schema_json")


class SkillDetailResponse(SkillResponse):
    lessons: list[SkillLessonResponse]
    project: ProjectResponse | None = None


class SubmissionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    project_id: str
    user_id: str
    data_json: dict[str, Any]
    created_at: datetime


class NextLessonResponse(BaseModel):
    path: PathResponse
    skill: SkillResponse
    lesson: LessonResponse
