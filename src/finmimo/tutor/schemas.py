"""Request/response schemas for the tutor endpoint."""

from __future__ import annotations

from pydantic import BaseModel, Field


class TutorContextModel(BaseModel):
    lesson_title: str | None = None
    skill_title: str | None = None
    exercise_prompt: str | None = None


class TutorRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=2000)
    context: TutorContextModel | None = None


class TutorResponse(BaseModel):
    reply: str
    is_guardrailed: bool
