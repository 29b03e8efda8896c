"""Learning API endpoints: content, attempts, completion, practice, projects."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from finmimo.auth.dependencies import get_current_user, get_current_user_optional
from finmimo.config import Settings
from finmimo.database import get_session
from finmimo.db.models import User
from finmimo.dependencies import get_settings
from finmimo.learning.completion_service import CompletionService
from finmimo.learning.content_service import ContentService
from finmimo.learning.practice_service import build_practice_queue
from finmimo.learning.progress_service import (
    STATUS_COMPLETED,
    completed_counts_by_skill,
    get_user_progress,
    lesson_unlock_flags,
    skill_unlock_flags,
)
from finmimo.learning.schemas import (
    AttemptRequest,
    AttemptResponse,
    ExerciseResponse,
    LessonDetailResponse,
    PathDetailResponse,
    PathResponse,
    ProgressResponse,
    ProjectResponse,
    ProjectSubmitRequest,
    SkillDetailResponse,
    SkillLessonResponse,
    SkillResponse,
    SubmissionResponse,
    SuccessResponse,
)

router = APIRouter(prefix="/api", tags=["Learning"])


# ---- Content ----


@router.get("/paths", response_model=list[PathResponse])
async def list_paths(db: AsyncSession = Depends(get_session)) -> list[PathResponse]:
    """All learning paths in order. Public."""
    paths = await ContentService(db).list_paths()
    return [PathResponse.model_validate(p) for p in paths]


@router.get("/paths/{path_id}", response_model=PathDetailResponse)
async def get_path(
    path_id: str,
    user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> PathDetailResponse:
    """Path with its skills; enriched with gating when authenticated."""
    svc = ContentService(db)
    path = await svc.get_path(path_id)
    skills = await svc.list_skills(path_id)

    items = [SkillResponse.model_validate(s) for s in skills]
    if user is not None:
        counts = await completed_counts_by_skill(db, user.id)
        flags = skill_unlock_flags([s.id for s in skills], counts, settings.skill_unlock_threshold)
        for item, unlocked in zip(items, flags):
            item.completed_lessons = counts.get(item.id, 0)
            item.unlocked = unlocked

    return PathDetailResponse(**PathResponse.model_validate(path).model_dump(), skills=items)


@router.get("/skills/{skill_id}", response_model=SkillDetailResponse)
async def get_skill(
    skill_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> SkillDetailResponse:
    """Skill with its lessons, the caller's progress on each, and the skill project."""
    svc = ContentService(db)
    skill = await svc.get_skill(skill_id)
    lessons = await svc.list_lessons(skill_id)
    project = await svc.get_skill_project(skill_id)

    progress_by_lesson = {p.lesson_id: p for p in await get_user_progress(db, user.id)}
    completed = [lid for lid, p in progress_by_lesson.items() if p.status == STATUS_COMPLETED]
    flags = lesson_unlock_flags([lesson.id for lesson in lessons], completed)

    lesson_items = []
    for lesson, unlocked in zip(lessons, flags):
        progress = progress_by_lesson.get(lesson.id)
        lesson_items.append(SkillLessonResponse(
            id=lesson.id,
            skill_id=lesson.skill_id,
            title=lesson.title,
            order_index=lesson.order_index,
            content_json=lesson.content_json,
            progress=ProgressResponse.model_validate(progress) if progress else None,
            unlocked=unlocked,
        ))

    return SkillDetailResponse(
        **SkillResponse.model_validate(skill).model_dump(),
        lessons=lesson_items,
        project=ProjectResponse.model_validate(project) if project else None,
    )


@router.get("/lessons/{lesson_id}", response_model=LessonDetailResponse)
async def get_lesson(
    lesson_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> LessonDetailResponse:
    """Lesson content with its exercises, answer keys stripped."""
    svc = ContentService(db)
    lesson = await svc.get_lesson(lesson_id)
    exercises = await svc.list_exercises(lesson_id)
    return LessonDetailResponse(
        id=lesson.id,
        skill_id=lesson.skill_id,
        title=lesson.title,
        order_index=lesson.order_index,
        content_json=lesson.content_json,
        exercises=[ExerciseResponse.model_validate(e) for e in exercises],
    )


# ---- Attempts / completion ----


@router.post("/attempts", response_model=AttemptResponse, response_model_exclude_none=True)
async def submit_attempt(
    body: AttemptRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> AttemptResponse:
    """Grade one answer. Hint and correct answer are returned only when wrong."""
    result = await CompletionService(db).submit_attempt(user.id, body.exercise_id, body.answer)
    await db.commit()
    return AttemptResponse(
        is_correct=result.is_correct,
        explanation=result.explanation,
        hint=result.hint,
        correct_answer=result.correct_answer,
    )


@router.post("/lessons/{lesson_id}/complete", response_model=SuccessResponse)
async def complete_lesson(
    lesson_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> SuccessResponse:
    """Mark a lesson completed; awards XP, touches the streak, checks achievements."""
    await CompletionService(db).complete_lesson(user.id, lesson_id)
    await db.commit()
    return SuccessResponse()


# ---- Practice ----


@router.get("/practice/queue", response_model=list[ExerciseResponse])
async def practice_queue(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> list[ExerciseResponse]:
    """Review exercises, most recently missed first."""
    queue = await build_practice_queue(
        db,
        user.id,
        size=settings.practice_queue_size,
        miss_window=settings.practice_miss_window,
    )
    return [ExerciseResponse.model_validate(e) for e in queue]


@router.post("/practice/complete", response_model=SuccessResponse)
async def complete_practice(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> SuccessResponse:
    """Finish a practice session."""
    await CompletionService(db).complete_practice_session(user.id)
    await db.commit()
    return SuccessResponse()


# ---- Projects ----


@router.get("/projects/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> ProjectResponse:
    project = await ContentService(db).get_project(project_id)
    return ProjectResponse.model_validate(project)


@router.post("/projects/{project_id}/submit", response_model=SubmissionResponse, status_code=201)
async def submit_project(
    project_id: str,
    body: ProjectSubmitRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> SubmissionResponse:
    """Store a project submission and award project XP."""
    submission = await CompletionService(db).submit_project(user.id, project_id, body.data)
    await db.commit()
    return SubmissionResponse.model_validate(submission)


@router.get("/submissions", response_model=list[SubmissionResponse])
async def list_submissions(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> list[SubmissionResponse]:
    """The caller's project submissions, newest first."""
    submissions = await ContentService(db).list_submissions(user.id)
    return [SubmissionResponse.model_validate(s) for s in submissions]
