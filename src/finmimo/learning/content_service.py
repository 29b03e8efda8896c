"""Content catalog reads: paths, skills, lessons, exercises, projects."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from finmimo.db.models import Exercise, Lesson, Path, Project, ProjectSubmission, Skill
from finmimo.errors import NotFoundError
from finmimo.learning.progress_service import get_completed_lesson_ids


@dataclass(frozen=True)
class NextLesson:
    path: Path
    skill: Skill
    lesson: Lesson


class ContentService:
    """Read-only access to the authored content hierarchy."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def list_paths(self) -> list[Path]:
        result = await self.db.execute(select(Path).order_by(Path.order_index))
        return list(result.scalars().all())

    async def get_path(self, path_id: str) -> Path:
        path = await self.db.get(Path, path_id)
        if path is None:
            msg = "Path not found"
            raise NotFoundError(msg)
        return path

    async def list_skills(self, path_id: str) -> list[Skill]:
        result = await self.db.execute(
            select(Skill).where(Skill.path_id == path_id).order_by(Skill.order_index)
        )
        return list(result.scalars().all())

    async def get_skill(self, skill_id: str) -> Skill:
        skill = await self.db.get(Skill, skill_id)
        if skill is None:
            msg = "Skill not found"
            raise NotFoundError(msg)
        return skill

    async def list_lessons(self, skill_id: str) -> list[Lesson]:
        """Published lessons of a skill in order."""
        result = await self.db.execute(
            select(Lesson)
            .where(Lesson.skill_id == skill_id, Lesson.is_published.is_(True))
            .order_by(Lesson.order_index)
        )
        return list(result.scalars().all())

    async def get_lesson(self, lesson_id: str) -> Lesson:
        lesson = await self.db.get(Lesson, lesson_id)
        if lesson is None:
            msg = "Lesson not found"
            raise NotFoundError(msg)
        return lesson

    async def list_exercises(self, lesson_id: str) -> list[Exercise]:
        result = await self.db.execute(
            select(Exercise).where(Exercise.lesson_id == lesson_id).order_by(Exercise.order_index)
        )
        return list(result.scalars().all())

    async def get_exercise(self, exercise_id: str) -> Exercise:
        exercise = await self.db.get(Exercise, exercise_id)
        if exercise is None:
            msg = "Exercise not found"
            raise NotFoundError(msg)
        return exercise

    async def get_project(self, project_id: str) -> Project:
        project = await self.db.get(Project, project_id)
        if project is None:
            msg = "Project not found"
            raise NotFoundError(msg)
        return project

    async def get_skill_project(self, skill_id: str) -> Project | None:
        result = await self.db.execute(select(Project).where(Project.skill_id == skill_id).limit(1))
        return result.scalar_one_or_none()

    async def list_submissions(self, user_id: str) -> list[ProjectSubmission]:
        """A user's project submissions, newest first."""
        result = await self.db.execute(
            select(ProjectSubmission)
            .where(ProjectSubmission.user_id == user_id)
            .order_by(ProjectSubmission.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_next_lesson(self, user_id: str) -> NextLesson | None:
        """First published lesson, in path/skill/lesson order, the user has not completed."""
        completed = await get_completed_lesson_ids(self.db, user_id)
        result = await self.db.execute(
            select(Path, Skill, Lesson)
            .join(Skill, Skill.path_id == Path.id)
            .join(Lesson, Lesson.skill_id == Skill.id)
            .where(Lesson.is_published.is_(True))
            .order_by(Path.order_index, Skill.order_index, Lesson.order_index)
        )
        for path, skill, lesson in result.all():
            if lesson.id not in completed:
                return NextLesson(path=path, skill=skill, lesson=lesson)
        return None
