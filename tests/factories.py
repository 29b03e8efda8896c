"""Test data builders."""

from __future__ import annotations

from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from finmimo.auth.service import create_user
from finmimo.db.models import Exercise, Lesson, Path, Project, Skill, User

PASSWORD = "correct-horse"


@dataclass
class SeededContent:
    path: Path
    skills: list[Skill]
    lessons: dict[str, list[Lesson]] = field(default_factory=dict)
    exercises: dict[str, list[Exercise]] = field(default_factory=dict)
    project: Project | None = None

    def lesson(self, skill_index: int, lesson_index: int) -> Lesson:
        return self.lessons[self.skills[skill_index].id][lesson_index]


def _exercise(lesson: Lesson, index: int) -> Exercise:
    """Cycle through the three exercise types."""
    kind = index % 3
    common = {
        "lesson_id": lesson.id,
        "order_index": index,
        "explanation": f"Explanation {lesson.title} #{index}",
        "hint": f"Hint {lesson.title} #{index}",
        "tags_json": ["budgeting"],
    }
    if kind == 0:
        return Exercise(
            type="multiple_choice",
            prompt=f"{lesson.title} Q{index}: pick the need",
            options_json=["Streaming", "Rent", "Concert"],
            answer_json={"correct": 1},
            **common,
        )
    if kind == 1:
        return Exercise(
            type="true_false",
            prompt=f"{lesson.title} Q{index}: an emergency fund is savings",
            answer_json={"correct": True},
            **common,
        )
    return Exercise(
        type="numeric",
        prompt=f"{lesson.title} Q{index}: 20% of 50",
        answer_json={"min": 9.5, "max": 10.5, "correct": 10},
        **common,
    )


async def seed_content(
    db: AsyncSession,
    skills: int = 2,
    lessons_per_skill: int = 3,
    exercises_per_lesson: int = 5,
) -> SeededContent:
    """One path with ordered skills, lessons and exercises, plus a project on the first skill."""
    path = Path(title="Money Basics", description="Start here", order_index=0)
    db.add(path)
    await db.flush()

    seeded = SeededContent(path=path, skills=[])
    for s in range(skills):
        skill = Skill(path_id=path.id, title=f"Skill {s}", description="", order_index=s)
        db.add(skill)
        await db.flush()
        seeded.skills.append(skill)
        seeded.lessons[skill.id] = []

        for i in range(lessons_per_skill):
            lesson = Lesson(
                skill_id=skill.id,
                title=f"S{s}L{i}",
                order_index=i,
                content_json=[{"type": "text", "body": "Needs come before wants."}],
            )
            db.add(lesson)
            await db.flush()
            seeded.lessons[skill.id].append(lesson)

            items = [_exercise(lesson, e) for e in range(exercises_per_lesson)]
            db.add_all(items)
            await db.flush()
            seeded.exercises[lesson.id] = items

    project = Project(
        skill_id=seeded.skills[0].id,
        title="Monthly budget",
        description="Plan one month",
        schema_json={"fields": [{"name": "income", "type": "number"}]},
    )
    db.add(project)
    await db.commit()
    seeded.project = project
    return seeded


async def make_user(db: AsyncSession, email: str = "learner@example.com") -> User:
    user = await create_user(db, email=email, password=PASSWORD, display_name="Learner", password_min_length=6)
    await db.commit()
    return user
