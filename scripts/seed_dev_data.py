"""Seed dev data from scripts/seed-data.json.

Loads academic sessions, the grading scale, students, teachers (with leave
balances for the current academic year), examinations with schedules and
dormitory rooms. Rows that already exist (by natural key) are skipped.

Usage:
    uv run python -m scripts.seed_dev_data [path/to/seed-data.json]

Requires: DATABASE_URL and a migrated database (uv run alembic upgrade head).
"""

from __future__ import annotations

import asyncio
import json
import sys
from datetime import date
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

import app.infrastructure.persistence.database as database
from app.infrastructure.persistence.models import (
    AcademicSession,
    DormitoryRoom,
    Examination,
    ExamSchedule,
    GradePoint,
    LeaveBalance,
    LeaveType,
    Student,
    Teacher,
)


def _project_root() -> Path:
    return Path(__file__).resolve().parent.parent


def _load_env() -> None:
    """Load .env from project root so get_settings() sees DATABASE_URL when run as script."""
    load_dotenv(_project_root() / ".env", override=True)


def _parse_date(value: str | None) -> date | None:
    return date.fromisoformat(value) if value else None


async def _exists(session: AsyncSession, model: Any, **criteria: Any) -> Any | None:
    stmt = select(model).filter_by(**criteria)
    return (await session.execute(stmt)).scalars().first()


async def run(path: Path) -> None:
    _load_env()
    data = json.loads(path.read_text(encoding="utf-8"))

    try:
        async with database.get_session_factory()() as session:
            async with session.begin():
                current_year: str | None = None
                for s in data.get("academic_sessions", []):
                    existing = await _exists(
                        session, AcademicSession, year=s["year"], term=s["term"]
                    )
                    if s.get("is_current"):
                        current_year = f"{s['year']}-{s['year'] + 1}"
                    if existing:
                        print(f"  Session {s['year']} {s['term']} exists, skip")
                        continue
                    session.add(
                        AcademicSession(
                            year=s["year"],
                            term=s["term"],
                            start_date=_parse_date(s.get("start_date")),
                            end_date=_parse_date(s.get("end_date")),
                            is_current=bool(s.get("is_current")),
                        )
                    )
                    print(f"  Session {s['year']} {s['term']}")

                for g in data.get("grade_points", []):
                    if await _exists(session, GradePoint, grade=g["grade"]):
                        continue
                    session.add(GradePoint(**g))
                print(f"  Grading scale ({len(data.get('grade_points', []))} bands)")

                for st in data.get("students", []):
                    if await _exists(
                        session, Student, admission_number=st["admission_number"]
                    ):
                        print(f"  Student {st['admission_number']} exists, skip")
                        continue
                    session.add(Student(**st))
                    print(f"  Student {st['admission_number']}")

                leave_types: list[LeaveType] = []
                for lt in data.get("leave_types", []):
                    existing = await _exists(session, LeaveType, name=lt["name"])
                    if existing is None:
                        existing = LeaveType(**lt)
                        session.add(existing)
                    leave_types.append(existing)

                for t in data.get("teachers", []):
                    teacher = await _exists(session, Teacher, staff_number=t["staff_number"])
                    if teacher is None:
                        teacher = Teacher(**t)
                        session.add(teacher)
                        print(f"  Teacher {t['staff_number']}")
                    await session.flush()
                    if current_year is None:
                        continue
                    for lt in leave_types:
                        if await _exists(
                            session,
                            LeaveBalance,
                            teacher_id=teacher.id,
                            leave_type_id=lt.id,
                            academic_year=current_year,
                        ):
                            continue
                        session.add(
                            LeaveBalance(
                                teacher_id=teacher.id,
                                leave_type_id=lt.id,
                                academic_year=current_year,
                                total_days=lt.default_days,
                            )
                        )

                for ex in data.get("examinations", []):
                    if await _exists(session, Examination, name=ex["name"]):
                        print(f"  Examination {ex['name']} exists, skip")
                        continue
                    examination = Examination(name=ex["name"])
                    session.add(examination)
                    await session.flush()
                    for sc in ex.get("schedules", []):
                        session.add(
                            ExamSchedule(
                                examination_id=examination.id,
                                subject_name=sc["subject_name"],
                                class_name=sc["class_name"],
                                stream=sc.get("stream"),
                                exam_date=_parse_date(sc.get("exam_date")),
                                total_marks=sc.get("total_marks", 100),
                                passing_marks=sc.get("passing_marks", 40),
                            )
                        )
                    print(f"  Examination {ex['name']} ({len(ex.get('schedules', []))} papers)")

                for r in data.get("dormitory_rooms", []):
                    if await _exists(
                        session, DormitoryRoom, name=r["name"], dormitory=r["dormitory"]
                    ):
                        continue
                    session.add(DormitoryRoom(**r))
                    print(f"  Room {r['dormitory']} {r['name']}")
    finally:
        await database.dispose_engine()

    print("Seed completed.")


def main() -> None:
    root = _project_root()
    path_arg = sys.argv[1] if len(sys.argv) > 1 else None
    path = Path(path_arg) if path_arg else root / "scripts" / "seed-data.json"
    if not path.is_absolute():
        path = (root / path).resolve()
    asyncio.run(run(path))


if __name__ == "__main__":
    main()
