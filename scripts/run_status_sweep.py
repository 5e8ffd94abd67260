"""Run the automatic-expiry sweep, then put teachers on leave whose approved leave starts.

Usage:
    uv run python -m scripts.run_status_sweep [YYYY-MM-DD]
The optional date is treated as "today" (statuses ending before it are restored).
Schedule daily from cron; safe to run repeatedly.
"""

import asyncio
import logging
import sys
from datetime import UTC, datetime

from dotenv import load_dotenv

import app.infrastructure.persistence.database as database
from app.application.use_cases import LeaveService
from app.core.config import get_settings
from app.infrastructure.persistence.repositories import (
    AcademicSessionRepository,
    LeaveRepository,
)
from app.infrastructure.services import build_propagation_engine
from app.shared.telemetry.logging import setup_logging
from app.shared.telemetry.tracing import TracedOperation

logger = logging.getLogger("scripts.run_status_sweep")


def _parse_now(argv: list[str]) -> datetime | None:
    if len(argv) < 2:
        return None
    try:
        return datetime.strptime(argv[1], "%Y-%m-%d").replace(tzinfo=UTC)
    except ValueError:
        print(f"Invalid date {argv[1]!r}; expected YYYY-MM-DD", file=sys.stderr)
        sys.exit(2)


async def main() -> int:
    """Sweep, then start due leave, in one transaction (each subject in its own savepoint)."""
    load_dotenv()
    setup_logging()
    settings = get_settings()
    now = _parse_now(sys.argv)

    try:
        async with database.get_session_factory()() as session:
            async with session.begin():
                engine = build_propagation_engine(session, settings)
                with TracedOperation("status_sweep.run") as op:
                    results = await engine.sweep_expired(now)
                    op.set_attribute("candidates", len(results))
                leave = LeaveService(
                    LeaveRepository(session), AcademicSessionRepository(session), engine
                )
                with TracedOperation("status_sweep.start_leave") as op:
                    started = await leave.start_due_leave(now.date() if now else None)
                    op.set_attribute("started", sum(1 for r in started if r.changed))
    finally:
        await database.dispose_engine()

    restored = sum(1 for r in results if r.changed)
    failed = [r for r in (*results, *started) if not r.success]
    for r in failed:
        logger.warning("Failed: %s %s (%s)", r.subject_type.value, r.subject_id, r.error)
    on_leave = sum(1 for r in started if r.changed)
    print(
        f"Done. {len(results)} candidate(s), {restored} restored, "
        f"{on_leave} put on leave, {len(failed)} failed"
    )
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
