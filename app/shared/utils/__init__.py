"""Shared utilities: datetime, generators."""

from app.shared.utils.datetime import ensure_utc, start_of_day_utc, utc_now, utc_today
from app.shared.utils.generators import generate_cuid

__all__ = [
    "generate_cuid",
    "utc_now",
    "utc_today",
    "ensure_utc",
    "start_of_day_utc",
]
