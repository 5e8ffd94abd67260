"""SQLAlchemy mixins for common model patterns (DRY).

Provides: CuidMixin, TimestampMixin, StatusTrackedMixin and the combined
SchoolModel / StatusTrackedModel bases.
"""

from datetime import date, datetime

from sqlalchemy import Boolean, Date, DateTime, Integer, String, inspect
from sqlalchemy.orm import Mapped, declared_attr, mapped_column, validates
from sqlalchemy.sql import func

from app.domain.enums import SubjectKind
from app.domain.exceptions import StatusWriteViolationException, ValidationException
from app.domain.value_objects.transition_table import TRANSITION_TABLES
from app.shared.utils.generators import generate_cuid


class CuidMixin:
    """Mixin for models using CUID as primary key. Provides id with default generate_cuid."""

    @declared_attr
    def id(cls) -> Mapped[str]:
        return mapped_column(String, primary_key=True, default=generate_cuid)


class TimestampMixin:
    """Mixin for created_at and updated_at (server defaults, timezone-aware)."""

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True), server_default=func.now(), nullable=False
        )

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            server_default=func.now(),
            onupdate=func.now(),
            nullable=False,
        )


class StatusTrackedMixin:
    """Status columns owned by the propagation engine.

    Subclasses set __status_default__ and __subject_kind__. A new row may only
    start in a status of its kind's transition table. The status of a row that
    already exists in the database can only change through the status
    gateway's version-checked UPDATE; assigning it on a loaded instance raises
    StatusWriteViolationException.
    """

    __status_default__: str = "active"
    __subject_kind__: SubjectKind | None = None

    @declared_attr
    def status(cls) -> Mapped[str]:
        return mapped_column(
            String(32), nullable=False, default=cls.__status_default__, index=True
        )

    @declared_attr
    def status_effective_at(cls) -> Mapped[datetime | None]:
        return mapped_column(DateTime(timezone=True), nullable=True)

    @declared_attr
    def status_end_date(cls) -> Mapped[date | None]:
        return mapped_column(Date, nullable=True)

    @declared_attr
    def status_auto_restore(cls) -> Mapped[bool]:
        return mapped_column(Boolean, nullable=False, default=False)

    @declared_attr
    def status_version(cls) -> Mapped[int]:
        return mapped_column(Integer, nullable=False, default=1)

    @validates("status")
    def _guard_status_write(self, _key: str, value: str) -> str:
        if inspect(self).has_identity:
            raise StatusWriteViolationException(type(self).__name__)
        kind = type(self).__subject_kind__
        status = getattr(value, "value", value)
        if kind is not None and status not in TRANSITION_TABLES[kind].states:
            raise ValidationException(
                f"Unknown {kind.value} status {value!r}", field="status"
            )
        return value


class SchoolModel(CuidMixin, TimestampMixin):
    """Combined mixin: CUID + created_at/updated_at."""

    __abstract__ = True


class StatusTrackedModel(CuidMixin, TimestampMixin, StatusTrackedMixin):
    """Combined mixin: CUID + timestamps + engine-owned status columns."""

    __abstract__ = True
