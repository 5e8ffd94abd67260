"""Academic session ORM model."""

from datetime import date

from sqlalchemy import Boolean, Date, Index, Integer, String, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.enums import SessionStatus, SubjectKind
from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import StatusTrackedModel


class AcademicSession(StatusTrackedModel, Base):
    """Year + term. At most one session is current."""

    __tablename__ = "academic_session"
    __status_default__ = SessionStatus.ACTIVE.value
    __subject_kind__ = SubjectKind.ACADEMIC_SESSION

    year: Mapped[int] = mapped_column(Integer, nullable=False)
    term: Mapped[str] = mapped_column(String(20), nullable=False)
    start_date: Mapped[date | None] = mapped_column(Date)
    end_date: Mapped[date | None] = mapped_column(Date)
    is_current: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        UniqueConstraint("year", "term", name="uq_academic_session_year_term"),
        Index(
            "uq_academic_session_current",
            "is_current",
            unique=True,
            postgresql_where=text("is_current"),
            sqlite_where=text("is_current"),
        ),
    )
