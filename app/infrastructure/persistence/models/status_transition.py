"""StatusTransition ORM model: the append-only history ledger."""

from datetime import date, datetime
from typing import Any

from sqlalchemy import (
    BigInteger,
    Boolean,
    Connection,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    event,
)
from sqlalchemy.orm import Mapped, Mapper, mapped_column
from sqlalchemy.sql import func

from app.infrastructure.persistence.database import Base

# BIGSERIAL on Postgres; SQLite only autoincrements INTEGER PRIMARY KEY.
_LedgerId = BigInteger().with_variant(Integer, "sqlite")


class StatusTransition(Base):
    """One status change of one subject. Table: status_transition. Never updated or deleted."""

    __tablename__ = "status_transition"

    id: Mapped[int] = mapped_column(_LedgerId, primary_key=True, autoincrement=True)
    subject_type: Mapped[str] = mapped_column(String(32), nullable=False)
    subject_id: Mapped[str] = mapped_column(String, nullable=False)
    previous_status: Mapped[str] = mapped_column(String(32), nullable=False)
    new_status: Mapped[str] = mapped_column(String(32), nullable=False)
    effective_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date)
    auto_restore: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    reason: Mapped[str] = mapped_column(String(32), nullable=False)
    trigger_action_type: Mapped[str | None] = mapped_column(String(64))
    trigger_action_id: Mapped[str | None] = mapped_column(String)
    actor_id: Mapped[str | None] = mapped_column(String)
    note: Mapped[str | None] = mapped_column(Text)
    reverses_transition_id: Mapped[int | None] = mapped_column(
        _LedgerId, ForeignKey("status_transition.id"), unique=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        Index(
            "ix_status_transition_subject",
            "subject_type",
            "subject_id",
            "effective_date",
            "id",
        ),
        Index(
            "ix_status_transition_trigger", "trigger_action_type", "trigger_action_id"
        ),
    )


@event.listens_for(StatusTransition, "before_update")
def _prevent_transition_updates(
    _mapper: Mapper[Any], _connection: Connection, _target: StatusTransition
) -> None:
    """The ledger is append-only; corrections are compensating records."""
    raise ValueError(
        "Status transitions are immutable and cannot be updated. "
        "Append a compensating transition instead."
    )


@event.listens_for(StatusTransition, "before_delete")
def _prevent_transition_deletes(
    _mapper: Mapper[Any], _connection: Connection, _target: StatusTransition
) -> None:
    raise ValueError("Status transitions are immutable and cannot be deleted.")
