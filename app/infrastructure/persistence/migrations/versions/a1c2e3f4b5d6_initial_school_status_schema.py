"""Initial schema: school records, status columns and the status_transition ledger

Revision ID: a1c2e3f4b5d6
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "a1c2e3f4b5d6"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

LEDGER_ID = sa.BigInteger().with_variant(sa.Integer(), "sqlite")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
    ]


def _status_columns(default: str) -> list[sa.Column]:
    """Engine-owned status columns shared by every status-tracked table."""
    return [
        sa.Column("status", sa.String(32), server_default=default, nullable=False),
        sa.Column("status_effective_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status_end_date", sa.Date(), nullable=True),
        sa.Column(
            "status_auto_restore", sa.Boolean(), server_default=sa.false(), nullable=False
        ),
        sa.Column("status_version", sa.Integer(), server_default="1", nullable=False),
    ]


def _status_index(table: str) -> None:
    op.create_index(op.f(f"ix_{table}_status"), table, ["status"], unique=False)


def upgrade() -> None:
    """Create initial schema."""
    # academic_session
    op.create_table(
        "academic_session",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("term", sa.String(20), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("is_current", sa.Boolean(), server_default=sa.false(), nullable=False),
        *_status_columns("active"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("year", "term", name="uq_academic_session_year_term"),
    )
    _status_index("academic_session")
    op.create_index(
        "uq_academic_session_current",
        "academic_session",
        ["is_current"],
        unique=True,
        postgresql_where=sa.text("is_current"),
        sqlite_where=sa.text("is_current"),
    )

    # student
    op.create_table(
        "student",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("admission_number", sa.String(50), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("current_class", sa.String(50), nullable=True),
        sa.Column("stream", sa.String(50), nullable=True),
        *_status_columns("active"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    _status_index("student")
    op.create_index(
        op.f("ix_student_admission_number"), "student", ["admission_number"], unique=True
    )
    op.create_index("ix_student_class_stream", "student", ["current_class", "stream"])

    op.create_table(
        "student_class_history",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("student_id", sa.String(), nullable=False),
        sa.Column("academic_session_id", sa.String(), nullable=False),
        sa.Column("from_class", sa.String(50), nullable=True),
        sa.Column("from_stream", sa.String(50), nullable=True),
        sa.Column("to_class", sa.String(50), nullable=True),
        sa.Column("to_stream", sa.String(50), nullable=True),
        sa.Column("promotion_status", sa.String(20), nullable=False),
        sa.Column("promoted_by", sa.String(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["student_id"], ["student.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["academic_session_id"], ["academic_session.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_student_class_history_student_id"), "student_class_history", ["student_id"]
    )
    op.create_index(
        op.f("ix_student_class_history_academic_session_id"),
        "student_class_history",
        ["academic_session_id"],
    )

    # teacher and leave
    op.create_table(
        "teacher",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("staff_number", sa.String(50), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        *_status_columns("active"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("staff_number"),
    )
    _status_index("teacher")

    op.create_table(
        "leave_type",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("default_days", sa.Integer(), server_default="0", nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )

    op.create_table(
        "leave_balance",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("teacher_id", sa.String(), nullable=False),
        sa.Column("leave_type_id", sa.String(), nullable=False),
        sa.Column("academic_year", sa.String(9), nullable=False),
        sa.Column("total_days", sa.Integer(), server_default="0", nullable=False),
        sa.Column("used_days", sa.Integer(), server_default="0", nullable=False),
        *_timestamps(),
        sa.CheckConstraint("used_days >= 0", name="ck_leave_balance_used_non_negative"),
        sa.ForeignKeyConstraint(["teacher_id"], ["teacher.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["leave_type_id"], ["leave_type.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "teacher_id", "leave_type_id", "academic_year", name="uq_leave_balance_year"
        ),
    )
    op.create_index(op.f("ix_leave_balance_teacher_id"), "leave_balance", ["teacher_id"])

    op.create_table(
        "leave_request",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("teacher_id", sa.String(), nullable=False),
        sa.Column("leave_type_id", sa.String(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("working_days", sa.Integer(), nullable=False),
        sa.Column("academic_year", sa.String(9), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("decided_by", sa.String(), nullable=True),
        sa.Column("decided_at", sa.DateTime(timezone=True), nullable=True),
        *_status_columns("pending"),
        *_timestamps(),
        sa.CheckConstraint("end_date >= start_date", name="ck_leave_request_dates"),
        sa.ForeignKeyConstraint(["teacher_id"], ["teacher.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["leave_type_id"], ["leave_type.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    _status_index("leave_request")
    op.create_index(op.f("ix_leave_request_teacher_id"), "leave_request", ["teacher_id"])
    op.create_index(op.f("ix_leave_request_end_date"), "leave_request", ["end_date"])

    # exams
    op.create_table(
        "examination",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("academic_session_id", sa.String(), nullable=True),
        *_status_columns("scheduled"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["academic_session_id"], ["academic_session.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    _status_index("examination")
    op.create_index(
        op.f("ix_examination_academic_session_id"), "examination", ["academic_session_id"]
    )

    op.create_table(
        "exam_schedule",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("examination_id", sa.String(), nullable=False),
        sa.Column("subject_name", sa.String(100), nullable=False),
        sa.Column("class_name", sa.String(50), nullable=False),
        sa.Column("stream", sa.String(50), nullable=True),
        sa.Column("exam_date", sa.Date(), nullable=True),
        sa.Column("total_marks", sa.Float(), server_default="100", nullable=False),
        sa.Column("passing_marks", sa.Float(), server_default="40", nullable=False),
        *_status_columns("scheduled"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["examination_id"], ["examination.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    _status_index("exam_schedule")
    op.create_index(
        op.f("ix_exam_schedule_examination_id"), "exam_schedule", ["examination_id"]
    )

    op.create_table(
        "exam_result",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("schedule_id", sa.String(), nullable=False),
        sa.Column("student_id", sa.String(), nullable=False),
        sa.Column("marks_obtained", sa.Float(), nullable=True),
        sa.Column("grade", sa.String(5), nullable=True),
        sa.Column("points", sa.Float(), nullable=True),
        sa.Column("is_absent", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("remarks", sa.Text(), nullable=True),
        sa.Column("recorded_by", sa.String(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["schedule_id"], ["exam_schedule.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["student_id"], ["student.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "schedule_id", "student_id", name="uq_exam_result_schedule_student"
        ),
    )
    op.create_index("ix_exam_result_schedule", "exam_result", ["schedule_id"])
    op.create_index(op.f("ix_exam_result_student_id"), "exam_result", ["student_id"])

    op.create_table(
        "grade_point",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("grade", sa.String(5), nullable=False),
        sa.Column("lower_mark", sa.Float(), nullable=False),
        sa.Column("upper_mark", sa.Float(), nullable=False),
        sa.Column("points", sa.Float(), nullable=False),
        sa.Column("remarks", sa.String(100), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("grade"),
    )

    # disciplinary
    op.create_table(
        "disciplinary_incident",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("student_id", sa.String(), nullable=False),
        sa.Column("incident_date", sa.Date(), nullable=False),
        sa.Column("incident_type", sa.String(100), nullable=False),
        sa.Column("severity", sa.String(20), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("status", sa.String(20), server_default="pending", nullable=False),
        sa.Column("reported_by", sa.String(), nullable=True),
        sa.Column("location", sa.String(200), nullable=True),
        sa.Column("witnesses", sa.Text(), nullable=True),
        sa.Column("action_taken", sa.Text(), nullable=True),
        sa.Column("follow_up_date", sa.Date(), nullable=True),
        sa.Column("resolution_notes", sa.Text(), nullable=True),
        sa.Column("affects_status", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("status_change", sa.String(32), nullable=True),
        sa.Column("effective_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("auto_restore", sa.Boolean(), server_default=sa.false(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["student_id"], ["student.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_disciplinary_incident_student_id"), "disciplinary_incident", ["student_id"]
    )

    op.create_table(
        "disciplinary_action",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("incident_id", sa.String(), nullable=False),
        sa.Column("action_date", sa.Date(), nullable=False),
        sa.Column("action_type", sa.String(50), nullable=False),
        sa.Column("performed_by", sa.String(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["incident_id"], ["disciplinary_incident.id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_disciplinary_action_incident_id"), "disciplinary_action", ["incident_id"]
    )

    # hostel
    op.create_table(
        "dormitory_room",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("dormitory", sa.String(100), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False),
        *_status_columns("available"),
        *_timestamps(),
        sa.CheckConstraint("capacity > 0", name="ck_dormitory_room_capacity"),
        sa.PrimaryKeyConstraint("id"),
    )
    _status_index("dormitory_room")

    op.create_table(
        "room_allocation",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("room_id", sa.String(), nullable=False),
        sa.Column("student_id", sa.String(), nullable=False),
        sa.Column("allocated_on", sa.Date(), nullable=False),
        sa.Column("vacated_on", sa.Date(), nullable=True),
        sa.Column("allocated_by", sa.String(), nullable=True),
        sa.Column("status", sa.String(20), server_default="active", nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["room_id"], ["dormitory_room.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["student_id"], ["student.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_room_allocation_student_id"), "room_allocation", ["student_id"])
    op.create_index(
        "ix_room_allocation_room_status", "room_allocation", ["room_id", "status"]
    )

    # status_transition ledger
    op.create_table(
        "status_transition",
        sa.Column("id", LEDGER_ID, autoincrement=True, nullable=False),
        sa.Column("subject_type", sa.String(32), nullable=False),
        sa.Column("subject_id", sa.String(), nullable=False),
        sa.Column("previous_status", sa.String(32), nullable=False),
        sa.Column("new_status", sa.String(32), nullable=False),
        sa.Column("effective_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("auto_restore", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("reason", sa.String(32), nullable=False),
        sa.Column("trigger_action_type", sa.String(64), nullable=True),
        sa.Column("trigger_action_id", sa.String(), nullable=True),
        sa.Column("actor_id", sa.String(), nullable=True),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("reverses_transition_id", LEDGER_ID, nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.ForeignKeyConstraint(["reverses_transition_id"], ["status_transition.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("reverses_transition_id"),
    )
    op.create_index(
        "ix_status_transition_subject",
        "status_transition",
        ["subject_type", "subject_id", "effective_date", "id"],
    )
    op.create_index(
        "ix_status_transition_trigger",
        "status_transition",
        ["trigger_action_type", "trigger_action_id"],
    )


def downgrade() -> None:
    """Drop all tables (reverse dependency order)."""
    for table in (
        "status_transition",
        "room_allocation",
        "dormitory_room",
        "disciplinary_action",
        "disciplinary_incident",
        "grade_point",
        "exam_result",
        "exam_schedule",
        "examination",
        "leave_request",
        "leave_balance",
        "leave_type",
        "teacher",
        "student_class_history",
        "student",
        "academic_session",
    ):
        op.drop_table(table)
