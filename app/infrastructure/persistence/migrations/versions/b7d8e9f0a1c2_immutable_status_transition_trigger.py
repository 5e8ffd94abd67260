"""Add trigger enforcing immutability of status_transition (Postgres only).

Revision ID: b7d8e9f0a1c2
Revises: a1c2e3f4b5d6
Create Date: 2026-10-19 09:30:00.000000

The ledger is append-only. The ORM listeners already refuse UPDATE and
DELETE; this trigger blocks them for any other client. Corrections are
compensating records.
"""

from typing import Sequence, Union

from alembic import op

revision: str = "b7d8e9f0a1c2"
down_revision: Union[str, Sequence[str], None] = "a1c2e3f4b5d6"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _trigger_function() -> str:
    """Return SQL for trigger function that blocks status_transition UPDATE/DELETE."""
    return """
    CREATE OR REPLACE FUNCTION prevent_status_transition_mutation()
    RETURNS TRIGGER
    LANGUAGE plpgsql
    AS $$
    BEGIN
        RAISE EXCEPTION 'status_transition rows are immutable; append a compensating transition instead'
            USING ERRCODE = 'integrity_constraint_violation';
    END;
    $$
    """


def upgrade() -> None:
    if op.get_bind().dialect.name != "postgresql":
        return
    op.execute(_trigger_function())
    op.execute(
        "CREATE TRIGGER prevent_status_transition_update_delete "
        "BEFORE UPDATE OR DELETE ON status_transition "
        "FOR EACH ROW EXECUTE PROCEDURE prevent_status_transition_mutation()"
    )


def downgrade() -> None:
    if op.get_bind().dialect.name != "postgresql":
        return
    op.execute(
        "DROP TRIGGER IF EXISTS prevent_status_transition_update_delete ON status_transition"
    )
    op.execute("DROP FUNCTION IF EXISTS prevent_status_transition_mutation()")
