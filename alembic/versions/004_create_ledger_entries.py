"""004: create ledger_entries table

Revision ID: 004
Revises: 003
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE ledger_entries (
            id              BIGSERIAL       PRIMARY KEY,
            user_id         VARCHAR(64)     NOT NULL REFERENCES users (id),
            kind            VARCHAR(20)     NOT NULL,
            amount          BIGINT          NOT NULL,
            description     VARCHAR(500)    NOT NULL DEFAULT '',
            reference       VARCHAR(192)    NOT NULL,
            reference_type  VARCHAR(20)     NOT NULL,
            status          VARCHAR(16)     NOT NULL DEFAULT 'completed',
            metadata        JSONB           NOT NULL DEFAULT '{}'::jsonb,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_ledger_user_reference UNIQUE (user_id, reference, reference_type),
            CONSTRAINT ck_ledger_kind CHECK (
                kind IN ('deposit', 'winning', 'entry_fee', 'withdrawal')
            ),
            CONSTRAINT ck_ledger_reference_type CHECK (
                reference_type IN ('payment_id', 'tournament_id', 'withdrawal_id')
            ),
            CONSTRAINT ck_ledger_status CHECK (status IN ('completed', 'pending', 'failed')),
            CONSTRAINT ck_ledger_amount_sign CHECK (
                (kind IN ('deposit', 'winning') AND amount > 0)
                OR (kind IN ('entry_fee', 'withdrawal') AND amount <= 0)
            )
        );
    """)
    op.execute("CREATE INDEX idx_ledger_user_time ON ledger_entries (user_id, created_at DESC);")
    op.execute("""
        CREATE TRIGGER trg_ledger_entries_append_only
            BEFORE UPDATE OR DELETE ON ledger_entries
            FOR EACH ROW EXECUTE FUNCTION fn_reject_ledger_mutation();
    """)
    op.execute(
        "COMMENT ON TABLE ledger_entries IS 'Money movements, append-only, amounts in cents';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS ledger_entries CASCADE;")
