"""005: create registrations table

Revision ID: 005
Revises: 004
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE registrations (
            id                  VARCHAR(64)     PRIMARY KEY,
            user_id             VARCHAR(64)     NOT NULL REFERENCES users (id),
            tournament_id       VARCHAR(64)     NOT NULL REFERENCES tournaments (id),
            free_fire_id        VARCHAR(32)     NOT NULL,
            team_selection      VARCHAR(8),
            status              VARCHAR(16)     NOT NULL DEFAULT 'registered',
            payment_method      VARCHAR(16)     NOT NULL DEFAULT 'wallet',
            amount_paid         BIGINT          NOT NULL,
            from_deposit        BIGINT          NOT NULL DEFAULT 0,
            from_winning        BIGINT          NOT NULL DEFAULT 0,
            ledger_entry_id     BIGINT          REFERENCES ledger_entries (id),
            user_snapshot       JSONB           NOT NULL,
            tournament_snapshot JSONB           NOT NULL,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_registrations_user_tournament UNIQUE (user_id, tournament_id),
            CONSTRAINT uq_registrations_tournament_ffid UNIQUE (tournament_id, free_fire_id),
            CONSTRAINT ck_registrations_ffid_digits CHECK (free_fire_id ~ '^[0-9]+$'),
            CONSTRAINT ck_registrations_team CHECK (
                team_selection IS NULL OR team_selection IN ('team_a', 'team_b')
            ),
            CONSTRAINT ck_registrations_status CHECK (
                status IN ('registered', 'cancelled', 'refunded')
            ),
            CONSTRAINT ck_registrations_payment_method CHECK (
                payment_method IN ('wallet', 'direct')
            ),
            CONSTRAINT ck_registrations_split CHECK (
                from_deposit >= 0 AND from_winning >= 0
                AND from_deposit + from_winning = amount_paid
            )
        );
    """)
    op.execute("CREATE INDEX idx_registrations_tournament ON registrations (tournament_id);")
    op.execute("""
        CREATE TRIGGER trg_registrations_updated_at
            BEFORE UPDATE ON registrations
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute(
        "COMMENT ON TABLE registrations IS 'Paid tournament entries with sign-up snapshots';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS registrations CASCADE;")
