"""003: create tournaments table

Revision ID: 003
Revises: 002
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE tournaments (
            id                  VARCHAR(64)     PRIMARY KEY DEFAULT gen_random_uuid()::text,
            code                VARCHAR(64)     NOT NULL,
            map                 VARCHAR(64)     NOT NULL,
            mode                VARCHAR(20)     NOT NULL,
            team_size           VARCHAR(8),
            entry_fee           BIGINT          NOT NULL,
            winning_fee         BIGINT          NOT NULL,
            max_slots           INTEGER         NOT NULL,
            start_time          TIMESTAMPTZ     NOT NULL,
            status              VARCHAR(16)     NOT NULL DEFAULT 'upcoming',
            registered_players  INTEGER         NOT NULL DEFAULT 0,
            registered_user_ids TEXT[]          NOT NULL DEFAULT '{}',
            room_id             VARCHAR(64)     NOT NULL DEFAULT '',
            room_password       VARCHAR(64)     NOT NULL DEFAULT '',
            custom_url          VARCHAR(512)    NOT NULL DEFAULT '',
            room_notes          TEXT            NOT NULL DEFAULT '',
            prizes              JSONB           NOT NULL
                                DEFAULT '{"top5": [], "top10": [], "per_kill": 0}',
            version             BIGINT          NOT NULL DEFAULT 0,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_tournaments_code UNIQUE (code),
            CONSTRAINT ck_tournaments_mode CHECK (
                mode IN ('clash_squad', 'battle_royal', 'lone_wolf')
            ),
            CONSTRAINT ck_tournaments_team_size CHECK (
                team_size IS NULL OR team_size IN ('1vs1', '2v2', '4v4', '6v6')
            ),
            CONSTRAINT ck_tournaments_team_size_required CHECK (
                mode NOT IN ('clash_squad', 'lone_wolf') OR team_size IS NOT NULL
            ),
            CONSTRAINT ck_tournaments_battle_royal_slots CHECK (
                mode <> 'battle_royal' OR max_slots = 48
            ),
            CONSTRAINT ck_tournaments_status CHECK (
                status IN ('upcoming', 'active', 'completed')
            ),
            CONSTRAINT ck_tournaments_fees_gte_0 CHECK (entry_fee >= 0 AND winning_fee >= 0),
            CONSTRAINT ck_tournaments_max_slots_gte_1 CHECK (max_slots >= 1),
            CONSTRAINT ck_tournaments_occupancy CHECK (
                registered_players = COALESCE(cardinality(registered_user_ids), 0)
                AND registered_players <= max_slots
            ),
            CONSTRAINT ck_tournaments_custom_url CHECK (
                custom_url = '' OR custom_url ~ '^https?://[^[:space:]]+$'
            )
        );
    """)
    op.execute("CREATE INDEX idx_tournaments_status_start ON tournaments (status, start_time);")
    op.execute("""
        CREATE TRIGGER trg_tournaments_updated_at
            BEFORE UPDATE ON tournaments
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute(
        "COMMENT ON TABLE tournaments IS 'Tournament definitions and live occupancy, fees in cents';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS tournaments CASCADE;")
