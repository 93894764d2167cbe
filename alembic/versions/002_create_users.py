"""002: create users table

Revision ID: 002
Revises: 001
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE users (
            id              VARCHAR(64)     PRIMARY KEY DEFAULT gen_random_uuid()::text,
            fullname        VARCHAR(128)    NOT NULL,
            email           VARCHAR(255)    NOT NULL,
            mobile          VARCHAR(32)     NOT NULL DEFAULT '',
            age             INTEGER,
            state           VARCHAR(64)     NOT NULL DEFAULT '',
            role            VARCHAR(16)     NOT NULL DEFAULT 'user',
            is_active       BOOLEAN         NOT NULL DEFAULT TRUE,
            deposit_balance BIGINT          NOT NULL DEFAULT 0,
            winning_balance BIGINT          NOT NULL DEFAULT 0,
            version         BIGINT          NOT NULL DEFAULT 0,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_users_email               UNIQUE (email),
            CONSTRAINT ck_users_role                CHECK (role IN ('user', 'admin')),
            CONSTRAINT ck_users_deposit_balance_gte_0 CHECK (deposit_balance >= 0),
            CONSTRAINT ck_users_winning_balance_gte_0 CHECK (winning_balance >= 0)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_users_updated_at
            BEFORE UPDATE ON users
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute(
        "COMMENT ON TABLE users IS 'Players and admins; balances embedded, all amounts in cents';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS users CASCADE;")
