"""002: create accounts table

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
        CREATE TABLE accounts (
            id              VARCHAR(64)  PRIMARY KEY,
            username        VARCHAR(128),
            balance         BIGINT       NOT NULL DEFAULT 0,
            assets          JSONB        NOT NULL DEFAULT '{}'::jsonb,
            last_reward_at  BIGINT       NOT NULL DEFAULT 0,
            referred_by     VARCHAR(64),
            referral_count  INTEGER      NOT NULL DEFAULT 0,
            subscribed      BOOLEAN      NOT NULL DEFAULT FALSE,
            created_at      TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_accounts_balance_gte_0         CHECK (balance >= 0),
            CONSTRAINT ck_accounts_referral_count_gte_0  CHECK (referral_count >= 0),
            CONSTRAINT ck_accounts_no_self_referral      CHECK (referred_by IS NULL OR referred_by <> id)
        );
    """)
    op.execute("CREATE INDEX idx_accounts_balance_desc ON accounts (balance DESC, id);")
    op.execute("""
        CREATE TRIGGER trg_accounts_updated_at
            BEFORE UPDATE ON accounts
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute(
        "COMMENT ON TABLE accounts IS "
        "'Player economy state: balance in coins, last_reward_at in epoch ms';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS accounts CASCADE;")
