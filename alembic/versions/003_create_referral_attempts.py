"""003: create referral_attempts table

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
        CREATE TABLE referral_attempts (
            id                  BIGSERIAL    PRIMARY KEY,
            referrer_id         VARCHAR(64)  NOT NULL,
            referred_id         VARCHAR(64)  NOT NULL,
            referred_username   VARCHAR(128),
            status              VARCHAR(30)  NOT NULL DEFAULT 'PENDING',
            details             JSONB,
            created_at          TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_referral_attempts_pair UNIQUE (referrer_id, referred_id),
            CONSTRAINT ck_referral_attempts_status CHECK (
                status IN (
                    'PENDING', 'SUCCESS',
                    'inviter_not_found', 'self_referral', 'already_referred'
                )
            )
        );
    """)
    op.execute("CREATE INDEX idx_referral_attempts_referred ON referral_attempts (referred_id);")
    op.execute("""
        CREATE TRIGGER trg_referral_attempts_updated_at
            BEFORE UPDATE ON referral_attempts
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute(
        "COMMENT ON TABLE referral_attempts IS "
        "'Referral idempotency ledger: one row per (referrer, referred) pair';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS referral_attempts CASCADE;")
