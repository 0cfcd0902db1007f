"""004: create asset_totals table and seed the default catalog

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
        CREATE TABLE asset_totals (
            asset_id         VARCHAR(64)  PRIMARY KEY,
            total_invested   BIGINT       NOT NULL DEFAULT 0,
            units_purchased  BIGINT       NOT NULL DEFAULT 0,
            updated_at       TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_asset_totals_invested_gte_0 CHECK (total_invested >= 0),
            CONSTRAINT ck_asset_totals_units_gte_0    CHECK (units_purchased >= 0)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_asset_totals_updated_at
            BEFORE UPDATE ON asset_totals
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("""
        INSERT INTO asset_totals (asset_id) VALUES
            ('DAPP'), ('TOTO_VAULT'), ('CIFCI_STABLE'),
            ('TYPOGRAM'), ('APPLE'), ('BITCOIN')
        ON CONFLICT (asset_id) DO NOTHING;
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS asset_totals CASCADE;")
