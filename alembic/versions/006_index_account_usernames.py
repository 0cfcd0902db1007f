"""006: case-insensitive username lookup for referrals by inviter name

Revision ID: 006
Revises: 005
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute(
        "CREATE INDEX idx_accounts_username_lower ON accounts (lower(username), created_at, id);"
    )


def downgrade() -> None:
    op.execute("DROP INDEX IF EXISTS idx_accounts_username_lower;")
