"""Keep role permissions in the order they were assigned

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-20
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "0002"
down_revision: Union[str, None] = "0001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Existing rows are numbered by the identity as the column is added.
    op.add_column(
        "role_permissions",
        sa.Column("position", sa.BigInteger(), sa.Identity(), nullable=False),
        schema="identity",
    )


def downgrade() -> None:
    op.drop_column("role_permissions", "position", schema="identity")
