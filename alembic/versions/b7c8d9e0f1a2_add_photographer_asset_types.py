"""add photographer asset types

Revision ID: b7c8d9e0f1a2
Revises: a1b2c3d4e5f6
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op

revision: str = "b7c8d9e0f1a2"
down_revision: Union[str, None] = "a1b2c3d4e5f6"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("ALTER TYPE assettype ADD VALUE IF NOT EXISTS 'MODEL_SHOT'")
    op.execute("ALTER TYPE assettype ADD VALUE IF NOT EXISTS 'PRODUCT_IMAGE'")


def downgrade() -> None:
    pass
