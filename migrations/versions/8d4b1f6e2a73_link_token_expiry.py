"""link token expiry

Revision ID: 8d4b1f6e2a73
Revises: 5c1e7a2d9b40
Create Date: 2026-10-19 14:03:27.551920

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "8d4b1f6e2a73"
down_revision: Union[str, Sequence[str], None] = "5c1e7a2d9b40"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Add expiry for verification links and password reset tokens."""
    with op.batch_alter_table("user_account") as batch_op:
        batch_op.add_column(
            sa.Column("email_verification_expires", sa.DateTime(timezone=True), nullable=True)
        )
        batch_op.add_column(sa.Column("reset_password_token", sa.Text(), nullable=True))
        batch_op.add_column(
            sa.Column("reset_password_expires", sa.DateTime(timezone=True), nullable=True)
        )


def downgrade() -> None:
    """Drop link token expiry columns."""
    with op.batch_alter_table("user_account") as batch_op:
        batch_op.drop_column("reset_password_expires")
        batch_op.drop_column("reset_password_token")
        batch_op.drop_column("email_verification_expires")
