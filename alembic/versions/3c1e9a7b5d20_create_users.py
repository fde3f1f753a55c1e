"""create users

Revision ID: 3c1e9a7b5d20
Revises:
Create Date: 2026-09-02 10:14:22.418307

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c1e9a7b5d20'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("external_user_id", sa.String(length=255), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=True),
        sa.Column("image_url", sa.String(length=1024), nullable=True),
        sa.Column("industry", sa.String(length=255), nullable=True),
        sa.Column("experience", sa.Integer(), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True, server_default=sa.text("''")),
        sa.Column("skills", sa.JSON(), nullable=False, server_default=sa.text("'[]'")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.UniqueConstraint("email", name="uq_users_email"),
        sa.UniqueConstraint("external_user_id", name="uq_users_external_user_id"),
    )
    op.create_index("ix_users_industry", "users", ["industry"])


def downgrade() -> None:
    op.drop_index("ix_users_industry", table_name="users")
    op.drop_table("users")
