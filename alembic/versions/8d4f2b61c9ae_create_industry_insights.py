"""create industry insights

Revision ID: 8d4f2b61c9ae
Revises: 3c1e9a7b5d20
Create Date: 2026-09-02 10:31:05.092114

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8d4f2b61c9ae'
down_revision: Union[str, Sequence[str], None] = '3c1e9a7b5d20'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "industry_insights",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("industry", sa.String(length=255), nullable=False),
        sa.Column("salary_ranges", sa.JSON(), nullable=False),
        sa.Column("growth_rate", sa.Float(), nullable=False),
        sa.Column("demand_level", sa.String(length=32), nullable=False),
        sa.Column("top_skills", sa.JSON(), nullable=False),
        sa.Column("market_outlook", sa.String(length=32), nullable=False),
        sa.Column("key_trends", sa.JSON(), nullable=False),
        sa.Column("recommended_skills", sa.JSON(), nullable=False),
        sa.Column("last_updated", sa.DateTime(timezone=True), nullable=False),
        sa.Column("next_update", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("industry", name="uq_industry_insights_industry"),
    )
    op.create_index("ix_industry_insights_next_update", "industry_insights", ["next_update"])


def downgrade() -> None:
    op.drop_index("ix_industry_insights_next_update", table_name="industry_insights")
    op.drop_table("industry_insights")
