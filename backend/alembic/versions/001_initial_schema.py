"""initial schema

Revision ID: 5d0c2a91e7b4
Revises:
Create Date: 2026-10-17
"""

from alembic import op
import sqlalchemy as sa

revision = "5d0c2a91e7b4"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # --- profiles ---
    op.create_table(
        "profiles",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("github_user_name", sa.String, unique=True, nullable=False),
        sa.Column("slack_email", sa.String, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("deleted_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_profiles_slack_email", "profiles", ["slack_email"])


def downgrade() -> None:
    op.drop_index("ix_profiles_slack_email", table_name="profiles")
    op.drop_table("profiles")
