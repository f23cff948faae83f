"""Add reports and blocked_users tables; report_count on posts.

The users/posts/comments tables belong to the content store and are not
created here. report_count is only added when posts already exists, so
upgrading a fresh database creates just the moderation tables.

Revision ID: 5c1e7a90b2d4
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa

revision = "5c1e7a90b2d4"
down_revision = None
branch_labels = None
depends_on = None


def _post_columns() -> set[str]:
    inspector = sa.inspect(op.get_bind())
    if "posts" not in inspector.get_table_names():
        return set()
    return {c["name"] for c in inspector.get_columns("posts")}


def upgrade() -> None:
    op.create_table(
        "reports",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("target_type", sa.String(16), nullable=False),
        sa.Column("target_id", sa.String(128), nullable=False),
        sa.Column("post_id", sa.String(128), nullable=True),
        sa.Column("reported_by", sa.String(128), nullable=False, index=True),
        sa.Column("reason", sa.Text, nullable=False, server_default=""),
        sa.Column("status", sa.String(16), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.BigInteger, nullable=False),
    )
    op.create_index("ix_report_status_time", "reports", ["status", "created_at"])
    op.create_index("ix_report_target", "reports", ["target_type", "target_id"])

    op.create_table(
        "blocked_users",
        sa.Column("blocker_id", sa.String(128), primary_key=True),
        sa.Column("blocked_id", sa.String(128), primary_key=True),
        sa.Column("created_at", sa.BigInteger, nullable=False),
    )

    if _post_columns():
        with op.batch_alter_table("posts") as batch:
            batch.add_column(sa.Column("report_count", sa.Integer, nullable=False, server_default="0"))


def downgrade() -> None:
    if "report_count" in _post_columns():
        with op.batch_alter_table("posts") as batch:
            batch.drop_column("report_count")
    op.drop_table("blocked_users")
    op.drop_index("ix_report_target", table_name="reports")
    op.drop_index("ix_report_status_time", table_name="reports")
    op.drop_table("reports")
