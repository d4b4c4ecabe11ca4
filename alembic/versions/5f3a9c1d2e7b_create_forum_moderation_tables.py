"""Create forum and moderation tables

Revision ID: 5f3a9c1d2e7b
Revises:
Create Date: 2026-10-19 09:12:44.318207

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5f3a9c1d2e7b"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("username", sa.String(), nullable=False),
        sa.Column("hashed_password", sa.String(), nullable=False),
        sa.Column(
            "role",
            sa.Enum("ADMIN", "USER", name="user_role_enum"),
            nullable=False,
        ),
        sa.Column("forum_warnings", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_banned", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("ban_expiry", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.CheckConstraint("forum_warnings >= 0", name="ck_users_forum_warnings"),
        sa.CheckConstraint(
            "is_banned OR ban_expiry IS NULL", name="ck_users_ban_expiry_requires_ban"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    # Posts and replies
    for table, owner in (("forum_posts", None), ("forum_replies", "forum_posts")):
        columns = [
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("author", sa.String(), nullable=False),
            sa.Column("content", sa.Text(), nullable=False),
            sa.Column("timestamp", sa.String(), nullable=True),
            sa.Column(
                "created_at",
                sa.TIMESTAMP(timezone=True),
                nullable=False,
                server_default=sa.text("CURRENT_TIMESTAMP"),
            ),
            sa.Column("likes", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("is_moderated", sa.Boolean(), nullable=False, server_default="0"),
            sa.Column("moderation_reason", sa.String(), nullable=True),
            sa.ForeignKeyConstraint(
                ["author"],
                ["users.username"],
                ondelete="CASCADE",
                onupdate="CASCADE",
            ),
            sa.PrimaryKeyConstraint("id"),
        ]
        if owner:
            columns.insert(1, sa.Column("post_id", sa.Integer(), nullable=False))
            columns.append(
                sa.ForeignKeyConstraint(["post_id"], [f"{owner}.id"], ondelete="CASCADE")
            )
        op.create_table(table, *columns)
        op.create_index(f"ix_{table}_id", table, ["id"])
        op.create_index(f"ix_{table}_author", table, ["author"])
    op.create_index("ix_forum_replies_post_id", "forum_replies", ["post_id"])

    # One like per (target, username)
    op.create_table(
        "forum_post_likes",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("post_id", sa.Integer(), nullable=False),
        sa.Column("username", sa.String(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.ForeignKeyConstraint(["post_id"], ["forum_posts.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("post_id", "username", name="uq_forum_post_likes_user"),
    )
    op.create_table(
        "forum_reply_likes",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("reply_id", sa.Integer(), nullable=False),
        sa.Column("username", sa.String(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.ForeignKeyConstraint(["reply_id"], ["forum_replies.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("reply_id", "username", name="uq_forum_reply_likes_user"),
    )

    op.create_table(
        "moderation_audit_logs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("admin_username", sa.String(), nullable=False),
        sa.Column("action", sa.String(), nullable=False),
        sa.Column("target_username", sa.String(), nullable=False),
        sa.Column("details", sa.JSON(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_moderation_audit_logs_id", "moderation_audit_logs", ["id"]
    )
    op.create_index(
        "ix_moderation_audit_logs_admin_username",
        "moderation_audit_logs",
        ["admin_username"],
    )
    op.create_index(
        "ix_moderation_audit_logs_target_username",
        "moderation_audit_logs",
        ["target_username"],
    )


def downgrade() -> None:
    op.drop_table("moderation_audit_logs")
    op.drop_table("forum_reply_likes")
    op.drop_table("forum_post_likes")
    op.drop_table("forum_replies")
    op.drop_table("forum_posts")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    sa.Enum(name="user_role_enum").drop(op.get_bind(), checkfirst=True)
