"""Initial schema — all 7 Desire tables.

Revision ID: 001_initial
Revises:
Create Date: 2026-01-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _user_fk(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(
        name,
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=nullable,
    )


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        server_default=sa.func.now(),
        nullable=False,
    )


def upgrade() -> None:
    # ── 1. users ────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(100), unique=True, index=True, nullable=False),
        sa.Column("username", sa.String(50), unique=True, nullable=False),
        sa.Column("first_name", sa.String(50), nullable=False),
        sa.Column("last_name", sa.String(50), nullable=False),
        sa.Column("age", sa.Integer, nullable=True),
        sa.Column("gender", sa.String(10), nullable=True, comment="male / female / other"),
        sa.Column("looking_for", sa.String(10), nullable=True, comment="male / female / both"),
        sa.Column("bio", sa.Text, nullable=True),
        sa.Column("country", sa.String(100), nullable=True),
        sa.Column("state", sa.String(100), nullable=True),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column(
            "interests",
            postgresql.JSONB,
            nullable=True,
            comment="Array of interest tags",
        ),
        sa.Column(
            "photos",
            postgresql.JSONB,
            nullable=True,
            comment="Array of photo URLs",
        ),
        sa.Column("profile_image", sa.String(255), nullable=True),
        sa.Column(
            "profile_visibility",
            sa.String(10),
            server_default="public",
            nullable=False,
            comment="public / matches / private",
        ),
        sa.Column(
            "is_active",
            sa.Boolean,
            server_default="true",
            nullable=False,
        ),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "profile_visibility IN ('public', 'matches', 'private')",
            name="ck_users_profile_visibility",
        ),
    )

    # ── 2. likes (directed) ─────────────────────────────────────────
    op.create_table(
        "likes",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        _user_fk("liker_id"),
        _user_fk("liked_id"),
        _created_at(),
        sa.UniqueConstraint("liker_id", "liked_id", name="uq_like_pair"),
        sa.CheckConstraint("liker_id <> liked_id", name="ck_like_not_self"),
    )
    op.create_index("ix_likes_liked_id", "likes", ["liked_id"])

    # ── 3. matches (canonical unordered pair) ───────────────────────
    op.create_table(
        "matches",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        _user_fk("user1_id"),
        _user_fk("user2_id"),
        _created_at(),
        sa.UniqueConstraint("user1_id", "user2_id", name="uq_match_pair"),
        sa.CheckConstraint("user1_id < user2_id", name="ck_match_canonical_order"),
    )
    op.create_index("ix_matches_user2_id", "matches", ["user2_id"])

    # ── 4. notifications ────────────────────────────────────────────
    op.create_table(
        "notifications",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        _user_fk("user_id"),
        sa.Column("kind", sa.String(10), nullable=False, comment="like / match / unmatch / message"),
        _user_fk("from_user_id", nullable=True),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("is_read", sa.Boolean, server_default="false", nullable=False),
        _created_at(),
    )
    op.create_index(
        "ix_notifications_user_created",
        "notifications",
        ["user_id", "created_at"],
    )

    # ── 5. conversations ────────────────────────────────────────────
    op.create_table(
        "conversations",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        _user_fk("user1_id"),
        _user_fk("user2_id"),
        sa.Column(
            "last_message_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        _created_at(),
        sa.UniqueConstraint("user1_id", "user2_id", name="uq_conversation_pair"),
        sa.CheckConstraint("user1_id < user2_id", name="ck_conversation_canonical_order"),
    )

    # ── 6. messages ─────────────────────────────────────────────────
    op.create_table(
        "messages",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "conversation_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("conversations.id", ondelete="CASCADE"),
            nullable=False,
        ),
        _user_fk("sender_id"),
        sa.Column("body", sa.Text, nullable=False),
        sa.Column("is_read", sa.Boolean, server_default="false", nullable=False),
        _created_at(),
    )
    op.create_index(
        "ix_messages_conversation_created",
        "messages",
        ["conversation_id", "created_at"],
    )

    # ── 7. favorites ────────────────────────────────────────────────
    op.create_table(
        "favorites",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        _user_fk("user_id"),
        _user_fk("favorite_user_id"),
        _created_at(),
        sa.UniqueConstraint("user_id", "favorite_user_id", name="uq_favorite_pair"),
    )


def downgrade() -> None:
    op.drop_table("favorites")

    op.drop_index("ix_messages_conversation_created", table_name="messages")
    op.drop_table("messages")
    op.drop_table("conversations")

    op.drop_index("ix_notifications_user_created", table_name="notifications")
    op.drop_table("notifications")

    op.drop_index("ix_matches_user2_id", table_name="matches")
    op.drop_table("matches")

    op.drop_index("ix_likes_liked_id", table_name="likes")
    op.drop_table("likes")

    op.drop_table("users")
