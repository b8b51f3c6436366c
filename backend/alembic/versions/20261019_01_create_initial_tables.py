"""create initial tables

Revision ID: 20261019_01
Revises: 
Create Date: 2026-10-19 00:00:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261019_01"
down_revision = None
branch_labels = None
depends_on = None


PROFICIENCY = sa.Enum("beginner", "intermediate", "advanced", "fluent", name="proficiency")
REACTION_TYPE = sa.Enum("like", "heart", "laugh", "clap", "confused", "sad", name="reaction_type")
VOICE_ROOM_TOPIC = sa.Enum(
    "casual",
    "formal",
    "practice",
    "learning",
    "teaching",
    "discussion",
    "debate",
    "other",
    name="voice_room_topic",
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            onupdate=sa.func.now(),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "languages",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("code", sa.String(length=3), nullable=False, unique=True),
        sa.Column("name", sa.String(length=64), nullable=False, unique=True),
        sa.Column("native_name", sa.String(length=64), nullable=False),
        sa.Column("flag", sa.String(length=16), nullable=False, server_default=""),
        sa.Column("popularity", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        mysql_charset="utf8mb4",
    )

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("username", sa.String(length=20), nullable=False, unique=True),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column(
            "profile_picture",
            sa.String(length=512),
            nullable=False,
            server_default="default-avatar.png",
        ),
        sa.Column("avatar_path", sa.String(length=512), nullable=True),
        sa.Column("avatar_content_type", sa.String(length=128), nullable=True),
        sa.Column("avatar_updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("interests", sa.JSON(), nullable=False),
        sa.Column("location_country", sa.String(length=64), nullable=True),
        sa.Column("location_city", sa.String(length=64), nullable=True),
        sa.Column("is_online", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("last_active", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        mysql_charset="utf8mb4",
    )

    op.create_table(
        "user_native_languages",
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        sa.Column(
            "language_id",
            sa.Integer(),
            sa.ForeignKey("languages.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )

    op.create_table(
        "user_connections",
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        sa.Column(
            "connection_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )

    op.create_table(
        "user_learning_languages",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "language_id",
            sa.Integer(),
            sa.ForeignKey("languages.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("proficiency", PROFICIENCY, nullable=False, server_default="beginner"),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.UniqueConstraint("user_id", "language_id", name="uq_user_learning_language"),
    )

    op.create_table(
        "conversations",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("direct_key", sa.String(length=64), nullable=True, unique=True),
        sa.Column("is_group", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("name", sa.String(length=128), nullable=True),
        sa.Column(
            "group_admin_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "main_language_id",
            sa.Integer(),
            sa.ForeignKey("languages.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("last_message_id", sa.Integer(), nullable=True),
        *_timestamps(),
        mysql_charset="utf8mb4",
    )

    op.create_table(
        "conversation_participants",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column(
            "conversation_id",
            sa.Integer(),
            sa.ForeignKey("conversations.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("unread_count", sa.Integer(), nullable=False, server_default="0"),
        sa.UniqueConstraint("conversation_id", "user_id", name="uq_conversation_participant"),
    )

    op.create_table(
        "messages",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column(
            "conversation_id",
            sa.Integer(),
            sa.ForeignKey("conversations.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("sender_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column(
            "original_language_id",
            sa.Integer(),
            sa.ForeignKey("languages.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("attachments", sa.JSON(), nullable=False),
        *_timestamps(),
        mysql_charset="utf8mb4",
    )
    op.create_index("ix_messages_conversation", "messages", ["conversation_id", "created_at"])
    op.create_foreign_key(
        "fk_conversation_last_message",
        "conversations",
        "messages",
        ["last_message_id"],
        ["id"],
        ondelete="SET NULL",
    )

    op.create_table(
        "message_translations",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("message_id", sa.Integer(), sa.ForeignKey("messages.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "language_id",
            sa.Integer(),
            sa.ForeignKey("languages.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("corrected", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "corrected_by_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("corrected_content", sa.Text(), nullable=True),
        sa.UniqueConstraint("message_id", "language_id", name="uq_message_translation_language"),
    )

    op.create_table(
        "message_reactions",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("message_id", sa.Integer(), sa.ForeignKey("messages.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("type", REACTION_TYPE, nullable=False),
        sa.UniqueConstraint("message_id", "user_id", "type", name="uq_message_reaction"),
    )

    op.create_table(
        "voice_rooms",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("description", sa.String(length=200), nullable=True),
        sa.Column("host_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("is_private", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("password", sa.String(length=255), nullable=True),
        sa.Column("max_participants", sa.Integer(), nullable=False, server_default="10"),
        sa.Column("topic", VOICE_ROOM_TOPIC, nullable=False, server_default="casual"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "start_time",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        mysql_charset="utf8mb4",
    )
    op.create_index("ix_voice_rooms_host_id", "voice_rooms", ["host_id"])
    op.create_index("ix_voice_rooms_is_active", "voice_rooms", ["is_active"])

    op.create_table(
        "voice_room_languages",
        sa.Column(
            "voice_room_id",
            sa.Integer(),
            sa.ForeignKey("voice_rooms.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "language_id",
            sa.Integer(),
            sa.ForeignKey("languages.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )

    op.create_table(
        "voice_room_participants",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("room_id", sa.Integer(), sa.ForeignKey("voice_rooms.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("is_muted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_deafened", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "joined_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.UniqueConstraint("room_id", "user_id", name="uq_voice_room_participant"),
    )

    op.create_table(
        "voice_room_recordings",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("room_id", sa.Integer(), sa.ForeignKey("voice_rooms.id", ondelete="CASCADE"), nullable=False),
        sa.Column("url", sa.String(length=512), nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("size", sa.Integer(), nullable=True),
    )


def downgrade() -> None:
    op.drop_table("voice_room_recordings")
    op.drop_table("voice_room_participants")
    op.drop_table("voice_room_languages")
    op.drop_index("ix_voice_rooms_is_active", table_name="voice_rooms")
    op.drop_index("ix_voice_rooms_host_id", table_name="voice_rooms")
    op.drop_table("voice_rooms")
    op.drop_table("message_reactions")
    op.drop_table("message_translations")
    op.drop_constraint("fk_conversation_last_message", "conversations", type_="foreignkey")
    op.drop_index("ix_messages_conversation", table_name="messages")
    op.drop_table("messages")
    op.drop_table("conversation_participants")
    op.drop_table("conversations")
    op.drop_table("user_learning_languages")
    op.drop_table("user_connections")
    op.drop_table("user_native_languages")
    op.drop_table("users")
    op.drop_table("languages")

    bind = op.get_bind()
    VOICE_ROOM_TOPIC.drop(bind, checkfirst=True)
    REACTION_TYPE.drop(bind, checkfirst=True)
    PROFICIENCY.drop(bind, checkfirst=True)
