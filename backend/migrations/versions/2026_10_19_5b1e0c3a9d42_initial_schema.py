"""initial schema

Revision ID: 5b1e0c3a9d42
Revises:
Create Date: 2026-10-19 10:12:44.318201

"""

from alembic import op
import sqlalchemy as sa
import sqlmodel

from models import UtcAwareDateTime

# revision identifiers, used by Alembic.
revision = "5b1e0c3a9d42"
down_revision = None
branch_labels = None
depends_on = None

STATUS = sa.Enum("pending", "approved", "rejected", name="requeststatus")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("username", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("email", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("password_hash", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("reset_token", sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column("reset_token_expires", UtcAwareDateTime(), nullable=True),
        sa.Column("created_at", UtcAwareDateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("users", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_users_username"), ["username"], unique=True)
        batch_op.create_index(batch_op.f("ix_users_email"), ["email"], unique=True)
        batch_op.create_index(
            batch_op.f("ix_users_reset_token"), ["reset_token"], unique=False
        )

    op.create_table(
        "lists",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("description", sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("is_public", sa.Boolean(), nullable=False),
        sa.Column("created_at", UtcAwareDateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("lists", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_lists_user_id"), ["user_id"], unique=False)
        batch_op.create_index(
            batch_op.f("ix_lists_is_public"), ["is_public"], unique=False
        )

    op.create_table(
        "media_items",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("list_id", sa.Integer(), nullable=False),
        sa.Column(
            "media_type",
            sa.Enum("movie", "book", "album", name="mediatype"),
            nullable=False,
        ),
        sa.Column("external_id", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("title", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("year", sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column("poster_url", sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column("additional_data", sa.JSON(), nullable=True),
        sa.Column("notes", sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column("added_by", sa.Integer(), nullable=False),
        sa.Column("added_at", UtcAwareDateTime(), nullable=False),
        sa.CheckConstraint(
            "media_type IN ('movie', 'book', 'album')", name="ck_media_type"
        ),
        sa.ForeignKeyConstraint(["list_id"], ["lists.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["added_by"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("list_id", "external_id", name="uq_media_item_external"),
    )
    with op.batch_alter_table("media_items", schema=None) as batch_op:
        batch_op.create_index(
            batch_op.f("ix_media_items_list_id"), ["list_id"], unique=False
        )
        batch_op.create_index(
            batch_op.f("ix_media_items_added_by"), ["added_by"], unique=False
        )

    op.create_table(
        "ratings",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("media_item_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("created_at", UtcAwareDateTime(), nullable=False),
        sa.Column("updated_at", UtcAwareDateTime(), nullable=False),
        sa.CheckConstraint("rating >= 1 AND rating <= 5", name="ck_rating_range"),
        sa.ForeignKeyConstraint(
            ["media_item_id"], ["media_items.id"], ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("media_item_id", "user_id", name="uq_rating_item_user"),
    )
    with op.batch_alter_table("ratings", schema=None) as batch_op:
        batch_op.create_index(
            batch_op.f("ix_ratings_media_item_id"), ["media_item_id"], unique=False
        )
        batch_op.create_index(batch_op.f("ix_ratings_user_id"), ["user_id"], unique=False)

    op.create_table(
        "watched_with",
        sa.Column("media_item_id", sa.Integer(), nullable=False),
        sa.Column("friend_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(
            ["media_item_id"], ["media_items.id"], ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(["friend_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("media_item_id", "friend_id"),
    )

    op.create_table(
        "collaborations",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("list_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("status", STATUS, nullable=False),
        sa.Column("requested_at", UtcAwareDateTime(), nullable=False),
        sa.Column("responded_at", UtcAwareDateTime(), nullable=True),
        sa.ForeignKeyConstraint(["list_id"], ["lists.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("list_id", "user_id", name="uq_collaboration_list_user"),
    )
    with op.batch_alter_table("collaborations", schema=None) as batch_op:
        batch_op.create_index(
            batch_op.f("ix_collaborations_list_id"), ["list_id"], unique=False
        )
        batch_op.create_index(
            batch_op.f("ix_collaborations_user_id"), ["user_id"], unique=False
        )
        batch_op.create_index(
            batch_op.f("ix_collaborations_status"), ["status"], unique=False
        )

    op.create_table(
        "friends",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id_1", sa.Integer(), nullable=False),
        sa.Column("user_id_2", sa.Integer(), nullable=False),
        sa.Column("created_at", UtcAwareDateTime(), nullable=False),
        sa.CheckConstraint("user_id_1 < user_id_2", name="ck_friend_order"),
        sa.ForeignKeyConstraint(["user_id_1"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id_2"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id_1", "user_id_2", name="uq_friend_pair"),
    )
    with op.batch_alter_table("friends", schema=None) as batch_op:
        batch_op.create_index(
            batch_op.f("ix_friends_user_id_1"), ["user_id_1"], unique=False
        )
        batch_op.create_index(
            batch_op.f("ix_friends_user_id_2"), ["user_id_2"], unique=False
        )

    op.create_table(
        "friend_requests",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("from_user_id", sa.Integer(), nullable=False),
        sa.Column("to_user_id", sa.Integer(), nullable=False),
        sa.Column("pair_low_id", sa.Integer(), nullable=False),
        sa.Column("pair_high_id", sa.Integer(), nullable=False),
        sa.Column("status", STATUS, nullable=False),
        sa.Column("requested_at", UtcAwareDateTime(), nullable=False),
        sa.Column("responded_at", UtcAwareDateTime(), nullable=True),
        sa.CheckConstraint(
            "from_user_id <> to_user_id", name="ck_friend_request_self"
        ),
        sa.ForeignKeyConstraint(["from_user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["to_user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("friend_requests", schema=None) as batch_op:
        batch_op.create_index(
            batch_op.f("ix_friend_requests_from_user_id"),
            ["from_user_id"],
            unique=False,
        )
        batch_op.create_index(
            batch_op.f("ix_friend_requests_to_user_id"), ["to_user_id"], unique=False
        )
        batch_op.create_index(
            batch_op.f("ix_friend_requests_status"), ["status"], unique=False
        )
        batch_op.create_index(
            "uq_pending_friend_request",
            ["pair_low_id", "pair_high_id"],
            unique=True,
            sqlite_where=sa.text("status = 'pending'"),
            postgresql_where=sa.text("status = 'pending'"),
        )


def downgrade() -> None:
    op.drop_table("friend_requests")
    op.drop_table("friends")
    op.drop_table("collaborations")
    op.drop_table("watched_with")
    op.drop_table("ratings")
    op.drop_table("media_items")
    op.drop_table("lists")
    op.drop_table("users")
