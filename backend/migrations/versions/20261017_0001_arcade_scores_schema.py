from __future__ import annotations
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision = "20261017_0001"
down_revision = None
branch_labels = None
depends_on = None

def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "admins",
        sa.Column("user_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, nullable=False),
        sa.Column("granted_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
    )

    op.create_table(
        "games",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
    )
    op.create_index("ix_games_name", "games", ["name"])

    op.create_table(
        "events",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
    )

    op.create_table(
        "players",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=80), nullable=False),
        sa.Column("instagram", sa.String(length=80), nullable=True),
        sa.Column("group_size", sa.Integer(), server_default="1", nullable=False),
        sa.Column("owner_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("event_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("event_name", sa.String(length=120), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint("group_size >= 1", name="ck_players_group_size_positive"),
    )
    op.create_index("ix_players_name", "players", ["name"], unique=True)
    op.create_index("ix_players_owner_id", "players", ["owner_id"])
    op.create_index("ix_players_event_id", "players", ["event_id"])

    op.create_table(
        "score_submissions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("player_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("player_name", sa.String(length=80), nullable=False),
        sa.Column("player_instagram", sa.String(length=80), nullable=True),
        sa.Column("game_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("game_name", sa.String(length=120), nullable=False),
        sa.Column("event_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("event_name", sa.String(length=120), nullable=True),
        sa.Column("score_value", sa.Integer(), nullable=False),
        sa.Column("image_key", sa.Text(), nullable=True),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("image_mime", sa.String(length=64), nullable=True),
        sa.Column("status", sa.String(length=16), server_default="pending", nullable=False),
        sa.Column("submitted_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("is_suspicious", sa.Boolean(), nullable=True),
        sa.Column("suspicion_reason", sa.Text(), nullable=True),
        sa.Column("fraud_confidence", sa.Integer(), nullable=True),
        sa.Column("suggested_action", sa.String(length=120), nullable=True),
        sa.CheckConstraint("score_value >= 0", name="ck_score_submissions_score_non_negative"),
        sa.CheckConstraint("status IN ('pending','approved','rejected')", name="ck_score_submissions_status"),
    )
    op.create_index("ix_score_submissions_player_id", "score_submissions", ["player_id"])
    op.create_index("ix_score_submissions_game_id", "score_submissions", ["game_id"])
    op.create_index("ix_score_submissions_event_id", "score_submissions", ["event_id"])
    op.create_index("ix_score_submissions_player_game", "score_submissions", ["player_id", "game_id", "submitted_at"])

    op.create_table(
        "offers",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("title", sa.String(length=120), nullable=False),
        sa.Column("description", sa.Text(), server_default="", nullable=False),
        sa.Column("reward_type", sa.String(length=16), nullable=False),
        sa.Column("value", sa.String(length=120), server_default="", nullable=False),
        sa.Column("trigger_type", sa.String(length=16), nullable=False),
        sa.Column("start_time", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("end_time", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("days_of_week", postgresql.JSON(astext_type=sa.Text()), server_default=sa.text("'[]'::json"), nullable=False),
        sa.Column("recurring_start_time", sa.String(length=5), nullable=True),
        sa.Column("recurring_end_time", sa.String(length=5), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
    )

    op.create_table(
        "app_config",
        sa.Column("key", sa.String(length=32), primary_key=True, nullable=False),
        sa.Column("playlist_id", sa.String(length=128), nullable=True),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
    )

def downgrade() -> None:
    op.drop_table("app_config")
    op.drop_table("offers")
    op.drop_index("ix_score_submissions_player_game", table_name="score_submissions")
    op.drop_index("ix_score_submissions_event_id", table_name="score_submissions")
    op.drop_index("ix_score_submissions_game_id", table_name="score_submissions")
    op.drop_index("ix_score_submissions_player_id", table_name="score_submissions")
    op.drop_table("score_submissions")
    op.drop_index("ix_players_event_id", table_name="players")
    op.drop_index("ix_players_owner_id", table_name="players")
    op.drop_index("ix_players_name", table_name="players")
    op.drop_table("players")
    op.drop_table("events")
    op.drop_index("ix_games_name", table_name="games")
    op.drop_table("games")
    op.drop_table("admins")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
