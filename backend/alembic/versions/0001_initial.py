from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        "user",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("username", sa.String(), nullable=False, unique=True),
        sa.Column("avatar_url", sa.String(), nullable=True),
        sa.Column("skill_level", sa.String(), nullable=True),
        sa.Column("club", sa.String(), nullable=True),
        sa.Column("playing_style", sa.String(), nullable=True),
        sa.Column("racket", sa.String(), nullable=True),
        sa.Column("wins", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("losses", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("matches_played", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_table(
        "tournament",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("organizer_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("max_participants", sa.Integer(), nullable=False, server_default="16"),
        sa.Column("start_date", sa.DateTime(), nullable=True),
        sa.Column("end_date", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_table(
        "match",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("player1_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("player2_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.Column("sets", sa.JSON(), nullable=False),
        sa.Column("winner_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=True),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("tournament_id", sa.Integer(), sa.ForeignKey("tournament.id"), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_match_player1_id", "match", ["player1_id"])
    op.create_index("ix_match_player2_id", "match", ["player2_id"])
    op.create_table(
        "ranking",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), nullable=False, unique=True),
        sa.Column("rating", sa.Integer(), nullable=False, server_default="1200"),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_table(
        "follow",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("follower_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("following_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint(
            "follower_id",
            "following_id",
            name="uq_follow_follower_id_following_id",
        ),
    )

def downgrade():
    op.drop_table("follow")
    op.drop_table("ranking")
    op.drop_index("ix_match_player2_id", table_name="match")
    op.drop_index("ix_match_player1_id", table_name="match")
    op.drop_table("match")
    op.drop_table("tournament")
    op.drop_table("user")
