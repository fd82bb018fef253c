from alembic import op
import sqlalchemy as sa

revision = "0002_training_and_reviews"
down_revision = "0001_initial"
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        "training_session",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("student_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("trainer_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_training_session_student_id", "training_session", ["student_id"])
    op.create_index("ix_training_session_trainer_id", "training_session", ["trainer_id"])
    op.create_table(
        "review",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("reviewer_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("reviewed_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("match_id", sa.Integer(), sa.ForeignKey("match.id"), nullable=True),
        sa.Column("training_id", sa.Integer(), sa.ForeignKey("training_session.id"), nullable=True),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("is_anonymous", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_review_reviewed_id", "review", ["reviewed_id"])

def downgrade():
    op.drop_index("ix_review_reviewed_id", table_name="review")
    op.drop_table("review")
    op.drop_index("ix_training_session_trainer_id", table_name="training_session")
    op.drop_index("ix_training_session_student_id", table_name="training_session")
    op.drop_table("training_session")
