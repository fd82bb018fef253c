from sqlalchemy import (
    Column,
    String,
    DateTime,
    ForeignKey,
    JSON,
    Integer,
    Boolean,
    Text,
    Index,
    UniqueConstraint,
    false,
)
from sqlalchemy.sql import func
from .config import DEFAULT_RATING
from .db import Base
from .time_utils import utcnow


class User(Base):
    __tablename__ = "user"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    username = Column(String, nullable=False, unique=True)
    avatar_url = Column(String, nullable=True)
    skill_level = Column(String, nullable=True, default="3.0")
    club = Column(String, nullable=True)
    playing_style = Column(String, nullable=True)
    racket = Column(String, nullable=True)
    # Only written by the match repository when a match is created.
    wins = Column(Integer, nullable=False, default=0, server_default="0")
    losses = Column(Integer, nullable=False, default=0, server_default="0")
    matches_played = Column(
        Integer, nullable=False, default=0, server_default="0"
    )
    created_at = Column(
        DateTime, nullable=False, default=utcnow, server_default=func.now()
    )


class Tournament(Base):
    __tablename__ = "tournament"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False)  # "singles" | "doubles"
    status = Column(String, nullable=False)  # "upcoming" | "ongoing" | "completed"
    organizer_id = Column(Integer, ForeignKey("user.id"), nullable=False)
    max_participants = Column(Integer, nullable=False, default=16)
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)
    created_at = Column(
        DateTime, nullable=False, default=utcnow, server_default=func.now()
    )


class Match(Base):
    __tablename__ = "match"
    id = Column(Integer, primary_key=True, autoincrement=True)
    player1_id = Column(Integer, ForeignKey("user.id"), nullable=False)
    player2_id = Column(Integer, ForeignKey("user.id"), nullable=False)
    date = Column(DateTime, nullable=False)
    # list of {"p1": int, "p2": int}; legacy rows may hold "6-4" strings
    sets = Column(JSON, nullable=False)
    winner_id = Column(Integer, ForeignKey("user.id"), nullable=True)
    type = Column(String, nullable=False)  # "casual" | "tournament" | "rated"
    tournament_id = Column(Integer, ForeignKey("tournament.id"), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False)

    __table_args__ = (
        Index("ix_match_player1_id", "player1_id"),
        Index("ix_match_player2_id", "player2_id"),
    )


class Ranking(Base):
    __tablename__ = "ranking"
    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False, unique=True)
    rating = Column(
        Integer, nullable=False, default=DEFAULT_RATING, server_default=str(DEFAULT_RATING)
    )
    updated_at = Column(
        DateTime, nullable=False, default=utcnow, server_default=func.now()
    )


class Follow(Base):
    __tablename__ = "follow"
    id = Column(Integer, primary_key=True, autoincrement=True)
    follower_id = Column(Integer, ForeignKey("user.id"), nullable=False)
    following_id = Column(Integer, ForeignKey("user.id"), nullable=False)
    created_at = Column(
        DateTime, nullable=False, default=utcnow, server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint(
            "follower_id",
            "following_id",
            name="uq_follow_follower_id_following_id",
        ),
    )


class TrainingSession(Base):
    __tablename__ = "training_session"
    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("user.id"), nullable=False)
    trainer_id = Column(Integer, ForeignKey("user.id"), nullable=False)
    date = Column(DateTime, nullable=False)
    duration = Column(Integer, nullable=False)  # minutes
    notes = Column(Text, nullable=True)
    status = Column(String, nullable=False, default="pending", server_default="pending")
    created_at = Column(
        DateTime, nullable=False, default=utcnow, server_default=func.now()
    )

    __table_args__ = (
        Index("ix_training_session_student_id", "student_id"),
        Index("ix_training_session_trainer_id", "trainer_id"),
    )


class Review(Base):
    __tablename__ = "review"
    id = Column(Integer, primary_key=True, autoincrement=True)
    reviewer_id = Column(Integer, ForeignKey("user.id"), nullable=False)
    reviewed_id = Column(Integer, ForeignKey("user.id"), nullable=False)
    match_id = Column(Integer, ForeignKey("match.id"), nullable=True)
    training_id = Column(Integer, ForeignKey("training_session.id"), nullable=True)
    rating = Column(Integer, nullable=False)  # 1-5 stars
    comment = Column(Text, nullable=True)
    is_anonymous = Column(Boolean, nullable=False, default=False, server_default=false())
    created_at = Column(
        DateTime, nullable=False, default=utcnow, server_default=func.now()
    )

    __table_args__ = (Index("ix_review_reviewed_id", "reviewed_id"),)
