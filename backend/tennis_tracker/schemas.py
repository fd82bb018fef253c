from typing import Any, List, Literal, Optional
from datetime import datetime
from pydantic import BaseModel, Field, model_validator, field_validator, ConfigDict

from .time_utils import coerce_utc

MatchType = Literal["casual", "tournament", "rated"]
StreakKind = Literal["win", "loss", "undetermined"]
TrainingStatus = Literal["pending", "confirmed", "completed"]


def _trimmed(value: Any, field: str) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{field} must be a string")
    trimmed = value.strip()
    if not trimmed:
        raise ValueError(f"{field} must not be empty")
    return trimmed


def _optional_trimmed(value: Any, field: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise TypeError(f"{field} must be a string")
    return value.strip() or None


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    username: str = Field(
        ..., min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_.-]+$"
    )
    avatarUrl: Optional[str] = None
    skillLevel: Optional[str] = "3.0"
    club: Optional[str] = None
    playingStyle: Optional[str] = None
    racket: Optional[str] = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("name", "username", mode="before")
    @classmethod
    def _validate_required(cls, value: Any, info) -> str:
        return _trimmed(value, info.field_name)

    @field_validator("avatarUrl", "club", "playingStyle", "racket", mode="before")
    @classmethod
    def _normalize_optional(cls, value: Any, info) -> Optional[str]:
        return _optional_trimmed(value, info.field_name)


class UserUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    avatarUrl: Optional[str] = None
    skillLevel: Optional[str] = None
    club: Optional[str] = None
    playingStyle: Optional[str] = None
    racket: Optional[str] = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("name", mode="before")
    @classmethod
    def _validate_name(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        return _trimmed(value, "name")

    @field_validator("avatarUrl", "club", "playingStyle", "racket", mode="before")
    @classmethod
    def _normalize_optional(cls, value: Any, info) -> Optional[str]:
        return _optional_trimmed(value, info.field_name)

    @model_validator(mode="after")
    def _ensure_fields(self) -> "UserUpdate":
        if not self.model_fields_set:
            raise ValueError("at least one field must be provided")
        return self


class UserOut(BaseModel):
    id: int
    name: str
    username: str
    avatarUrl: Optional[str] = None
    skillLevel: Optional[str] = None
    club: Optional[str] = None
    playingStyle: Optional[str] = None
    racket: Optional[str] = None
    wins: int = 0
    losses: int = 0
    matchesPlayed: int = 0
    createdAt: Optional[datetime] = None


class UserListOut(BaseModel):
    users: List[UserOut]
    total: int
    limit: int
    offset: int


class SetScoreOut(BaseModel):
    p1: int
    p2: int


class MatchCreate(BaseModel):
    player1Id: int
    player2Id: int
    date: datetime
    # {"p1": 6, "p2": 4}, "6-4" or [6, 4]; normalised by the match service
    sets: List[Any]
    type: MatchType = "casual"
    tournamentId: Optional[int] = None
    notes: Optional[str] = Field(default=None, max_length=2000)

    @field_validator("date")
    @classmethod
    def _normalize_date(cls, v: datetime) -> datetime:
        return coerce_utc(v)

    @field_validator("notes", mode="before")
    @classmethod
    def _normalize_notes(cls, value: Any) -> Optional[str]:
        return _optional_trimmed(value, "notes")


class MatchUpdate(BaseModel):
    sets: Optional[List[Any]] = None
    notes: Optional[str] = Field(default=None, max_length=2000)
    tournamentId: Optional[int] = None
    winner: Optional[int] = None

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def _ensure_fields(self) -> "MatchUpdate":
        if not self.model_fields_set:
            raise ValueError("at least one field must be provided")
        if "sets" in self.model_fields_set and self.sets is None:
            raise ValueError("sets cannot be null")
        return self

    def changes(self) -> dict[str, Any]:
        """Supplied fields keyed by their storage names."""
        mapping = {
            "sets": "sets",
            "notes": "notes",
            "tournamentId": "tournament_id",
            "winner": "winner_id",
        }
        return {
            mapping[field]: getattr(self, field)
            for field in self.model_fields_set
        }


class MatchOut(BaseModel):
    id: int
    player1Id: int
    player2Id: int
    date: datetime
    sets: List[SetScoreOut]
    winner: Optional[int] = None
    type: str
    tournamentId: Optional[int] = None
    notes: Optional[str] = None
    createdAt: datetime


class MatchSummaryOut(MatchOut):
    player1Name: Optional[str] = None
    player2Name: Optional[str] = None
    score: str


class StreakOut(BaseModel):
    length: int
    kind: Optional[StreakKind] = None


class UserStatsOut(BaseModel):
    userId: int
    totalMatches: int
    wins: int
    losses: int
    winRate: int
    setWinRate: int
    currentStreak: StreakOut
    longestWinStreak: int


class OpponentOut(BaseModel):
    opponentId: int
    name: Optional[str] = None
    count: int


class LeaderboardEntryOut(BaseModel):
    rank: int
    userId: int
    name: Optional[str] = None
    avatarUrl: Optional[str] = None
    rating: int


class RatingUpdate(BaseModel):
    rating: int = Field(..., ge=0, le=10000)


class RankingOut(BaseModel):
    userId: int
    rating: int
    updatedAt: datetime


class FollowCreate(BaseModel):
    followerId: int
    followingId: int


class FollowOut(BaseModel):
    id: int
    followerId: int
    followingId: int
    createdAt: datetime


class TournamentCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    type: Literal["singles", "doubles"] = "singles"
    status: Literal["upcoming", "ongoing", "completed"] = "upcoming"
    organizerId: int
    maxParticipants: int = Field(default=16, ge=2, le=256)
    startDate: Optional[datetime] = None
    endDate: Optional[datetime] = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("name", mode="before")
    @classmethod
    def _validate_name(cls, value: Any) -> str:
        return _trimmed(value, "name")

    @field_validator("startDate", "endDate")
    @classmethod
    def _normalize_dates(cls, v: Optional[datetime]) -> Optional[datetime]:
        return coerce_utc(v)

    @model_validator(mode="after")
    def _check_dates(self) -> "TournamentCreate":
        if self.startDate and self.endDate and self.endDate < self.startDate:
            raise ValueError("endDate must not be before startDate")
        return self


class TournamentOut(BaseModel):
    id: int
    name: str
    type: str
    status: str
    organizerId: int
    maxParticipants: int
    startDate: Optional[datetime] = None
    endDate: Optional[datetime] = None
    createdAt: datetime


class TrainingSessionCreate(BaseModel):
    studentId: int
    trainerId: int
    date: datetime
    duration: int = Field(..., ge=15, le=480)
    notes: Optional[str] = Field(default=None, max_length=2000)
    status: TrainingStatus = "pending"

    model_config = ConfigDict(extra="forbid")

    @field_validator("date")
    @classmethod
    def _normalize_date(cls, v: datetime) -> datetime:
        return coerce_utc(v)

    @field_validator("notes", mode="before")
    @classmethod
    def _normalize_notes(cls, value: Any) -> Optional[str]:
        return _optional_trimmed(value, "notes")

    @model_validator(mode="after")
    def _distinct_people(self) -> "TrainingSessionCreate":
        if self.studentId == self.trainerId:
            raise ValueError("a trainer cannot train themselves")
        return self


class TrainingSessionUpdate(BaseModel):
    date: Optional[datetime] = None
    duration: Optional[int] = Field(default=None, ge=15, le=480)
    notes: Optional[str] = Field(default=None, max_length=2000)
    status: Optional[TrainingStatus] = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("date")
    @classmethod
    def _normalize_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return coerce_utc(v)

    @field_validator("notes", mode="before")
    @classmethod
    def _normalize_notes(cls, value: Any) -> Optional[str]:
        return _optional_trimmed(value, "notes")

    @model_validator(mode="after")
    def _ensure_fields(self) -> "TrainingSessionUpdate":
        if not self.model_fields_set:
            raise ValueError("at least one field must be provided")
        for field in ("date", "duration", "status"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self


class TrainingSessionOut(BaseModel):
    id: int
    studentId: int
    trainerId: int
    date: datetime
    duration: int
    notes: Optional[str] = None
    status: TrainingStatus
    createdAt: datetime


class ReviewCreate(BaseModel):
    reviewerId: int
    reviewedId: int
    matchId: Optional[int] = None
    trainingId: Optional[int] = None
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(default=None, max_length=2000)
    isAnonymous: bool = False

    model_config = ConfigDict(extra="forbid")

    @field_validator("comment", mode="before")
    @classmethod
    def _normalize_comment(cls, value: Any) -> Optional[str]:
        return _optional_trimmed(value, "comment")

    @model_validator(mode="after")
    def _not_self(self) -> "ReviewCreate":
        if self.reviewerId == self.reviewedId:
            raise ValueError("users cannot review themselves")
        return self


class ReviewOut(BaseModel):
    id: int
    # hidden for anonymous reviews
    reviewerId: Optional[int] = None
    reviewerName: Optional[str] = None
    reviewedId: int
    matchId: Optional[int] = None
    trainingId: Optional[int] = None
    rating: int
    comment: Optional[str] = None
    isAnonymous: bool
    createdAt: datetime
