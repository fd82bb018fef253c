from fastapi import HTTPException
from pydantic import BaseModel
from typing import Optional


class ProblemDetail(BaseModel):
    """RFC 7807 compliant error response."""

    type: str = "about:blank"
    title: str
    detail: Optional[str] = None
    status: int
    instance: Optional[str] = None
    code: str


class DomainException(Exception):
    """Base class for domain-specific exceptions."""

    def __init__(
        self,
        status_code: int,
        title: str,
        *,
        code: str,
        detail: str | None = None,
        type_: str = "about:blank",
    ) -> None:
        self.status_code = status_code
        self.title = title
        self.detail = detail
        self.type = type_
        self.code = code


class UserNotFound(DomainException):
    def __init__(self, user_id: int) -> None:
        super().__init__(
            status_code=404,
            title="User not found",
            detail=f"user '{user_id}' not found",
            code="user_not_found",
        )


class UsernameTaken(DomainException):
    def __init__(self, username: str) -> None:
        super().__init__(
            status_code=409,
            title="Username taken",
            detail=f"username '{username}' already exists",
            code="username_taken",
        )


class MatchNotFound(DomainException):
    def __init__(self, match_id: int) -> None:
        super().__init__(
            status_code=404,
            title="Match not found",
            detail=f"match '{match_id}' not found",
            code="match_not_found",
        )


class TournamentNotFound(DomainException):
    def __init__(self, tournament_id: int) -> None:
        super().__init__(
            status_code=404,
            title="Tournament not found",
            detail=f"tournament '{tournament_id}' not found",
            code="tournament_not_found",
        )


class FollowAlreadyExists(DomainException):
    def __init__(self, follower_id: int, following_id: int) -> None:
        super().__init__(
            status_code=409,
            title="Already following",
            detail=f"user '{follower_id}' already follows '{following_id}'",
            code="follow_exists",
        )


class FollowNotFound(DomainException):
    def __init__(self, follower_id: int, following_id: int) -> None:
        super().__init__(
            status_code=404,
            title="Follow relationship not found",
            detail=f"user '{follower_id}' does not follow '{following_id}'",
            code="follow_not_found",
        )


class TrainingSessionNotFound(DomainException):
    def __init__(self, session_id: int) -> None:
        super().__init__(
            status_code=404,
            title="Training session not found",
            detail=f"training session '{session_id}' not found",
            code="training_session_not_found",
        )


def http_problem(
    status_code: int,
    detail: str,
    code: str,
    *,
    headers: Optional[dict[str, str]] = None,
) -> HTTPException:
    """Create an HTTPException with an attached problem code."""

    exc = HTTPException(status_code=status_code, detail=detail, headers=headers)
    setattr(exc, "code", code)
    return exc
