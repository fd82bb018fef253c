import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_session
from ..exceptions import TrainingSessionNotFound, UserNotFound
from ..models import TrainingSession, User
from ..schemas import TrainingSessionCreate, TrainingSessionOut, TrainingSessionUpdate
from ..time_utils import coerce_utc, naive_utc

logger = logging.getLogger(__name__)

router = APIRouter()


def training_out(t: TrainingSession) -> TrainingSessionOut:
    return TrainingSessionOut(
        id=t.id,
        studentId=t.student_id,
        trainerId=t.trainer_id,
        date=coerce_utc(t.date),
        duration=t.duration,
        notes=t.notes,
        status=t.status,
        createdAt=coerce_utc(t.created_at),
    )


async def _sessions_where(session: AsyncSession, clause) -> list[TrainingSessionOut]:
    rows = (
        await session.execute(
            select(TrainingSession)
            .where(clause)
            .order_by(TrainingSession.date.desc(), TrainingSession.id.desc())
        )
    ).scalars().all()
    return [training_out(t) for t in rows]


# Newest first
@router.get("/training-sessions/student/{student_id}", response_model=list[TrainingSessionOut])
async def list_student_sessions(student_id: int, session: AsyncSession = Depends(get_session)):
    return await _sessions_where(session, TrainingSession.student_id == student_id)


@router.get("/training-sessions/trainer/{trainer_id}", response_model=list[TrainingSessionOut])
async def list_trainer_sessions(trainer_id: int, session: AsyncSession = Depends(get_session)):
    return await _sessions_where(session, TrainingSession.trainer_id == trainer_id)


@router.post("/training-sessions", response_model=TrainingSessionOut)
async def create_training_session(
    body: TrainingSessionCreate,
    session: AsyncSession = Depends(get_session),
):
    for uid in (body.studentId, body.trainerId):
        if await session.get(User, uid) is None:
            raise UserNotFound(uid)
    t = TrainingSession(
        student_id=body.studentId,
        trainer_id=body.trainerId,
        date=naive_utc(body.date),
        duration=body.duration,
        notes=body.notes,
        status=body.status,
    )
    session.add(t)
    await session.commit()
    logger.info(
        "Training session %s requested: student %s with trainer %s",
        t.id,
        t.student_id,
        t.trainer_id,
    )
    return training_out(t)


@router.patch("/training-sessions/{session_id}", response_model=TrainingSessionOut)
async def update_training_session(
    session_id: int,
    body: TrainingSessionUpdate,
    session: AsyncSession = Depends(get_session),
):
    t = await session.get(TrainingSession, session_id)
    if not t:
        raise TrainingSessionNotFound(session_id)
    for field in body.model_fields_set:
        value = getattr(body, field)
        setattr(t, field, naive_utc(value) if field == "date" else value)
    await session.commit()
    logger.info(
        "Updated training session %s fields: %s",
        session_id,
        ", ".join(sorted(body.model_fields_set)),
    )
    return training_out(t)
