import asyncio
import os
from datetime import datetime, timezone
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from tennis_tracker.db import _normalize_database_url
from tennis_tracker.models import Match, User
from tennis_tracker.services.matches import create_match
from tennis_tracker.services.rankings import update_rating

DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise RuntimeError("DATABASE_URL environment variable is required")
DATABASE_URL = _normalize_database_url(DATABASE_URL)

engine = create_async_engine(DATABASE_URL, echo=False)
Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

DEMO_USERS = [
    ("demo", "Demo Player", "3.5", 1280),
    ("anna", "Anna Petrova", "4.0", 1350),
    ("ivan", "Ivan Smirnov", "3.0", 1210),
    ("coach", "Maria Sokolova", "5.0", 1400),
]

# (player1, player2, date, sets)
DEMO_MATCHES = [
    ("demo", "anna", "2024-01-01", [{"p1": 6, "p2": 3}, {"p1": 6, "p2": 4}]),
    ("anna", "ivan", "2024-01-05", ["7-5", "3-6", "6-2"]),
    ("ivan", "demo", "2024-01-12", [{"p1": 4, "p2": 6}, {"p1": 2, "p2": 6}]),
]


async def main():
    async with Session() as s:
        existing = {
            u.username: u for u in (await s.execute(select(User))).scalars().all()
        }
        for username, name, skill, _ in DEMO_USERS:
            if username not in existing:
                user = User(name=name, username=username, skill_level=skill)
                s.add(user)
                existing[username] = user
        await s.commit()

        for username, _, _, rating in DEMO_USERS:
            await update_rating(s, existing[username].id, rating)

        have_matches = (await s.execute(select(Match.id).limit(1))).first()
        if have_matches is None:
            for p1, p2, day, sets in DEMO_MATCHES:
                await create_match(
                    s,
                    player1_id=existing[p1].id,
                    player2_id=existing[p2].id,
                    date=datetime.fromisoformat(day).replace(tzinfo=timezone.utc),
                    sets=sets,
                    type="casual",
                )


if __name__ == "__main__":
    asyncio.run(main())
