#!/usr/bin/env python3
"""
Insert synthetic person records into the configured database.

Names, cities and dates are drawn from small fixed pools with a seeded RNG,
so two runs with the same --seed produce the same people. Emails are
numbered, so re-running against a non-empty database skips the ones that
already exist.

Usage:
    uv run python scripts/seed_records.py --count 200
    DATABASE_URL=sqlite+aiosqlite:///data/records.db uv run python scripts/seed_records.py
"""

import argparse
import asyncio
import random
from datetime import date, timedelta

from sqlalchemy import select

from app.config import settings
from app.db.engine import build_engine, build_session_factory, create_tables
from app.db.models import Gender, Person, PersonStatus, utcnow

FIRST_NAMES = [
    "Ana", "Arjun", "Priya", "Rahul", "Sofia", "Liam", "Meera", "Noah",
    "Isha", "Kabir", "Emma", "Vikram", "Zara", "Rohan", "Leela", "Omar",
]
LAST_NAMES = [
    "Silva", "Sharma", "Patel", "Iyer", "Khan", "Garcia", "Reddy", "Singh",
    "Nair", "Brown", "Das", "Mehta",
]
CITIES = [
    ("Pune", "MH", "411001"),
    ("Mumbai", "MH", "400001"),
    ("Bengaluru", "KA", "560001"),
    ("Chennai", "TN", "600001"),
    ("Delhi", "DL", "110001"),
    ("Kolkata", "WB", "700001"),
]


def make_person(index: int, rng: random.Random) -> Person:
    first = rng.choice(FIRST_NAMES)
    last = rng.choice(LAST_NAMES)
    city, state, zip_code = rng.choice(CITIES)
    now = utcnow()
    return Person(
        first_name=first,
        last_name=last,
        email=f"{first}.{last}.{index}@example.com".lower(),
        phone=f"9{rng.randrange(10**8, 10**9):09d}",
        date_of_birth=date(1960, 1, 1) + timedelta(days=rng.randrange(0, 16000)),
        gender=rng.choice(list(Gender)),
        street=f"{rng.randrange(1, 300)} Main Road" if rng.random() < 0.8 else None,
        city=city,
        state=state,
        zip_code=zip_code,
        country=settings.default_country,
        status=PersonStatus.ACTIVE if rng.random() < 0.75 else PersonStatus.INACTIVE,
        created_at=now,
        updated_at=now,
    )


async def seed(count: int, seed_value: int) -> int:
    engine = build_engine(settings)
    await create_tables(engine)
    factory = build_session_factory(engine)
    rng = random.Random(seed_value)

    people = [make_person(i, rng) for i in range(count)]
    async with factory() as session:
        existing = set(
            (await session.execute(select(Person.email))).scalars().all()
        )
        fresh = [p for p in people if p.email not in existing]
        session.add_all(fresh)
        await session.commit()

    await engine.dispose()
    return len(fresh)


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--count", type=int, default=50)
    parser.add_argument("--seed", type=int, default=42)
    args = parser.parse_args()

    inserted = asyncio.run(seed(args.count, args.seed))
    print(f"Inserted {inserted} record(s) into {settings.database_url}")


if __name__ == "__main__":
    main()
