import datetime
from typing import Optional

import structlog

from db import ExerciseRepository, SessionRepository, SetRepository

logger = structlog.get_logger(__name__)

SAMPLE_EXERCISES = {
    "Bench Press": "Chest",
    "Barbell Row": "Back",
    "Squat": "Quads",
    "Deadlift": "Hamstrings",
    "Overhead Press": "Shoulders",
    "Front Squat": "Quads",
}

# (exercise, starting weight, weekly increment, reps) per training day
SAMPLE_PLAN = {
    0: [("Bench Press", 80.0, 2.5, 8), ("Barbell Row", 75.0, 2.5, 8)],
    2: [("Squat", 100.0, 5.0, 5), ("Front Squat", 80.0, 2.5, 5)],
    4: [("Deadlift", 120.0, 5.0, 5), ("Overhead Press", 50.0, 1.25, 6)],
}


def seed(
    db_path: str = "workout.db",
    weeks: int = 6,
    today: Optional[datetime.date] = None,
) -> int:
    """Fill an empty database with ``weeks`` of three-day training; return sessions added."""
    sessions = SessionRepository(db_path)
    if sessions.fetch_all_sessions():
        print("Database already contains workouts")
        return 0

    exercises = ExerciseRepository(db_path)
    sets = SetRepository(db_path)
    ids = {name: exercises.ensure(name, group) for name, group in SAMPLE_EXERCISES.items()}

    today = today or datetime.date.today()
    first_monday = today - datetime.timedelta(days=today.weekday(), weeks=weeks - 1)
    added = 0
    for week in range(weeks):
        for offset, plan in SAMPLE_PLAN.items():
            day = first_monday + datetime.timedelta(weeks=week, days=offset)
            if day > today:
                continue
            sid = sessions.create(
                datetime.datetime.combine(day, datetime.time(18, 0)),
                name=f"Week {week + 1} day {offset + 1}",
            )
            for name, start, step, reps in plan:
                weight = start + step * week
                sets.add(sid, ids[name], round(weight * 0.5, 2), reps, is_warmup=True)
                sets.bulk_add(sid, ids[name], [(weight, reps)] * 3)
            sessions.complete(sid, 60 * 60)
            added += 1
    logger.info("sample_data_seeded", db_path=db_path, sessions=added)
    print("Seed data inserted")
    return added


if __name__ == "__main__":
    seed()
