import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from sqlmodel import select  # noqa: E402

from stockquiz.db import get_session  # noqa: E402
from stockquiz.models import Portfolio, Question, QuizSchedule, QuizSession, Student  # noqa: E402


SEED_STUDENT_PREFIX = "Seed Student"
SEED_TITLE_PREFIX = "[SEED]"


def main():
    parser = argparse.ArgumentParser(description="Remove seeded demo data for one class.")
    parser.add_argument("--grade", type=int, required=True)
    parser.add_argument("--class-number", type=int, required=True)
    args = parser.parse_args()

    with get_session() as session:
        seed_schedules = session.exec(
            select(QuizSchedule).where(QuizSchedule.title.like(f"{SEED_TITLE_PREFIX}%"))
        ).all()
        seed_schedule_ids = [s.id for s in seed_schedules]
        if seed_schedule_ids:
            session.exec(
                QuizSession.__table__.delete().where(QuizSession.schedule_id.in_(seed_schedule_ids))
            )
            session.exec(
                QuizSchedule.__table__.delete().where(QuizSchedule.id.in_(seed_schedule_ids))
            )
        session.exec(
            Question.__table__.delete().where(Question.title.like(f"{SEED_TITLE_PREFIX}%"))
        )

        seed_students = session.exec(
            select(Student).where(
                Student.grade == args.grade,
                Student.class_number == args.class_number,
                Student.name.like(f"{SEED_STUDENT_PREFIX}%"),
            )
        ).all()
        seed_student_ids = [s.id for s in seed_students]
        if seed_student_ids:
            session.exec(
                QuizSession.__table__.delete().where(QuizSession.student_id.in_(seed_student_ids))
            )
            session.exec(
                Portfolio.__table__.delete().where(Portfolio.student_id.in_(seed_student_ids))
            )
            session.exec(
                Student.__table__.delete().where(Student.id.in_(seed_student_ids))
            )

        session.commit()

    print(f"Seed cleanup complete for grade {args.grade} class {args.class_number}.")


if __name__ == "__main__":
    main()
