import argparse
import random
import sys
from datetime import date, time
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from sqlmodel import select  # noqa: E402

from stockquiz.db import get_session, init_db  # noqa: E402
from stockquiz.logging_config import setup_logging  # noqa: E402
from stockquiz.models import QuizSchedule, Student  # noqa: E402
from stockquiz.questions import create_question  # noqa: E402
from stockquiz.rankings import get_rankings  # noqa: E402
from stockquiz.schedules import create_schedule  # noqa: E402
from stockquiz.sessions import complete_session, start_session, submit_answer  # noqa: E402
from stockquiz.students import create_student  # noqa: E402


SEED_STUDENT_PREFIX = "Seed Student"
SEED_TITLE_PREFIX = "[SEED]"
CATEGORIES = ["Economy", "Saving", "Stocks", "Interest", "Budgeting"]


def main():
    parser = argparse.ArgumentParser(description="Seed demo students, quizzes and results for one class.")
    parser.add_argument("--grade", type=int, required=True)
    parser.add_argument("--class-number", type=int, required=True)
    parser.add_argument("--students", type=int, default=12)
    parser.add_argument("--quizzes", type=int, default=3)
    parser.add_argument("--questions", type=int, default=10)
    args = parser.parse_args()

    setup_logging()
    init_db()
    random.seed(42)

    with get_session() as session:
        existing = session.exec(
            select(QuizSchedule).where(QuizSchedule.title.like(f"{SEED_TITLE_PREFIX}%"))
        ).first()
        if existing:
            raise SystemExit(
                "Seed schedules already exist. "
                "Run scripts/seed_demo_cleanup.py first."
            )

    students = []
    for i in range(args.students):
        name = f"{SEED_STUDENT_PREFIX} {i+1}"
        with get_session() as session:
            student = session.exec(
                select(Student).where(
                    Student.grade == args.grade,
                    Student.class_number == args.class_number,
                    Student.number == i + 1,
                    Student.name == name,
                )
            ).first()
        if not student:
            student = create_student(name, args.grade, args.class_number, i + 1)
        students.append(student)

    for qi in range(args.quizzes):
        question_ids = []
        for qn in range(args.questions):
            question = create_question(
                title=f"{SEED_TITLE_PREFIX} Question {qi+1}-{qn+1}",
                content=f"Seed question {qi+1}-{qn+1}",
                options={"A": "Option A", "B": "Option B", "C": "Option C", "D": "Option D"},
                correct_answer="A",
                difficulty=random.randint(1, 3),
                category=random.choice(CATEGORIES),
            )
            question_ids.append(question.id)

        schedule = create_schedule(
            title=f"{SEED_TITLE_PREFIX} Daily Quiz {qi+1}",
            question_ids=question_ids,
            start_time=time(0, 0),
            end_time=time(23, 59, 59),
            start_date=date.today(),
            schedule_type="daily",
        )

        # weak / average / strong segments
        for idx, student in enumerate(students):
            if idx % 3 == 0:
                success_rate = 0.35
            elif idx % 3 == 1:
                success_rate = 0.6
            else:
                success_rate = 0.9

            quiz_session = start_session(student.id, schedule.id)
            for index in range(quiz_session.total_questions):
                option = "A" if random.random() < success_rate else random.choice("BCD")
                submit_answer(quiz_session.id, index, option)
            complete_session(quiz_session.id, elapsed_seconds=random.randint(60, 600))

    top = get_rankings(grade=args.grade, class_number=args.class_number, limit=3)
    print(
        f"Seed complete for grade {args.grade} class {args.class_number}. "
        f"Students={args.students}, Quizzes={args.quizzes}, Questions={args.questions}"
    )
    for row in top:
        print(f"  #{row.rank} {row.name}: {row.virtual_assets:,} ({row.total_return_rate:+.2f}%)")


if __name__ == "__main__":
    main()
