from datetime import date, time, timezone

from stockquiz.db import get_session
from stockquiz.models import Portfolio, Question, QuizSchedule, QuizSession, Student


def test_datetime_fields_are_timezone_aware():
    with get_session() as s:
        student = Student(name='tz_student', grade=3, class_number=9, number=1)
        s.add(student)
        s.flush()  # ensure defaults applied but before DB roundtrip
        # in-memory default should be timezone-aware
        assert student.created_at.tzinfo is not None and student.created_at.tzinfo == timezone.utc
        s.commit()

        question = Question(
            title='tz', content='tz?', option_a='1', option_b='2', option_c='3', option_d='4', correct_answer='A'
        )
        s.add(question)
        s.flush()
        assert question.created_at.tzinfo == timezone.utc
        s.commit()

        schedule = QuizSchedule(
            title='TZ Quiz',
            question_ids=f'[{question.id}]',
            start_time=time(9, 0),
            end_time=time(10, 0),
            start_date=date(2024, 1, 1),
        )
        s.add(schedule)
        s.flush()
        assert schedule.created_at.tzinfo == timezone.utc
        s.commit()

        quiz_session = QuizSession(student_id=student.id, schedule_id=schedule.id, total_questions=1)
        s.add(quiz_session)
        s.flush()
        assert (
            quiz_session.started_at is not None and quiz_session.started_at.tzinfo is not None
            and quiz_session.started_at.tzinfo == timezone.utc
        )
        s.commit()

        portfolio = Portfolio(student_id=student.id)
        s.add(portfolio)
        s.flush()
        assert portfolio.created_at.tzinfo == timezone.utc
        assert portfolio.last_updated.tzinfo == timezone.utc
        assert portfolio.virtual_assets == 1_000_000
        s.commit()
