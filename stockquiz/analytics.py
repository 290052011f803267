"""Teacher-facing statistics over completed quiz sessions.

Percentages are whole-quiz scores (score / total_questions * 100). Days are
calendar days in the schedule time zone.
"""
import logging
from datetime import datetime, timedelta

from sqlalchemy import func
from sqlmodel import col, select

from stockquiz.clock import ensure_utc, now_utc, to_schedule_time
from stockquiz.db import get_session
from stockquiz.models import QuizSchedule, QuizSession, Student
from stockquiz.students import get_students

logger = logging.getLogger(__name__)

# (label, lower bound in percent); each bucket runs up to the next bound
SCORE_BUCKETS = [
    ('90-100%', 90),
    ('80-89%', 80),
    ('70-79%', 70),
    ('60-69%', 60),
    ('0-59%', 0),
]
ACTIVITY_DAYS = 7
RECENT_SESSIONS = 10


def _percent(quiz_session: QuizSession) -> float:
    if not quiz_session.total_questions:
        return 0.0
    return quiz_session.score / quiz_session.total_questions * 100


def _bucket(score: int, total: int) -> str:
    for label, bound in SCORE_BUCKETS:
        if score * 100 >= bound * total:
            return label
    return SCORE_BUCKETS[-1][0]


def score_distribution(sessions) -> list[dict]:
    counts = {label: 0 for label, _ in SCORE_BUCKETS}
    for s in sessions:
        if s.total_questions:
            counts[_bucket(s.score, s.total_questions)] += 1
    return [{'range': label, 'count': counts[label]} for label, _ in SCORE_BUCKETS]


def daily_activity(sessions, now: datetime, days: int = ACTIVITY_DAYS) -> list[dict]:
    """Completions per local day for the ``days`` days ending today, oldest first."""
    today = to_schedule_time(now).date()
    dates = [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]
    counts = {d: 0 for d in dates}
    for s in sessions:
        if s.completed_at is None:
            continue
        day = to_schedule_time(ensure_utc(s.completed_at)).date()
        if day in counts:
            counts[day] += 1
    return [{'date': d.isoformat(), 'count': counts[d]} for d in dates]


def class_performance(sessions, students) -> list[dict]:
    """Average percentage per (grade, class), ordered by grade then class."""
    groups = {}
    for s in sessions:
        student = students.get(s.student_id)
        if student is None or not s.total_questions:
            continue
        group = groups.setdefault((student.grade, student.class_number), {'scores': [], 'students': set()})
        group['scores'].append(_percent(s))
        group['students'].add(s.student_id)

    rows = []
    for (grade, class_number), group in sorted(groups.items()):
        rows.append({
            'grade': grade,
            'class_number': class_number,
            'average_score': round(sum(group['scores']) / len(group['scores']), 1),
            'student_count': len(group['students']),
            'session_count': len(group['scores']),
        })
    return rows


def _completed_sessions(session):
    q = (
        select(QuizSession)
        .where(col(QuizSession.completed_at).is_not(None))
        .order_by(col(QuizSession.completed_at).desc(), col(QuizSession.id).desc())
    )
    return list(session.exec(q))


def _recent_to_dict(quiz_session: QuizSession, student: Student | None, schedule: QuizSchedule | None):
    return {
        'session_id': quiz_session.id,
        'student_id': quiz_session.student_id,
        'student_name': student.name if student else '',
        'grade': student.grade if student else None,
        'class_number': student.class_number if student else None,
        'number': student.number if student else None,
        'schedule_id': quiz_session.schedule_id,
        'schedule_title': schedule.title if schedule else '',
        'score': quiz_session.score,
        'total_questions': quiz_session.total_questions,
        'completed_at': ensure_utc(quiz_session.completed_at).isoformat(),
    }


def basic_analytics(now: datetime | None = None):
    now = now or now_utc()
    with get_session() as session:
        total_quizzes = session.exec(select(func.count(QuizSchedule.id))).one()
        total_students = session.exec(select(func.count(Student.id))).one()
        completed = _completed_sessions(session)
        recent = completed[:RECENT_SESSIONS]
        schedules = {
            s.id: s for s in session.exec(
                select(QuizSchedule).where(col(QuizSchedule.id).in_([r.schedule_id for r in recent]))
            )
        } if recent else {}

    students = get_students({r.student_id for r in recent})
    average = sum(_percent(s) for s in completed) / len(completed) if completed else 0.0
    finished_students = len({s.student_id for s in completed})
    completion_rate = round(finished_students / total_students * 100) if total_students else 0

    logger.debug("Basic analytics: %s sessions, %s students", len(completed), total_students)
    return {
        'total_quizzes': total_quizzes,
        'total_students': total_students,
        'total_sessions': len(completed),
        'average_score': round(average, 1),
        'completion_rate': completion_rate,
        'recent_sessions': [
            _recent_to_dict(s, students.get(s.student_id), schedules.get(s.schedule_id)) for s in recent
        ],
        'generated_at': now.isoformat(),
    }


def detailed_analytics(now: datetime | None = None):
    now = now or now_utc()
    with get_session() as session:
        completed = _completed_sessions(session)
    students = get_students({s.student_id for s in completed})
    return {
        'score_distribution': score_distribution(completed),
        'daily_activity': daily_activity(completed, now),
        'class_performance': class_performance(completed, students),
        'total_sessions': len(completed),
        'generated_at': now.isoformat(),
    }
