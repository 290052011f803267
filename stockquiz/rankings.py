"""Live ranking, recomputed from portfolios on every request."""
from dataclasses import dataclass
from typing import Iterable, Mapping

from sqlmodel import select

from stockquiz.clock import ensure_utc
from stockquiz.db import get_session
from stockquiz.models import Portfolio, Student, return_rate
from stockquiz.sessions import completed_session_counts, get_completed_sessions
from stockquiz.students import get_students


@dataclass(slots=True)
class LiveRanking:
    rank: int
    student_id: int
    virtual_assets: int
    total_return_rate: float
    quizzes_completed: int
    name: str = ""
    grade: int | None = None
    class_number: int | None = None
    number: int | None = None


def compute_rankings(
    portfolios: Iterable[Portfolio],
    completed_session_counts: Mapping[int, int],
    students: Mapping[int, Student] | None = None,
    grade: int | None = None,
    class_number: int | None = None,
) -> list[LiveRanking]:
    """Order portfolios by assets and assign competition ranks (1, 1, 3, ...).

    Grade/class filters need ``students`` and are applied before ranking, so a
    class ranking starts at 1. Equal assets keep the earliest-created
    portfolio first.
    """
    if (grade is not None or class_number is not None) and students is None:
        raise ValueError("grade/class filters need students")
    students = students or {}
    rows = list(portfolios)
    if grade is not None or class_number is not None:
        def keep(p):
            student = students.get(p.student_id)
            if student is None:
                return False
            if grade is not None and student.grade != grade:
                return False
            if class_number is not None and student.class_number != class_number:
                return False
            return True
        rows = [p for p in rows if keep(p)]

    rows.sort(key=lambda p: (-p.virtual_assets, ensure_utc(p.created_at), p.id or 0))

    rankings = []
    ahead = 0
    previous_assets = None
    for position, p in enumerate(rows):
        if p.virtual_assets != previous_assets:
            ahead = position
            previous_assets = p.virtual_assets
        student = students.get(p.student_id)
        rankings.append(LiveRanking(
            rank=ahead + 1,
            student_id=p.student_id,
            virtual_assets=p.virtual_assets,
            total_return_rate=return_rate(p.virtual_assets),
            quizzes_completed=completed_session_counts.get(p.student_id, 0),
            name=student.name if student else "",
            grade=student.grade if student else None,
            class_number=student.class_number if student else None,
            number=student.number if student else None,
        ))
    return rankings


def get_rankings(grade: int | None = None, class_number: int | None = None, limit: int | None = None) -> list[LiveRanking]:
    with get_session() as session:
        portfolios = list(session.exec(select(Portfolio)))
    rankings = compute_rankings(
        portfolios,
        completed_session_counts(),
        students=get_students(p.student_id for p in portfolios),
        grade=grade,
        class_number=class_number,
    )
    return rankings[:limit] if limit is not None else rankings


def student_rank(student_id: int) -> int:
    """Global rank of a student, or 0 if they have no portfolio yet."""
    for row in get_rankings():
        if row.student_id == student_id:
            return row.rank
    return 0


def top_performers(limit: int = 10, recent: int = 5):
    """Top of the global ranking with each student's recent quiz average."""
    performers = []
    for row in get_rankings(limit=limit):
        sessions = get_completed_sessions(row.student_id)[-recent:]
        if sessions:
            average = sum(s.score / s.total_questions * 100 for s in sessions) / len(sessions)
        else:
            average = 0.0
        performers.append({
            'ranking': row,
            'recent_quizzes': len(sessions),
            'average_score': round(average, 1),
        })
    return performers
