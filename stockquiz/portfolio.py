"""Virtual portfolio driven by quiz results.

Every completed session moves the student's assets by a fixed amount chosen
from the percentage of correct answers:

    p >= 90       +50,000
    80 <= p < 90  +30,000
    70 <= p < 80  +15,000
    60 <= p < 70   +5,000
    50 <= p < 60        0
    p < 50        -20,000

Assets have no floor. The return rate is always derived from the assets and is
never stored.
"""
import logging
from datetime import datetime

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlmodel import col, select

from stockquiz.clock import now_utc
from stockquiz.config import STARTING_ASSETS
from stockquiz.db import get_session
from stockquiz.errors import StudentNotFoundError
from stockquiz.models import Portfolio, QuizSession, Student, return_rate

logger = logging.getLogger(__name__)

# (lower bound in percent, delta), checked top-down
DELTA_TIERS = (
    (90, 50_000),
    (80, 30_000),
    (70, 15_000),
    (60, 5_000),
    (50, 0),
)
BELOW_TIERS_DELTA = -20_000


def asset_delta(score: int, total_questions: int) -> int:
    if total_questions <= 0:
        raise ValueError("total_questions must be positive")
    if score < 0 or score > total_questions:
        raise ValueError("score must be between 0 and total_questions")
    # integer comparison: score/total*100 >= bound  <=>  score*100 >= bound*total
    for bound, delta in DELTA_TIERS:
        if score * 100 >= bound * total_questions:
            return delta
    return BELOW_TIERS_DELTA


def format_return_rate(rate: float) -> str:
    return f"{'+' if rate >= 0 else ''}{rate:.2f}%"


def _find(session, student_id: int):
    return session.exec(select(Portfolio).where(Portfolio.student_id == student_id)).first()


def get_portfolio(student_id: int, now: datetime | None = None) -> Portfolio:
    """Return the student's portfolio, creating it at the starting balance if missing."""
    with get_session() as session:
        portfolio = _find(session, student_id)
        if portfolio:
            return portfolio
        if not session.get(Student, student_id):
            raise StudentNotFoundError()
        now = now or now_utc()
        portfolio = Portfolio(
            student_id=student_id,
            virtual_assets=STARTING_ASSETS,
            created_at=now,
            last_updated=now,
        )
        session.add(portfolio)
        try:
            session.commit()
        except IntegrityError:
            # created concurrently by another request
            session.rollback()
            return _find(session, student_id)
        session.refresh(portfolio)
        logger.info("Created portfolio for student %s", student_id)
        return portfolio


def add_assets(session, student_id: int, delta: int, now: datetime) -> None:
    """Atomically move a portfolio inside the caller's transaction."""
    result = session.exec(
        update(Portfolio)
        .where(col(Portfolio.student_id) == student_id)
        .values(virtual_assets=Portfolio.virtual_assets + delta, last_updated=now)
    )
    if result.rowcount != 1:
        raise StudentNotFoundError("Portfolio missing for student")


def apply_quiz_result(student_id: int, score: int, total_questions: int, now: datetime | None = None) -> Portfolio:
    delta = asset_delta(score, total_questions)
    now = now or now_utc()
    get_portfolio(student_id, now)
    with get_session() as session:
        add_assets(session, student_id, delta, now)
        session.commit()
    logger.info("Applied %s/%s to student %s: %+d", score, total_questions, student_id, delta)
    return get_portfolio(student_id)


def portfolio_history(student_id: int) -> dict:
    """Replay the asset value after each settled session, oldest first."""
    with get_session() as session:
        q = (
            select(QuizSession)
            .where(
                QuizSession.student_id == student_id,
                col(QuizSession.settled_at).is_not(None),
            )
            .order_by(QuizSession.completed_at, QuizSession.id)
        )
        sessions = list(session.exec(q))

    value = STARTING_ASSETS
    values = [value]
    quiz_scores = []
    for s in sessions:
        value += s.asset_delta if s.asset_delta is not None else asset_delta(s.score, s.total_questions)
        values.append(value)
        quiz_scores.append({
            'session_id': s.id,
            'completed_at': s.completed_at.isoformat() if s.completed_at else None,
            'score': s.score,
            'total_questions': s.total_questions,
        })
    return {
        'portfolio_value': values,
        'return_rate': [return_rate(v) for v in values],
        'quiz_scores': quiz_scores,
    }
