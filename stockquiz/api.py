"""Operations offered to the web layer, returning JSON-ready dicts."""
from dataclasses import asdict
from datetime import datetime

from stockquiz import analytics as analytics_service
from stockquiz import rankings as ranking_service
from stockquiz import sessions as session_service
from stockquiz.db import init_db
from stockquiz.logging_config import setup_logging
from stockquiz.models import Portfolio, QuizSchedule, QuizSession
from stockquiz.portfolio import format_return_rate, get_portfolio, portfolio_history
from stockquiz.schedules import get_active_schedules


def init_app():
    setup_logging()
    init_db()


def _iso(value):
    return value.isoformat() if value else None


def schedule_to_dict(schedule: QuizSchedule):
    return {
        'id': schedule.id,
        'title': schedule.title,
        'question_ids': schedule.question_id_list,
        'schedule_type': schedule.schedule_type,
        'weekdays': sorted(schedule.weekday_set),
        'start_time': schedule.start_time.isoformat(),
        'end_time': schedule.end_time.isoformat(),
        'start_date': schedule.start_date.isoformat(),
        'end_date': _iso(schedule.end_date),
        'time_limit_minutes': schedule.time_limit_minutes,
        'is_active': schedule.is_active,
        'created_at': _iso(schedule.created_at),
    }


def session_to_dict(quiz_session: QuizSession):
    return {
        'id': quiz_session.id,
        'student_id': quiz_session.student_id,
        'schedule_id': quiz_session.schedule_id,
        'status': quiz_session.status,
        'question_ids': quiz_session.question_id_list,
        'answers': {str(k): v for k, v in quiz_session.answer_log.items()},
        'score': quiz_session.score,
        'total_questions': quiz_session.total_questions,
        'started_at': _iso(quiz_session.started_at),
        'completed_at': _iso(quiz_session.completed_at),
        'time_taken_seconds': quiz_session.time_taken_seconds,
    }


def portfolio_to_dict(portfolio: Portfolio):
    return {
        'student_id': portfolio.student_id,
        'virtual_assets': portfolio.virtual_assets,
        'total_return_rate': portfolio.total_return_rate,
        'total_return_rate_display': format_return_rate(portfolio.total_return_rate),
        'last_updated': _iso(portfolio.last_updated),
    }


def active_schedules(now: datetime | None = None):
    return [schedule_to_dict(s) for s in get_active_schedules(now)]


def start_session(student_id: int, schedule_id: int):
    return session_to_dict(session_service.start_session(student_id, schedule_id))


def submit_answer(session_id: int, question_index: int, option: str):
    return session_to_dict(session_service.submit_answer(session_id, question_index, option))


def complete_session(session_id: int, elapsed_seconds: int):
    result = session_service.complete_session(session_id, elapsed_seconds)
    return {
        'score': result.score,
        'total_questions': result.total_questions,
        'asset_delta': result.asset_delta,
        'portfolio': portfolio_to_dict(result.portfolio),
    }


def rankings(grade: int | None = None, class_number: int | None = None, limit: int | None = None):
    return [asdict(row) for row in ranking_service.get_rankings(grade, class_number, limit)]


def portfolio(student_id: int):
    return {
        'portfolio': portfolio_to_dict(get_portfolio(student_id)),
        'history': portfolio_history(student_id),
        'rank': ranking_service.student_rank(student_id),
    }


def basic_analytics(now: datetime | None = None):
    return analytics_service.basic_analytics(now)


def detailed_analytics(now: datetime | None = None):
    return analytics_service.detailed_analytics(now)
