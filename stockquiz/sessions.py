"""One student's attempt at one scheduled quiz.

A session is in progress from creation until ``complete_session`` sets
``completed_at``; there is no other state. A (student, schedule) pair has at
most one session, enforced by a unique constraint. Completion and the
portfolio update commit together, so a session is either completed and settled
or still in progress.

Writes to a session are conditional on the answer log read in the same
transaction; when another request changed it first, the write is re-read and
retried up to ``MAX_WRITE_ATTEMPTS`` times.
"""
import json
import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import col, select

from stockquiz.clock import now_utc
from stockquiz.db import get_session
from stockquiz.errors import (
    AlreadyCompletedError,
    ConcurrentUpdateError,
    InvalidOptionError,
    InvalidQuestionIndexError,
    InvalidScheduleError,
    QuestionNotFoundError,
    SessionAlreadyCompletedError,
    SessionNotFoundError,
    StudentNotFoundError,
)
from stockquiz.models import OPTION_KEYS, Portfolio, Question, QuizSchedule, QuizSession, Student
from stockquiz.portfolio import add_assets, asset_delta, get_portfolio
from stockquiz.questions import get_questions, normalize_option
from stockquiz.schedules import get_schedule

logger = logging.getLogger(__name__)

# re-reads allowed when another request changed the answer log first
MAX_WRITE_ATTEMPTS = 5


@dataclass
class CompletionResult:
    session: QuizSession
    score: int
    total_questions: int
    asset_delta: int
    portfolio: Portfolio


def _find_pair(session, student_id: int, schedule_id: int):
    q = select(QuizSession).where(
        QuizSession.student_id == student_id,
        QuizSession.schedule_id == schedule_id,
    )
    return session.exec(q).first()


def _resume(existing: QuizSession) -> QuizSession:
    if existing.completed_at is not None:
        raise AlreadyCompletedError()
    return existing


def start_session(student_id: int, schedule_id: int, question_ids=None, now: datetime | None = None) -> QuizSession:
    """Start or resume the student's session for a schedule.

    question_ids defaults to the schedule's list; whichever is used is frozen
    on the session so a resumed quiz shows the same questions in the same order.
    """
    schedule = get_schedule(schedule_id)
    ids = list(question_ids) if question_ids is not None else schedule.question_id_list
    if not ids:
        raise InvalidScheduleError("A schedule needs at least one question")

    with get_session() as session:
        existing = _find_pair(session, student_id, schedule_id)
        if existing:
            return _resume(existing)
        if not session.get(Student, student_id):
            raise StudentNotFoundError()

        quiz_session = QuizSession(
            student_id=student_id,
            schedule_id=schedule_id,
            question_ids=json.dumps(ids),
            answers="{}",
            score=0,
            total_questions=len(ids),
            started_at=now or now_utc(),
        )
        session.add(quiz_session)
        try:
            session.commit()
        except IntegrityError:
            # another request created the pair first
            session.rollback()
            return _resume(_find_pair(session, student_id, schedule_id))
        session.refresh(quiz_session)
        logger.info("Started session %s for student %s on schedule %s", quiz_session.id, student_id, schedule_id)
        return quiz_session


def _load_open(session, session_id: int) -> QuizSession:
    quiz_session = session.get(QuizSession, session_id)
    if not quiz_session:
        raise SessionNotFoundError()
    if quiz_session.completed_at is not None:
        raise SessionAlreadyCompletedError()
    return quiz_session


def _answer_entry(question: Question, option: str, now: datetime) -> dict:
    return {
        'selected_option': option,
        'is_correct': option == question.correct_answer,
        'answered_at': now.isoformat(),
    }


def submit_answer(session_id: int, question_index: int, selected_option: str, now: datetime | None = None) -> QuizSession:
    """Record an answer; a later answer at the same index replaces the earlier one.

    The write only lands if the answer log is still the one that was read, so
    concurrent answers to other questions are kept.
    """
    option = normalize_option(selected_option)
    if option not in OPTION_KEYS:
        raise InvalidOptionError()
    now = now or now_utc()

    for _ in range(MAX_WRITE_ATTEMPTS):
        with get_session() as session:
            quiz_session = _load_open(session, session_id)
            if not 0 <= question_index < quiz_session.total_questions:
                raise InvalidQuestionIndexError(
                    f"Question index {question_index} is outside 0..{quiz_session.total_questions - 1}"
                )
            question = session.get(Question, quiz_session.question_id_list[question_index])
            if not question:
                raise QuestionNotFoundError()

            read_answers = quiz_session.answers
            log = quiz_session.answer_log
            log[question_index] = _answer_entry(question, option, now)
            score = sum(1 for entry in log.values() if entry['is_correct'])
            answers = json.dumps({str(k): v for k, v in sorted(log.items())})

            result = session.exec(
                update(QuizSession)
                .where(
                    col(QuizSession.id) == session_id,
                    col(QuizSession.completed_at).is_(None),
                    col(QuizSession.answers) == read_answers,
                )
                .values(answers=answers, score=score)
            )
            if result.rowcount != 1:
                # completed or answered elsewhere meanwhile; the next read decides which
                session.rollback()
                continue
            session.commit()
            session.refresh(quiz_session)
            return quiz_session
    raise ConcurrentUpdateError()


def complete_session(session_id: int, elapsed_seconds: int, now: datetime | None = None) -> CompletionResult:
    if elapsed_seconds is None or elapsed_seconds < 0:
        raise ValueError("elapsed_seconds must be a non-negative number")
    now = now or now_utc()

    student_id = get_quiz_session(session_id).student_id
    get_portfolio(student_id, now)

    for _ in range(MAX_WRITE_ATTEMPTS):
        with get_session() as session:
            quiz_session = _load_open(session, session_id)
            read_answers = quiz_session.answers
            total = quiz_session.total_questions
            # unanswered questions simply have no entry and count as incorrect
            score = sum(
                1 for idx, entry in quiz_session.answer_log.items()
                if idx < total and entry.get('is_correct')
            )
            delta = asset_delta(score, total)

            result = session.exec(
                update(QuizSession)
                .where(
                    col(QuizSession.id) == session_id,
                    col(QuizSession.completed_at).is_(None),
                    col(QuizSession.answers) == read_answers,
                )
                .values(
                    completed_at=now,
                    score=score,
                    time_taken_seconds=int(elapsed_seconds),
                    asset_delta=delta,
                    settled_at=now,
                )
            )
            if result.rowcount != 1:
                session.rollback()
                logger.warning("Session %s changed while completing", session_id)
                continue
            add_assets(session, student_id, delta, now)
            session.commit()
            break
    else:
        raise ConcurrentUpdateError()

    logger.info("Completed session %s: %s/%s, assets %+d", session_id, score, total, delta)
    return CompletionResult(
        session=get_quiz_session(session_id),
        score=score,
        total_questions=total,
        asset_delta=delta,
        portfolio=get_portfolio(student_id),
    )


def settle_session(session_id: int, now: datetime | None = None):
    """Apply a completed session that never reached the portfolio.

    Returns the updated portfolio, or None when the session was already settled.
    """
    now = now or now_utc()
    quiz_session = get_quiz_session(session_id)
    if quiz_session.completed_at is None:
        raise ValueError("Session is not completed yet")
    if quiz_session.settled_at is not None:
        return None
    delta = asset_delta(quiz_session.score, quiz_session.total_questions)

    get_portfolio(quiz_session.student_id, now)
    with get_session() as session:
        result = session.exec(
            update(QuizSession)
            .where(
                col(QuizSession.id) == session_id,
                col(QuizSession.completed_at).is_not(None),
                col(QuizSession.settled_at).is_(None),
            )
            .values(settled_at=now, asset_delta=delta)
        )
        if result.rowcount != 1:
            session.rollback()
            return None
        add_assets(session, quiz_session.student_id, delta, now)
        session.commit()
    logger.info("Settled session %s: %+d", session_id, delta)
    return get_portfolio(quiz_session.student_id)


def get_quiz_session(session_id: int) -> QuizSession:
    with get_session() as session:
        quiz_session = session.get(QuizSession, session_id)
        if not quiz_session:
            raise SessionNotFoundError()
        return quiz_session


def find_session(student_id: int, schedule_id: int):
    with get_session() as session:
        return _find_pair(session, student_id, schedule_id)


def has_completed(student_id: int, schedule_id: int) -> bool:
    existing = find_session(student_id, schedule_id)
    return existing is not None and existing.completed_at is not None


def get_completed_sessions(student_id: int):
    with get_session() as session:
        q = (
            select(QuizSession)
            .where(QuizSession.student_id == student_id, col(QuizSession.completed_at).is_not(None))
            .order_by(QuizSession.completed_at, QuizSession.id)
        )
        return list(session.exec(q))


def completed_session_counts() -> dict[int, int]:
    with get_session() as session:
        q = (
            select(QuizSession.student_id, func.count(QuizSession.id))
            .where(col(QuizSession.completed_at).is_not(None))
            .group_by(QuizSession.student_id)
        )
        return {student_id: count for student_id, count in session.exec(q)}


def session_results(session_id: int):
    """Per-question breakdown of a session, in presentation order."""
    quiz_session = get_quiz_session(session_id)
    with get_session() as session:
        schedule = session.get(QuizSchedule, quiz_session.schedule_id)
    questions = {q.id: q for q in get_questions(quiz_session.question_id_list)}
    log = quiz_session.answer_log

    results = []
    for idx, qid in enumerate(quiz_session.question_id_list):
        question = questions.get(qid)
        entry = log.get(idx) or {}
        results.append({
            'question_index': idx,
            'question_id': qid,
            'title': question.title if question else '',
            'content': question.content if question else '',
            'options': {k: question.option_text(k) for k in OPTION_KEYS} if question else {},
            'selected_option': entry.get('selected_option', ''),
            'correct_answer': question.correct_answer if question else '',
            'correct': bool(entry.get('is_correct')),
        })
    return {
        'session_id': quiz_session.id,
        'schedule_id': quiz_session.schedule_id,
        'schedule_title': schedule.title if schedule else '',
        'status': quiz_session.status,
        'score': quiz_session.score,
        'total_questions': quiz_session.total_questions,
        'time_taken_seconds': quiz_session.time_taken_seconds or 0,
        'started_at': quiz_session.started_at.isoformat() if quiz_session.started_at else None,
        'completed_at': quiz_session.completed_at.isoformat() if quiz_session.completed_at else None,
        'results': results,
    }
