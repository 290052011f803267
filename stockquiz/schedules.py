"""Quiz schedules and the matcher that decides which ones are open right now."""
import json
import logging
from datetime import date, datetime, time
from typing import Iterable

from sqlmodel import select

from stockquiz.clock import now_utc, ensure_utc, to_schedule_time
from stockquiz.db import get_session
from stockquiz.errors import InvalidScheduleError, NoActiveScheduleError, ScheduleNotFoundError
from stockquiz.models import QuizSchedule, SCHEDULE_TYPES
from stockquiz.questions import get_questions

logger = logging.getLogger(__name__)


def weekday_index(moment: datetime) -> int:
    """0=Sunday, 1=Monday ... 6=Saturday."""
    return moment.isoweekday() % 7


def is_schedule_open(schedule: QuizSchedule, now: datetime) -> bool:
    local = to_schedule_time(now)
    today = local.date()
    clock_time = local.time().replace(microsecond=0, tzinfo=None)

    if not schedule.is_active:
        return False
    if today < schedule.start_date:
        return False
    if schedule.end_date is not None and today > schedule.end_date:
        return False
    # windows crossing midnight are not supported and never open
    if schedule.end_time < schedule.start_time:
        return False
    if not (schedule.start_time <= clock_time <= schedule.end_time):
        return False

    if schedule.schedule_type == "daily":
        return True
    if schedule.schedule_type == "weekly":
        return weekday_index(local) in schedule.weekday_set
    if schedule.schedule_type == "once":
        return today == schedule.start_date
    return False


def active_schedules(now: datetime, schedules: Iterable[QuizSchedule]) -> list[QuizSchedule]:
    """Schedules open at ``now``, most recently created first."""
    open_now = [s for s in schedules if is_schedule_open(s, now)]
    return sorted(open_now, key=lambda s: ensure_utc(s.created_at), reverse=True)


def _validate(question_ids, schedule_type, weekdays, start_date, end_date, time_limit_minutes):
    if schedule_type not in SCHEDULE_TYPES:
        raise InvalidScheduleError(f"Unknown schedule type: {schedule_type}")
    if not question_ids:
        raise InvalidScheduleError("A schedule needs at least one question")
    if schedule_type == "weekly" and not weekdays:
        raise InvalidScheduleError("Weekly schedules need at least one weekday")
    if any(d not in range(7) for d in weekdays or ()):
        raise InvalidScheduleError("Weekdays must be between 0 (Sunday) and 6 (Saturday)")
    if end_date is not None and end_date < start_date:
        raise InvalidScheduleError("End date is before start date")
    if time_limit_minutes <= 0:
        raise InvalidScheduleError("Time limit must be positive")


def create_schedule(
    title: str,
    question_ids: list[int],
    start_time: time,
    end_time: time,
    start_date: date,
    schedule_type: str = "daily",
    weekdays: list[int] | None = None,
    end_date: date | None = None,
    time_limit_minutes: int = 10,
    is_active: bool = True,
) -> QuizSchedule:
    _validate(question_ids, schedule_type, weekdays, start_date, end_date, time_limit_minutes)
    known = {q.id for q in get_questions(question_ids)}
    missing = [qid for qid in question_ids if qid not in known]
    if missing:
        raise InvalidScheduleError(f"Unknown question ids: {missing}")
    if end_time < start_time:
        logger.warning("Schedule %r ends before it starts and will never be open", title)

    with get_session() as session:
        schedule = QuizSchedule(
            title=title,
            question_ids=json.dumps(list(question_ids)),
            schedule_type=schedule_type,
            weekdays=json.dumps(sorted(set(weekdays))) if weekdays else None,
            start_time=start_time,
            end_time=end_time,
            start_date=start_date,
            end_date=end_date,
            time_limit_minutes=time_limit_minutes,
            is_active=is_active,
        )
        session.add(schedule)
        session.commit()
        session.refresh(schedule)
        return schedule


def get_schedule(schedule_id: int) -> QuizSchedule:
    with get_session() as session:
        schedule = session.get(QuizSchedule, schedule_id)
        if not schedule:
            raise ScheduleNotFoundError()
        return schedule


def list_schedules():
    with get_session() as session:
        q = select(QuizSchedule).order_by(QuizSchedule.created_at.desc())
        return list(session.exec(q))


def set_schedule_active(schedule_id: int, active: bool = True) -> QuizSchedule:
    with get_session() as session:
        schedule = session.get(QuizSchedule, schedule_id)
        if not schedule:
            raise ScheduleNotFoundError()
        schedule.is_active = active
        session.add(schedule)
        session.commit()
        session.refresh(schedule)
        return schedule


def get_active_schedules(now: datetime | None = None) -> list[QuizSchedule]:
    now = now or now_utc()
    with get_session() as session:
        q = select(QuizSchedule).where(QuizSchedule.is_active == True)  # noqa: E712
        candidates = list(session.exec(q))
    return active_schedules(now, candidates)


def get_active_schedule(now: datetime | None = None) -> QuizSchedule:
    schedules = get_active_schedules(now)
    if not schedules:
        raise NoActiveScheduleError()
    return schedules[0]
