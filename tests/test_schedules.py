from datetime import date, datetime, time

import pytest

from stockquiz.errors import InvalidScheduleError, NoActiveScheduleError, ScheduleNotFoundError
from stockquiz.schedules import (
    create_schedule,
    get_active_schedule,
    get_active_schedules,
    get_schedule,
    list_schedules,
    set_schedule_active,
)


def test_create_schedule_persists_fields(make_questions):
    ids = make_questions(3)
    schedule = create_schedule(
        'Weekly economy',
        ids,
        start_time=time(9, 0),
        end_time=time(9, 30),
        start_date=date(2024, 1, 1),
        end_date=date(2024, 6, 30),
        schedule_type='weekly',
        weekdays=[5, 1, 3, 3],
        time_limit_minutes=15,
    )
    loaded = get_schedule(schedule.id)
    assert loaded.question_id_list == ids
    assert loaded.weekday_set == {1, 3, 5}
    assert loaded.start_time == time(9, 0)
    assert loaded.end_date == date(2024, 6, 30)
    assert loaded.time_limit_minutes == 15
    assert schedule.id in [s.id for s in list_schedules()]


@pytest.mark.parametrize('kwargs', [
    {'schedule_type': 'monthly'},
    {'schedule_type': 'weekly', 'weekdays': []},
    {'schedule_type': 'weekly', 'weekdays': [7]},
    {'end_date': date(2023, 12, 31)},
    {'time_limit_minutes': 0},
])
def test_create_schedule_rejects_bad_input(make_questions, kwargs):
    ids = make_questions(1)
    with pytest.raises(InvalidScheduleError):
        create_schedule('bad', ids, time(9, 0), time(10, 0), date(2024, 1, 1), **kwargs)


def test_create_schedule_needs_known_questions(make_questions):
    with pytest.raises(InvalidScheduleError):
        create_schedule('empty', [], time(9, 0), time(10, 0), date(2024, 1, 1))
    ids = make_questions(1)
    with pytest.raises(InvalidScheduleError):
        create_schedule('unknown', ids + [999999], time(9, 0), time(10, 0), date(2024, 1, 1))


def test_missing_schedule_raises():
    with pytest.raises(ScheduleNotFoundError):
        get_schedule(999999)


def test_active_schedules_from_store(make_schedule):
    open_quiz = make_schedule(count=1, title='open', start_time=time(14, 0), end_time=time(14, 20))
    later = make_schedule(count=1, title='later', start_time=time(15, 0), end_time=time(15, 20))

    ids = [s.id for s in get_active_schedules(datetime(2024, 2, 1, 14, 10))]
    assert open_quiz.id in ids
    assert later.id not in ids

    set_schedule_active(open_quiz.id, False)
    ids = [s.id for s in get_active_schedules(datetime(2024, 2, 1, 14, 10))]
    assert open_quiz.id not in ids


def test_no_active_schedule_raises():
    # every schedule created by the tests starts in 2024
    with pytest.raises(NoActiveScheduleError):
        get_active_schedule(datetime(1990, 1, 1, 3, 17))


def test_get_active_schedule_returns_newest(make_schedule):
    make_schedule(count=1, title='first', start_date=date(2030, 1, 1), start_time=time(5, 0), end_time=time(5, 1))
    second = make_schedule(count=1, title='second', start_date=date(2030, 1, 1), start_time=time(5, 0), end_time=time(5, 1))
    assert get_active_schedule(datetime(2030, 1, 1, 5, 0, 30)).id == second.id
