from datetime import date, datetime, time

import pytest

from stockquiz import api
from stockquiz.errors import AlreadyCompletedError


def test_quiz_flow_through_api(make_student, make_schedule):
    api.init_app()
    student = make_student(grade=4, class_number=12)
    schedule = make_schedule(
        count=10,
        title='Api quiz',
        schedule_type='weekly',
        weekdays=[1, 3, 5],
        start_time=time(9, 0),
        end_time=time(9, 30),
        start_date=date(2025, 6, 2),
    )

    # Tuesday 09:15 is outside the Mon/Wed/Fri schedule
    tuesday = [s['id'] for s in api.active_schedules(datetime(2025, 6, 3, 9, 15))]
    assert schedule.id not in tuesday
    wednesday = api.active_schedules(datetime(2025, 6, 4, 9, 15))
    listed = [s for s in wednesday if s['id'] == schedule.id]
    assert listed and listed[0]['weekdays'] == [1, 3, 5]
    assert listed[0]['start_time'] == '09:00:00'

    started = api.start_session(student.id, schedule.id)
    assert started['status'] == 'in_progress'
    assert api.start_session(student.id, schedule.id)['id'] == started['id']

    for index in range(10):
        answered = api.submit_answer(started['id'], index, 'A' if index < 8 else 'C')
    assert answered['score'] == 8
    assert answered['answers']['9']['selected_option'] == 'C'

    completed = api.complete_session(started['id'], 245)
    assert completed['score'] == 8
    assert completed['asset_delta'] == 30_000
    assert completed['portfolio']['virtual_assets'] == 1_030_000
    assert completed['portfolio']['total_return_rate_display'] == '+3.00%'

    with pytest.raises(AlreadyCompletedError):
        api.start_session(student.id, schedule.id)

    rows = api.rankings(grade=4, class_number=12)
    assert rows[0]['student_id'] == student.id
    assert rows[0]['rank'] == 1
    assert rows[0]['quizzes_completed'] == 1

    overview = api.portfolio(student.id)
    assert overview['portfolio']['virtual_assets'] == 1_030_000
    assert overview['history']['portfolio_value'] == [1_000_000, 1_030_000]
    assert overview['rank'] >= 1
