import pytest

from stockquiz.errors import StudentNotFoundError
from stockquiz.models import Portfolio, return_rate
from stockquiz.portfolio import (
    apply_quiz_result,
    asset_delta,
    format_return_rate,
    get_portfolio,
    portfolio_history,
)
from stockquiz.sessions import complete_session, start_session, submit_answer


@pytest.mark.parametrize('score, total, delta', [
    (10, 10, 50_000),
    (9, 10, 50_000),
    (90, 100, 50_000),
    (89, 100, 30_000),
    (8, 10, 30_000),
    (79, 100, 15_000),
    (7, 10, 15_000),
    (3, 5, 5_000),
    (69, 100, 5_000),
    (1, 2, 0),
    (59, 100, 0),
    (49, 100, -20_000),
    (0, 10, -20_000),
    (2, 3, 5_000),
    (1, 3, -20_000),
])
def test_asset_delta_tiers(score, total, delta):
    assert asset_delta(score, total) == delta


def test_asset_delta_depends_only_on_percentage():
    assert asset_delta(9, 10) == asset_delta(90, 100) == asset_delta(18, 20)
    assert asset_delta(4, 5) == asset_delta(80, 100)


@pytest.mark.parametrize('score, total', [(1, 0), (0, 0), (-1, 10), (11, 10)])
def test_asset_delta_rejects_impossible_scores(score, total):
    with pytest.raises(ValueError):
        asset_delta(score, total)


def test_return_rate_is_derived_from_assets():
    portfolio = Portfolio(student_id=1, virtual_assets=1_030_000)
    assert portfolio.total_return_rate == pytest.approx(3.0)
    portfolio.virtual_assets = 960_000
    assert portfolio.total_return_rate == pytest.approx(-4.0)
    assert return_rate(1_000_000) == 0
    assert 'total_return_rate' not in Portfolio.__table__.columns


def test_format_return_rate():
    assert format_return_rate(3.0) == '+3.00%'
    assert format_return_rate(0) == '+0.00%'
    assert format_return_rate(-2.456) == '-2.46%'


def test_portfolio_created_lazily_at_starting_balance(make_student):
    student = make_student()
    portfolio = get_portfolio(student.id)
    assert portfolio.virtual_assets == 1_000_000
    assert get_portfolio(student.id).id == portfolio.id


def test_portfolio_needs_known_student():
    with pytest.raises(StudentNotFoundError):
        get_portfolio(999999)


def test_apply_quiz_result_has_no_floor(make_student):
    student = make_student()
    portfolio = None
    for _ in range(51):
        portfolio = apply_quiz_result(student.id, 0, 10)
    assert portfolio.virtual_assets == 1_000_000 - 51 * 20_000
    assert portfolio.virtual_assets < 0
    assert portfolio.total_return_rate == pytest.approx(-102.0)


def test_portfolio_history_replays_settled_sessions(make_student, make_schedule):
    student = make_student()
    for correct in (9, 4):
        schedule = make_schedule(count=10)
        quiz_session = start_session(student.id, schedule.id)
        for index in range(correct):
            submit_answer(quiz_session.id, index, 'A')
        complete_session(quiz_session.id, elapsed_seconds=60)

    history = portfolio_history(student.id)
    assert history['portfolio_value'] == [1_000_000, 1_050_000, 1_030_000]
    assert history['return_rate'][-1] == pytest.approx(3.0)
    assert [q['score'] for q in history['quiz_scores']] == [9, 4]
    assert history['portfolio_value'][-1] == get_portfolio(student.id).virtual_assets
