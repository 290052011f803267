import itertools
import os
from datetime import date, time

import pytest

DB_FILE = os.path.join(os.path.dirname(__file__), 'test_app.db')
os.environ['DATABASE_URL'] = f"sqlite:///{DB_FILE}"
os.environ['QUIZ_TIMEZONE'] = 'Asia/Seoul'

from stockquiz.db import engine, init_db  # noqa: E402
from stockquiz.questions import create_question  # noqa: E402
from stockquiz.schedules import create_schedule  # noqa: E402
from stockquiz.students import create_student  # noqa: E402

OPTIONS = {'A': 'one', 'B': 'two', 'C': 'three', 'D': 'four'}

_numbers = itertools.count(1)


@pytest.fixture(scope='session', autouse=True)
def reset_db():
    # Ensure a clean DB for the test session
    try:
        os.remove(DB_FILE)
    except OSError:
        pass
    init_db()
    yield
    engine.dispose()
    try:
        os.remove(DB_FILE)
    except OSError:
        pass


@pytest.fixture
def make_student():
    def _make(grade=1, class_number=1, name=None):
        n = next(_numbers)
        return create_student(name or f"Student {n}", grade, class_number, n)
    return _make


@pytest.fixture
def make_questions():
    def _make(count=10, correct='A'):
        return [
            create_question(f"Q{i+1}", f"Question {i+1}?", OPTIONS, correct).id
            for i in range(count)
        ]
    return _make


@pytest.fixture
def make_schedule(make_questions):
    def _make(count=10, **kwargs):
        question_ids = kwargs.pop('question_ids', None) or make_questions(count)
        fields = dict(
            title='Daily quiz',
            start_time=time(0, 0),
            end_time=time(23, 59, 59),
            start_date=date(2024, 1, 1),
        )
        fields.update(kwargs)
        return create_schedule(question_ids=question_ids, **fields)
    return _make
