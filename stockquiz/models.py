import json
from datetime import date, datetime, time
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field

from stockquiz.clock import now_utc
from stockquiz.config import STARTING_ASSETS

SCHEDULE_TYPES = ("daily", "weekly", "once")
OPTION_KEYS = ("A", "B", "C", "D")


def return_rate(virtual_assets: int) -> float:
    return (virtual_assets - STARTING_ASSETS) / STARTING_ASSETS * 100


class Student(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    grade: int = Field(index=True)
    class_number: int = Field(index=True)
    number: int
    phone: Optional[str] = None
    created_at: datetime = Field(default_factory=now_utc)


class Question(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    content: str
    option_a: str
    option_b: str
    option_c: str
    option_d: str
    correct_answer: str  # A|B|C|D
    difficulty: int = Field(default=1)
    category: Optional[str] = None
    created_at: datetime = Field(default_factory=now_utc)

    def option_text(self, key: str) -> str:
        return getattr(self, f"option_{key.lower()}")


class QuizSchedule(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    question_ids: str = Field(default="[]")  # JSON list, order is presentation order
    schedule_type: str = Field(default="daily")  # daily|weekly|once
    weekdays: Optional[str] = None  # JSON list, 0=Sunday .. 6=Saturday
    start_time: time
    end_time: time
    start_date: date
    end_date: Optional[date] = None
    time_limit_minutes: int = Field(default=10)
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=now_utc)

    @property
    def question_id_list(self) -> list[int]:
        return json.loads(self.question_ids) if self.question_ids else []

    @property
    def weekday_set(self) -> set[int]:
        return set(json.loads(self.weekdays)) if self.weekdays else set()


class QuizSession(SQLModel, table=True):
    __table_args__ = (
        UniqueConstraint("student_id", "schedule_id", name="uq_quizsession_student_schedule"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    student_id: int = Field(foreign_key="student.id", index=True)
    schedule_id: int = Field(foreign_key="quizschedule.id", index=True)
    question_ids: str = Field(default="[]")  # JSON list, frozen at creation
    answers: str = Field(default="{}")  # JSON: {index: {selected_option, is_correct, answered_at}}
    score: int = Field(default=0)
    total_questions: int
    started_at: datetime = Field(default_factory=now_utc)
    completed_at: Optional[datetime] = None
    time_taken_seconds: Optional[int] = None
    asset_delta: Optional[int] = None
    settled_at: Optional[datetime] = None

    @property
    def question_id_list(self) -> list[int]:
        return json.loads(self.question_ids) if self.question_ids else []

    @property
    def answer_log(self) -> dict[int, dict]:
        raw = json.loads(self.answers) if self.answers else {}
        return {int(k): v for k, v in raw.items()}

    @property
    def status(self) -> str:
        return "completed" if self.completed_at is not None else "in_progress"


class Portfolio(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    student_id: int = Field(foreign_key="student.id", unique=True)
    virtual_assets: int = Field(default=STARTING_ASSETS)
    created_at: datetime = Field(default_factory=now_utc)
    last_updated: datetime = Field(default_factory=now_utc)

    @property
    def total_return_rate(self) -> float:
        return return_rate(self.virtual_assets)
