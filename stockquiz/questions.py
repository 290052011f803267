from typing import Iterable

from sqlmodel import select

from stockquiz.db import get_session
from stockquiz.errors import QuestionNotFoundError
from stockquiz.models import Question, OPTION_KEYS


def normalize_option(value) -> str:
    if value is None:
        return ""
    return str(value).strip().upper()


def create_question(
    title: str,
    content: str,
    options: dict,
    correct_answer: str,
    difficulty: int = 1,
    category: str | None = None,
) -> Question:
    """options: dict with exactly the keys A, B, C, D"""
    keys = {normalize_option(k) for k in options}
    if keys != set(OPTION_KEYS):
        raise ValueError("A question needs exactly four options A-D")
    correct = normalize_option(correct_answer)
    if correct not in OPTION_KEYS:
        raise ValueError("Correct answer must be one of A, B, C, D")
    texts = {normalize_option(k): v for k, v in options.items()}
    with get_session() as session:
        question = Question(
            title=title,
            content=content,
            option_a=texts["A"],
            option_b=texts["B"],
            option_c=texts["C"],
            option_d=texts["D"],
            correct_answer=correct,
            difficulty=difficulty,
            category=category,
        )
        session.add(question)
        session.commit()
        session.refresh(question)
        return question


def get_question(question_id: int) -> Question:
    with get_session() as session:
        question = session.get(Question, question_id)
        if not question:
            raise QuestionNotFoundError()
        return question


def get_questions(question_ids: Iterable[int]) -> list[Question]:
    """Return questions in the order of ``question_ids``; unknown ids are skipped."""
    ids = list(question_ids)
    if not ids:
        return []
    with get_session() as session:
        q = select(Question).where(Question.id.in_(ids))
        by_id = {question.id: question for question in session.exec(q)}
    return [by_id[qid] for qid in ids if qid in by_id]
