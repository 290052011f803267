from sqlmodel import select

from stockquiz.db import get_session
from stockquiz.errors import StudentNotFoundError
from stockquiz.models import Student


def create_student(name: str, grade: int, class_number: int, number: int, phone: str | None = None) -> Student:
    with get_session() as session:
        q = select(Student).where(
            Student.grade == grade,
            Student.class_number == class_number,
            Student.number == number,
            Student.name == name,
        )
        existing = session.exec(q).first()
        if existing:
            raise ValueError("Student already exists")
        student = Student(name=name, grade=grade, class_number=class_number, number=number, phone=phone)
        session.add(student)
        session.commit()
        session.refresh(student)
        return student


def get_student(student_id: int) -> Student:
    with get_session() as session:
        student = session.get(Student, student_id)
        if not student:
            raise StudentNotFoundError()
        return student


def get_students(student_ids=None) -> dict[int, Student]:
    """Return a student_id -> Student map, optionally restricted to ``student_ids``."""
    with get_session() as session:
        q = select(Student)
        if student_ids is not None:
            q = q.where(Student.id.in_(list(student_ids)))
        return {s.id: s for s in session.exec(q)}
