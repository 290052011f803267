from sqlmodel import SQLModel, create_engine, Session

from stockquiz.config import DATABASE_URL

connect_args = {}
if DATABASE_URL.startswith("sqlite"):
    connect_args = {"check_same_thread": False}

engine = create_engine(DATABASE_URL, echo=False, connect_args=connect_args)


def init_db():
    # tables register on SQLModel.metadata when the models module is imported
    import stockquiz.models  # noqa: F401
    SQLModel.metadata.create_all(engine)


def get_session():
    return Session(engine, expire_on_commit=False)
