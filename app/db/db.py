import os
from sqlalchemy import event
from sqlmodel import Session, SQLModel, create_engine
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./campus_market.db")


def make_engine(url: str, **kwargs):
    connect_args = {}

    if url.startswith("sqlite"):
        # sessions are handed across FastAPI's threadpool
        connect_args["check_same_thread"] = False

    engine = create_engine(
        url,
        echo=os.getenv("SQL_ECHO", "false").lower() == "true",
        connect_args=connect_args,
        **kwargs,
    )

    if url.startswith("sqlite"):
        @event.listens_for(engine, "connect")
        def _sqlite_pragmas(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA busy_timeout = 30000")
            cursor.close()

    return engine


engine = make_engine(DATABASE_URL)


def init_db(bind=None):
    # register every table on the metadata before create_all
    from app.models import ad, favorite, rating, report, user  # noqa: F401

    SQLModel.metadata.create_all(bind or engine)


def get_session():
    with Session(engine) as session:
        yield session
