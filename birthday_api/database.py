import logging

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

logger = logging.getLogger(__name__)

Base = declarative_base()


def build_engine(database_url: str) -> Engine:
    connect_args = {}
    if database_url.startswith("sqlite"):
        # Sessions are handed across the threadpool FastAPI runs sync handlers in
        connect_args["check_same_thread"] = False
    return create_engine(database_url, connect_args=connect_args, pool_pre_ping=True)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def connect_or_exit(engine: Engine) -> None:
    """Verify the database is reachable and create tables, exiting the process otherwise."""
    from birthday_api.models import user  # noqa: F401

    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError as exc:
        logger.critical("Cannot connect to the database at %s: %s", engine.url.render_as_string(), exc)
        raise SystemExit(1) from exc
    logger.info("Connected to database %s", engine.url.render_as_string())


def get_db(request: Request):
    session_factory = request.app.state.context.session_factory
    db = session_factory()
    try:
        yield db
    finally:
        db.close()
