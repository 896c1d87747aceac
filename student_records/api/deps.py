from typing import Generator

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from student_records.core.database import Database


def get_database(request: Request) -> Database:
    """The Database owned by the application."""
    return request.app.state.database


def get_db(database: Database = Depends(get_database)) -> Generator[Session, None, None]:
    """
    Dependency to get a database session.
    Fails fast with 503 while the database is not connected, and closes
    the session when the request is done.
    """
    database.ensure_connected()
    yield from database.session()
