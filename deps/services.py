from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Iterator

from fastapi import Depends
from sqlalchemy.orm import Session

from ai import GeminiClient
from db import SessionLocal
from problem_service import ProblemService, TextGenerator
from store import SessionStore


def get_db() -> Iterator[Session]:
    """One SQLAlchemy session per request, closed afterwards."""
    with SessionLocal() as db:
        yield db


@lru_cache
def get_generator() -> TextGenerator:
    # one client per process; it holds no per-request state
    return GeminiClient()


def get_store(db: Annotated[Session, Depends(get_db)]) -> SessionStore:
    return SessionStore(db)


def get_problem_service(
    store: Annotated[SessionStore, Depends(get_store)],
    generator: Annotated[TextGenerator, Depends(get_generator)],
) -> ProblemService:
    return ProblemService(store, generator)
